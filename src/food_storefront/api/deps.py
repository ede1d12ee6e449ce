from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.crud.access import Actor
from food_storefront.crud.user import get_user
from food_storefront.db.deps import get_async_session


async def get_current_actor(
    x_user_id: Optional[int] = Header(None, description="ID пользователя от провайдера аутентификации"),
    db: AsyncSession = Depends(get_async_session),
) -> Actor:
    """
    Вызывающий пользователь.
    Аутентификация выполняется внешним провайдером, сюда приходит уже проверенный ID.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not identify caller",
    )
    if x_user_id is None:
        raise credentials_exception

    user = await get_user(db, x_user_id)
    if user is None:
        raise credentials_exception
    return Actor.from_user(user)
