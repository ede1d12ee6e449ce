from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.crud.access import Actor, require_role
from food_storefront.db.session import with_timeout
from food_storefront.exceptions import NotFound
from food_storefront.models import RoleEnum, User
from food_storefront.schemas.user import ProfileUpdate


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


@with_timeout
async def get_profile(db: AsyncSession, actor: Actor) -> User:
    user = await get_user(db, actor.id)
    if user is None:
        raise NotFound(f"User with id={actor.id} not found")
    return user


@with_timeout
async def update_profile(db: AsyncSession, actor: Actor, data: ProfileUpdate) -> User:
    """Обновляет профиль вызывающего (пока только полное имя)."""
    user = await get_profile(db, actor)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(user, key, value)
    await db.commit()
    await db.refresh(user)
    return user


@with_timeout
async def list_users(db: AsyncSession, actor: Actor, role: Optional[RoleEnum] = None) -> List[User]:
    """Список пользователей для администратора, новые первыми."""
    require_role(actor, RoleEnum.admin)
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    if role is not None:
        stmt = stmt.where(User.role == role)
    result = await db.execute(stmt)
    return list(result.scalars().all())
