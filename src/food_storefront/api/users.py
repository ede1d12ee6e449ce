from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .deps import get_current_actor
from ..crud.access import Actor
from ..crud.user import get_profile, update_profile
from ..db.deps import get_async_session
from ..schemas.user import ProfileUpdate, UserOut

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me", response_model=UserOut)
async def read_profile(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_profile(db, actor)


@router.patch("/me", response_model=UserOut)
async def patch_profile(
    profile_in: ProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Обновление собственного профиля.
    """
    return await update_profile(db, actor, profile_in)
