from typing import List, Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_storefront.crud.access import Actor, require_role
from food_storefront.db.session import with_timeout
from food_storefront.exceptions import InvalidInput, NotFound
from food_storefront.models import Restaurant, RoleEnum
from food_storefront.schemas.restaurant import RestaurantCreate, RestaurantUpdate

logger = structlog.get_logger(__name__)


async def get_owned_restaurant(db: AsyncSession, actor: Actor) -> Restaurant:
    """Ресторан владельца; NotFound, если он ещё не зарегистрирован."""
    result = await db.execute(select(Restaurant).where(Restaurant.owner_id == actor.id))
    restaurant = result.scalars().first()
    if restaurant is None:
        raise NotFound("You have no restaurant yet")
    return restaurant


# --- Каталог для покупателей ---

@with_timeout
async def list_approved_restaurants(db: AsyncSession, search: Optional[str] = None) -> List[Restaurant]:
    """
    Одобренные рестораны, новые первыми.
    search: поиск по названию без учёта регистра.
    """
    stmt = (
        select(Restaurant)
        .where(Restaurant.approved.is_(True))
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    )
    if search and search.strip():
        stmt = stmt.where(func.lower(Restaurant.name).contains(search.strip().lower()))

    result = await db.execute(stmt)
    return list(result.scalars().all())


@with_timeout
async def get_public_restaurant(db: AsyncSession, restaurant_id: int) -> Restaurant:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.approved:
        raise NotFound(f"Restaurant with id={restaurant_id} not found")
    return restaurant


# --- Кабинет владельца ---

@with_timeout
async def get_restaurant_for_owner(db: AsyncSession, actor: Actor) -> Restaurant:
    require_role(actor, RoleEnum.restaurant)
    return await get_owned_restaurant(db, actor)


@with_timeout
async def create_restaurant(db: AsyncSession, actor: Actor, data: RestaurantCreate) -> Restaurant:
    """
    Регистрирует ресторан владельца.
    Новый ресторан не виден покупателям до одобрения администратором.
    """
    require_role(actor, RoleEnum.restaurant)
    existing = await db.execute(select(Restaurant.id).where(Restaurant.owner_id == actor.id))
    if existing.scalars().first() is not None:
        raise InvalidInput("Owner already has a restaurant")

    restaurant = Restaurant(owner_id=actor.id, approved=False, **data.model_dump())
    db.add(restaurant)
    await db.commit()
    await db.refresh(restaurant)

    logger.info("restaurant_registered", restaurant_id=restaurant.id, owner_id=actor.id)
    return restaurant


@with_timeout
async def update_restaurant(db: AsyncSession, actor: Actor, data: RestaurantUpdate) -> Restaurant:
    require_role(actor, RoleEnum.restaurant)
    restaurant = await get_owned_restaurant(db, actor)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key == "name":
            raise InvalidInput("Restaurant name cannot be null")
        setattr(restaurant, key, value)

    await db.commit()
    await db.refresh(restaurant)
    return restaurant


# --- Администрирование ---

@with_timeout
async def list_restaurants(db: AsyncSession, actor: Actor, approved: Optional[bool] = None) -> List[Restaurant]:
    """Все рестораны с владельцами; approved=True/False: фильтр одобренных/ожидающих."""
    require_role(actor, RoleEnum.admin)
    stmt = (
        select(Restaurant)
        .options(selectinload(Restaurant.owner))
        .execution_options(populate_existing=True)
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    )
    if approved is not None:
        stmt = stmt.where(Restaurant.approved.is_(approved))

    result = await db.execute(stmt)
    return list(result.scalars().all())


@with_timeout
async def set_approval(db: AsyncSession, actor: Actor, restaurant_id: int, approved: bool) -> Restaurant:
    """Одобрение или отзыв одобрения ресторана."""
    require_role(actor, RoleEnum.admin)
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .options(selectinload(Restaurant.owner))
        .execution_options(populate_existing=True)
    )
    restaurant = result.scalars().first()
    if restaurant is None:
        raise NotFound(f"Restaurant with id={restaurant_id} not found")

    restaurant.approved = approved
    await db.commit()

    logger.info("restaurant_approval_changed", restaurant_id=restaurant_id, approved=approved)
    return restaurant


@with_timeout
async def delete_restaurant(db: AsyncSession, actor: Actor, restaurant_id: int) -> None:
    """Удаляет ресторан вместе с товарами и заказами."""
    require_role(actor, RoleEnum.admin)
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound(f"Restaurant with id={restaurant_id} not found")

    await db.delete(restaurant)
    await db.commit()

    logger.warning("restaurant_deleted", restaurant_id=restaurant_id, admin_id=actor.id)
