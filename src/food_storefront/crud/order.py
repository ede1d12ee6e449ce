from collections import Counter
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_storefront.crud.access import Actor, is_admin, require_role
from food_storefront.crud.restaurant import get_owned_restaurant
from food_storefront.db.session import with_timeout
from food_storefront.exceptions import InvalidInput, NotFound
from food_storefront.models import Order, OrderStatusEnum, RoleEnum


def _orders_stmt():
    """
    Базовый запрос: заказ + позиции + ресторан + покупатель.
    populate_existing, чтобы статус не брался из устаревшей identity map.
    """
    return (
        select(Order)
        .options(
            selectinload(Order.items),
            selectinload(Order.restaurant),
            selectinload(Order.customer),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .execution_options(populate_existing=True)
    )


async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
    """
    Возвращает заказ по ID с подгруженными items, restaurant и customer.
    Предотвращает MissingGreenlet при сериализации.
    """
    result = await db.execute(_orders_stmt().where(Order.id == order_id))
    return result.scalars().unique().first()


async def get_order_by_token(db: AsyncSession, request_token: str) -> Optional[Order]:
    result = await db.execute(_orders_stmt().where(Order.request_token == request_token))
    return result.scalars().unique().first()


def filter_by_status(orders: Iterable[Order], status: Optional[str] = None) -> List[Order]:
    """Фильтр по статусу поверх уже выбранных заказов; None означает все заказы."""
    if not status:
        return list(orders)
    try:
        wanted = OrderStatusEnum(status)
    except ValueError:
        raise InvalidInput(f"Unknown order status: {status}")
    return [o for o in orders if o.status == wanted]


def count_by_status(orders: Iterable[Order]) -> dict:
    """Количество заказов по каждому статусу плюс 'all'."""
    orders = list(orders)
    counts = Counter(o.status.value for o in orders)
    result = {s.value: counts.get(s.value, 0) for s in OrderStatusEnum}
    result["all"] = len(orders)
    return result


@with_timeout
async def list_customer_orders(db: AsyncSession, actor: Actor) -> List[Order]:
    """История заказов покупателя, новые первыми."""
    result = await db.execute(_orders_stmt().where(Order.customer_id == actor.id))
    return list(result.scalars().unique().all())


@with_timeout
async def list_restaurant_orders(db: AsyncSession, actor: Actor, status: Optional[str] = None) -> List[Order]:
    """
    Заказы ресторана, которым владеет вызывающий, новые первыми.
    status: необязательный фильтр по статусу.
    """
    require_role(actor, RoleEnum.restaurant)
    restaurant = await get_owned_restaurant(db, actor)
    result = await db.execute(_orders_stmt().where(Order.restaurant_id == restaurant.id))
    return filter_by_status(result.scalars().unique().all(), status)


@with_timeout
async def list_all_orders(db: AsyncSession, actor: Actor, status: Optional[str] = None) -> List[Order]:
    """Все заказы системы (только для администратора)."""
    require_role(actor, RoleEnum.admin)
    result = await db.execute(_orders_stmt())
    return filter_by_status(result.scalars().unique().all(), status)


@with_timeout
async def get_order_for_actor(db: AsyncSession, actor: Actor, order_id: int) -> Order:
    """
    Заказ, видимый вызывающему:
    покупатель видит свои, владелец заказы своего ресторана, админ любые.
    Чужой заказ неотличим от несуществующего.
    """
    order = await get_order_by_id(db, order_id)
    if order is None:
        raise NotFound(f"Order with id={order_id} not found")

    if is_admin(actor):
        return order
    if actor.role == RoleEnum.customer and order.customer_id == actor.id:
        return order
    if actor.role == RoleEnum.restaurant and order.restaurant.owner_id == actor.id:
        return order
    raise NotFound(f"Order with id={order_id} not found")


