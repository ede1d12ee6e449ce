from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.crud.access import Actor, require_role
from food_storefront.db.session import with_timeout
from food_storefront.models import Order, Restaurant, RoleEnum, User


@with_timeout
async def dashboard_stats(db: AsyncSession, actor: Actor) -> dict:
    """
    Сводка для панели администратора:
    - количество пользователей и ресторанов
    - рестораны, ожидающие одобрения
    - количество заказов и общая выручка
    """
    require_role(actor, RoleEnum.admin)

    total_users = await db.scalar(select(func.count(User.id)))
    total_restaurants = await db.scalar(select(func.count(Restaurant.id)))
    pending_restaurants = await db.scalar(
        select(func.count(Restaurant.id)).where(Restaurant.approved.is_(False))
    )

    # выручка: сумма зафиксированных total_price
    result = await db.execute(select(Order.total_price))
    totals = result.scalars().all()
    total_revenue = sum((Decimal(t) for t in totals), Decimal("0"))

    return {
        "total_users": total_users or 0,
        "total_restaurants": total_restaurants or 0,
        "pending_restaurants": pending_restaurants or 0,
        "total_orders": len(totals),
        "total_revenue": total_revenue.quantize(Decimal("0.01")),
    }
