"""
Жизненный цикл статуса заказа.

    pending -> confirmed -> preparing -> delivered
       |           |
       +-----------+--> cancelled

Переходы проверяются только по таблице TRANSITIONS. Менять статус может
владелец ресторана заказа или администратор; покупатель только читает.
Повторный переход в текущий статус считается успешным и ничего не пишет.
"""
from typing import FrozenSet

import structlog
from sqlalchemy import update, func
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.crud.access import Actor, is_admin
from food_storefront.crud.order import get_order_by_id
from food_storefront.db.session import with_timeout
from food_storefront.exceptions import Forbidden, IllegalTransition, InvalidInput, NotFound
from food_storefront.metrics import storefront_order_transition_total
from food_storefront.models import Order, OrderStatusEnum, RoleEnum

logger = structlog.get_logger(__name__)

S = OrderStatusEnum

TRANSITIONS: dict[OrderStatusEnum, FrozenSet[OrderStatusEnum]] = {
    S.pending: frozenset({S.confirmed, S.cancelled}),
    S.confirmed: frozenset({S.preparing, S.cancelled}),
    S.preparing: frozenset({S.delivered}),
    S.delivered: frozenset(),
    S.cancelled: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def allowed_transitions(status: OrderStatusEnum) -> FrozenSet[OrderStatusEnum]:
    return TRANSITIONS[OrderStatusEnum(status)]


def is_legal(current: OrderStatusEnum, target: OrderStatusEnum) -> bool:
    return OrderStatusEnum(target) in allowed_transitions(current)


def can_manage(actor: Actor, order: Order) -> bool:
    if is_admin(actor):
        return True
    return actor.role == RoleEnum.restaurant and order.restaurant.owner_id == actor.id


def check_transition(current: OrderStatusEnum, target: OrderStatusEnum) -> None:
    if not is_legal(current, target):
        raise IllegalTransition(OrderStatusEnum(current).value, OrderStatusEnum(target).value)


@with_timeout
async def transition(db: AsyncSession, actor: Actor, order_id: int, target_status) -> Order:
    """
    Переводит заказ в target_status.

    1. Загружаем заказ (NotFound).
    2. Проверяем права: админ или владелец ресторана заказа (Forbidden).
    3. target == текущий статус: успех без записи.
    4. Проверяем ребро по таблице (IllegalTransition).
    5. Пишем условным UPDATE ... WHERE status = текущий. Если параллельный
       вызов успел раньше: при том же целевом статусе успех, иначе IllegalTransition.
    """
    try:
        target = OrderStatusEnum(target_status)
    except ValueError:
        raise InvalidInput(f"Unknown order status: {target_status}")

    order = await get_order_by_id(db, order_id)
    if order is None:
        raise NotFound(f"Order with id={order_id} not found")
    if not can_manage(actor, order):
        raise Forbidden("Only the restaurant owner or an admin may change order status")

    current = order.status
    if current == target:
        return order
    check_transition(current, target)

    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == current)
        .values(status=target, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    changed = result.rowcount
    await db.commit()

    order = await get_order_by_id(db, order_id)
    if changed == 0:
        # статус поменял кто-то другой между чтением и записью
        if order.status == target:
            return order
        raise IllegalTransition(order.status.value, target.value)

    storefront_order_transition_total.labels(from_status=current.value, to_status=target.value).inc()
    logger.info(
        "order_status_changed",
        order_id=order_id,
        from_status=current.value,
        to_status=target.value,
        actor_id=actor.id,
    )
    return order
