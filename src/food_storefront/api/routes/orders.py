from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Path
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.api.deps import get_current_actor
from food_storefront.crud.checkout import place_order
from food_storefront.crud.order import get_order_for_actor, list_customer_orders
from food_storefront.crud.order_status import allowed_transitions, can_manage
from food_storefront.db.deps import get_async_session
from food_storefront.crud.access import Actor
from food_storefront.schemas.order import OrderCreate, OrderRead


router = APIRouter(prefix="/orders", tags=["orders"])

@router.post("/", response_model=OrderRead, status_code=201)
async def create_order_endpoint(
    order_in: OrderCreate,
    idempotency_key: Optional[str] = Header(None, max_length=64, description="Ключ идемпотентности"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Оформляет заказ из корзины и очищает её.
    Повтор с тем же Idempotency-Key (или request_token) вернёт тот же заказ.
    """
    order = await place_order(
        db,
        actor,
        delivery_address=order_in.delivery_address,
        contact_number=order_in.contact_number,
        payment_method=order_in.payment_method,
        request_token=idempotency_key or order_in.request_token,
    )
    return OrderRead.from_orm_with_names(order)


@router.get("/", response_model=List[OrderRead])
async def list_my_orders(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    История заказов вызывающего, новые первыми.
    """
    orders = await list_customer_orders(db, actor)
    return [OrderRead.from_orm_with_names(o) for o in orders]


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int = Path(..., description="ID заказа"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Детализация заказа. Доступные переходы видны только тем, кто может их выполнить.
    """
    order = await get_order_for_actor(db, actor, order_id)
    transitions = sorted(allowed_transitions(order.status)) if can_manage(actor, order) else []
    return OrderRead.from_orm_with_names(order, transitions)
