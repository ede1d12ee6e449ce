"""
Оформление заказа из корзины.

Заказ, его позиции и очистка корзины пишутся одной транзакцией: либо
фиксируется всё, либо ничего. Повтор с тем же request_token возвращает уже
созданный заказ и ничего не создаёт.
"""
import uuid
from decimal import Decimal
from typing import List, Optional

import structlog
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_storefront.config import settings
from food_storefront.crud.access import Actor, require_role
from food_storefront.crud.cart import subtotal_of
from food_storefront.crud.order import get_order_by_id, get_order_by_token
from food_storefront.db.session import bounded
from food_storefront.exceptions import (
    EmptyCart,
    InvalidInput,
    MultiRestaurantCart,
    PartialOrderFailure,
    ProductUnavailable,
    StorageTimeout,
)
from food_storefront.metrics import storefront_checkout_duration_seconds, storefront_checkout_total
from food_storefront.models import CartItem, Order, OrderItem, OrderStatusEnum, PaymentMethodEnum, Product, RoleEnum

logger = structlog.get_logger(__name__)


def order_total(lines: List[CartItem], delivery_fee: Decimal) -> Decimal:
    """Σ(price × quantity) + стоимость доставки."""
    return (subtotal_of(lines) + Decimal(delivery_fee)).quantize(Decimal("0.01"))


def _parse_payment_method(value) -> PaymentMethodEnum:
    try:
        return PaymentMethodEnum(value)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethodEnum)
        raise InvalidInput(f"Unknown payment method '{value}', expected one of: {allowed}")


async def _lock_cart(db: AsyncSession, customer_id: int) -> List[CartItem]:
    """
    Блокирует позиции корзины до конца транзакции (SELECT ... FOR UPDATE):
    второй параллельный checkout дождётся и увидит пустую корзину.
    """
    stmt = (
        select(CartItem)
        .where(CartItem.customer_id == customer_id)
        .options(selectinload(CartItem.product).selectinload(Product.restaurant))
        .order_by(CartItem.created_at, CartItem.id)
        .with_for_update(of=CartItem)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return list(result.scalars().unique().all())


async def _replay(db: AsyncSession, customer_id: int, token: str) -> Optional[Order]:
    existing = await get_order_by_token(db, token)
    if existing is None:
        return None
    if existing.customer_id != customer_id:
        raise InvalidInput("Request token is already in use")
    return existing


async def _build_order(
    db: AsyncSession,
    customer_id: int,
    token: str,
    delivery_address: str,
    contact_number: str,
    payment_method,
) -> Optional[Order]:
    """
    Проверки и сборка заказа в текущей транзакции (без commit).
    Возвращает None, если заказ с этим токеном уже существует.
    """
    lines = await _lock_cart(db, customer_id)
    if not lines:
        # корзина могла быть очищена предыдущей успешной попыткой с тем же токеном
        if await _replay(db, customer_id, token) is not None:
            return None
        raise EmptyCart("Cart is empty")

    restaurant_ids = {line.product.restaurant_id for line in lines}
    if len(restaurant_ids) > 1:
        raise MultiRestaurantCart(restaurant_ids)

    address = (delivery_address or "").strip()
    contact = (contact_number or "").strip()
    if not address or not contact:
        raise InvalidInput("Delivery address and contact number are required")
    method = _parse_payment_method(payment_method)

    unavailable = [line.product_id for line in lines if not line.product.is_orderable]
    if unavailable:
        raise ProductUnavailable(f"Products no longer available: {unavailable}")

    order = Order(
        customer_id=customer_id,
        restaurant_id=restaurant_ids.pop(),
        total_price=order_total(lines, settings.DELIVERY_FEE),
        payment_method=method,
        status=OrderStatusEnum.pending,
        delivery_address=address,
        contact_number=contact,
        request_token=token,
        items=[
            OrderItem(
                product_id=line.product_id,
                product_name=line.product.name,
                quantity=line.quantity,
                price=line.product.price,
            )
            for line in lines
        ],
    )
    db.add(order)
    await db.flush()

    # очищается вся корзина: к этому моменту в ней позиции только одного ресторана
    await db.execute(delete(CartItem).where(CartItem.customer_id == customer_id))
    return order


async def place_order(
    db: AsyncSession,
    actor: Actor,
    delivery_address: str,
    contact_number: str,
    payment_method=PaymentMethodEnum.cash,
    request_token: Optional[str] = None,
) -> Order:
    """
    Оформляет заказ из корзины покупателя.

    Ошибки проверки (EmptyCart, MultiRestaurantCart, InvalidInput,
    ProductUnavailable) ничего не меняют. Если не удалась сама фиксация
    транзакции, поднимается PartialOrderFailure с номером заказа и токеном:
    повтор с тем же токеном безопасен.
    """
    require_role(actor, RoleEnum.customer)
    customer_id = actor.id
    token = (request_token or "").strip() or uuid.uuid4().hex
    log = logger.bind(customer_id=customer_id, request_token=token)

    with storefront_checkout_duration_seconds.time():
        existing = await bounded(_replay(db, customer_id, token))
        if existing is not None:
            storefront_checkout_total.labels(outcome="replayed").inc()
            log.info("order_replayed", order_id=existing.id)
            return existing

        try:
            order = await bounded(
                _build_order(db, customer_id, token, delivery_address, contact_number, payment_method)
            )
        except IntegrityError:
            # параллельный запрос с тем же токеном успел первым
            await db.rollback()
            existing = await bounded(_replay(db, customer_id, token))
            if existing is None:
                storefront_checkout_total.labels(outcome="failed").inc()
                raise
            storefront_checkout_total.labels(outcome="replayed").inc()
            return existing
        except (EmptyCart, MultiRestaurantCart, InvalidInput, ProductUnavailable) as exc:
            await db.rollback()
            storefront_checkout_total.labels(outcome=exc.kind).inc()
            log.info("checkout_rejected", reason=exc.kind)
            raise
        except (SQLAlchemyError, StorageTimeout):
            await db.rollback()
            storefront_checkout_total.labels(outcome="failed").inc()
            log.exception("checkout_failed")
            raise

        if order is None:
            storefront_checkout_total.labels(outcome="replayed").inc()
            return await bounded(get_order_by_token(db, token))

        order_id = order.id
        try:
            await bounded(db.commit())
        except (SQLAlchemyError, StorageTimeout) as exc:
            await db.rollback()
            storefront_checkout_total.labels(outcome="partial").inc()
            log.error("checkout_commit_failed", order_id=order_id, error=str(exc))
            raise PartialOrderFailure(
                "Order commit did not complete; retry with the same request token",
                order_id=order_id,
                request_token=token,
            ) from exc

    storefront_checkout_total.labels(outcome="placed").inc()
    log.info("order_placed", order_id=order_id, total_price=str(order.total_price))
    return await bounded(get_order_by_id(db, order_id))
