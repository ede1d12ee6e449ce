from decimal import Decimal
from typing import List, Optional, Set

import structlog
from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_storefront.crud.access import Actor, require_role
from food_storefront.db.session import with_timeout
from food_storefront.exceptions import InvalidInput, NotFound, ProductUnavailable
from food_storefront.models import CartItem, Product, RoleEnum

logger = structlog.get_logger(__name__)


def _cart_stmt():
    return (
        select(CartItem)
        .options(selectinload(CartItem.product).selectinload(Product.restaurant))
        .execution_options(populate_existing=True)
    )


async def get_cart(db: AsyncSession, customer_id: int) -> List[CartItem]:
    """
    Возвращает позиции корзины с подгруженными товаром и рестораном.
    Порядок по времени добавления.
    """
    stmt = (
        _cart_stmt()
        .where(CartItem.customer_id == customer_id)
        .order_by(CartItem.created_at, CartItem.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().unique().all())


async def get_cart_line(db: AsyncSession, line_id: int) -> Optional[CartItem]:
    result = await db.execute(_cart_stmt().where(CartItem.id == line_id))
    return result.scalars().first()


async def _get_own_line(db: AsyncSession, actor: Actor, line_id: int) -> CartItem:
    line = await get_cart_line(db, line_id)
    if line is None or line.customer_id != actor.id:
        raise NotFound(f"Cart item with id={line_id} not found")
    return line


def subtotal_of(lines: List[CartItem]) -> Decimal:
    total = sum((line.product.price * line.quantity for line in lines), Decimal("0"))
    return total.quantize(Decimal("0.01"))


@with_timeout
async def compute_subtotal(db: AsyncSession, customer_id: int) -> Decimal:
    """Сумма price × quantity по всем позициям корзины, без побочных эффектов."""
    return subtotal_of(await get_cart(db, customer_id))


@with_timeout
async def restaurants_represented(db: AsyncSession, customer_id: int) -> Set[int]:
    stmt = (
        select(Product.restaurant_id)
        .join(CartItem, CartItem.product_id == Product.id)
        .where(CartItem.customer_id == customer_id)
        .distinct()
    )
    result = await db.execute(stmt)
    return set(result.scalars().all())


async def _increment_or_insert(db: AsyncSession, customer_id: int, product_id: int, quantity: int) -> int:
    result = await db.execute(
        select(CartItem.id)
        .where(CartItem.customer_id == customer_id, CartItem.product_id == product_id)
        .with_for_update()
    )
    line_id = result.scalars().first()

    if line_id is not None:
        await db.execute(
            update(CartItem)
            .where(CartItem.id == line_id)
            .values(quantity=CartItem.quantity + quantity)
        )
        return line_id

    line = CartItem(customer_id=customer_id, product_id=product_id, quantity=quantity)
    db.add(line)
    await db.flush()
    return line.id


@with_timeout
async def add_item(db: AsyncSession, actor: Actor, product_id: int, quantity: int = 1) -> CartItem:
    """
    Добавляет товар в корзину.
    Если позиция (покупатель, товар) уже есть, увеличивает количество.
    """
    require_role(actor, RoleEnum.customer)
    if quantity < 1:
        raise InvalidInput("Quantity must be at least 1")

    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .options(selectinload(Product.restaurant))
    )
    product = result.scalars().first()
    if product is None:
        raise NotFound(f"Product with id={product_id} not found")
    if not product.is_orderable:
        raise ProductUnavailable(f"Product with id={product_id} is not available")

    customer_id = actor.id
    try:
        line_id = await _increment_or_insert(db, customer_id, product_id, quantity)
        await db.commit()
    except IntegrityError:
        # параллельная вставка той же позиции: повторяем как увеличение
        await db.rollback()
        line_id = await _increment_or_insert(db, customer_id, product_id, quantity)
        await db.commit()

    logger.info("cart_item_added", customer_id=customer_id, product_id=product_id, quantity=quantity)
    return await get_cart_line(db, line_id)


@with_timeout
async def set_quantity(db: AsyncSession, actor: Actor, line_id: int, quantity: int) -> CartItem:
    """
    Меняет количество в позиции корзины.
    quantity < 1 молча игнорируется: удаляет только remove_item.
    """
    line = await _get_own_line(db, actor, line_id)
    if quantity < 1:
        return line

    line.quantity = quantity
    await db.commit()
    return await get_cart_line(db, line_id)


@with_timeout
async def remove_item(db: AsyncSession, actor: Actor, line_id: int) -> None:
    """Удаляет позицию; отсутствие позиции ошибкой не считается."""
    await db.execute(
        delete(CartItem).where(CartItem.id == line_id, CartItem.customer_id == actor.id)
    )
    await db.commit()


@with_timeout
async def clear_cart(db: AsyncSession, actor: Actor) -> None:
    await db.execute(delete(CartItem).where(CartItem.customer_id == actor.id))
    await db.commit()
    logger.info("cart_cleared", customer_id=actor.id)
