from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.crud.access import Actor, require_role
from food_storefront.crud.restaurant import get_owned_restaurant
from food_storefront.db.session import with_timeout
from food_storefront.exceptions import InvalidInput, NotFound
from food_storefront.models import Product, Restaurant, RoleEnum
from food_storefront.schemas.product import ProductCreate, ProductUpdate

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = {"name", "price", "available"}


@with_timeout
async def list_menu(db: AsyncSession, restaurant_id: int) -> List[Product]:
    """
    Меню для покупателя: только доступные товары одобренного ресторана,
    отсортированные по категории.
    """
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.approved:
        raise NotFound(f"Restaurant with id={restaurant_id} not found")

    stmt = (
        select(Product)
        .where(Product.restaurant_id == restaurant_id, Product.available.is_(True))
        .order_by(Product.category.asc(), Product.id.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


def filter_by_category(products: List[Product], category: Optional[str] = None) -> List[Product]:
    """None или "all" возвращает всё меню."""
    if not category or category == "all":
        return list(products)
    return [p for p in products if p.category == category]


def menu_categories(products: List[Product]) -> List[str]:
    """Уникальные непустые категории в порядке появления."""
    seen = []
    for product in products:
        if product.category and product.category not in seen:
            seen.append(product.category)
    return seen


async def _get_owned_product(db: AsyncSession, actor: Actor, product_id: int) -> Product:
    require_role(actor, RoleEnum.restaurant)
    restaurant = await get_owned_restaurant(db, actor)
    product = await db.get(Product, product_id)
    if product is None or product.restaurant_id != restaurant.id:
        raise NotFound(f"Product with id={product_id} not found")
    return product


@with_timeout
async def list_owner_products(db: AsyncSession, actor: Actor) -> List[Product]:
    """Все товары ресторана владельца, включая недоступные, новые первыми."""
    require_role(actor, RoleEnum.restaurant)
    restaurant = await get_owned_restaurant(db, actor)
    result = await db.execute(
        select(Product)
        .where(Product.restaurant_id == restaurant.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    return list(result.scalars().all())


@with_timeout
async def create_product(db: AsyncSession, actor: Actor, data: ProductCreate) -> Product:
    require_role(actor, RoleEnum.restaurant)
    restaurant = await get_owned_restaurant(db, actor)

    product = Product(restaurant_id=restaurant.id, **data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)

    logger.info("product_created", product_id=product.id, restaurant_id=restaurant.id)
    return product


@with_timeout
async def update_product(db: AsyncSession, actor: Actor, product_id: int, data: ProductUpdate) -> Product:
    """
    Частичное обновление товара.
    Цена в уже оформленных заказах не меняется, там хранится снимок.
    """
    product = await _get_owned_product(db, actor, product_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in REQUIRED_FIELDS:
            raise InvalidInput(f"Field '{key}' cannot be null")
        setattr(product, key, value)

    await db.commit()
    await db.refresh(product)
    return product


@with_timeout
async def toggle_availability(db: AsyncSession, actor: Actor, product_id: int) -> Product:
    product = await _get_owned_product(db, actor, product_id)
    product.available = not product.available
    await db.commit()
    await db.refresh(product)

    logger.info("product_availability_toggled", product_id=product_id, available=product.available)
    return product


@with_timeout
async def delete_product(db: AsyncSession, actor: Actor, product_id: int) -> None:
    product = await _get_owned_product(db, actor, product_id)
    await db.delete(product)
    await db.commit()
    logger.info("product_deleted", product_id=product_id)
