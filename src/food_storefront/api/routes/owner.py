from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.api.deps import get_current_actor
from food_storefront.crud import product as product_crud
from food_storefront.crud import restaurant as restaurant_crud
from food_storefront.crud.order import count_by_status, filter_by_status, list_restaurant_orders
from food_storefront.crud.order_status import allowed_transitions, transition
from food_storefront.db.deps import get_async_session
from food_storefront.crud.access import Actor
from food_storefront.models import OrderStatusEnum
from food_storefront.schemas.order import OrderList, OrderRead, OrderStatusUpdate
from food_storefront.schemas.product import ProductCreate, ProductRead, ProductUpdate
from food_storefront.schemas.restaurant import RestaurantCreate, RestaurantRead, RestaurantUpdate


router = APIRouter(prefix="/owner", tags=["restaurant owner"])

# --- Ресторан ---

@router.get("/restaurant", response_model=RestaurantRead)
async def read_my_restaurant(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    return await restaurant_crud.get_restaurant_for_owner(db, actor)


@router.post("/restaurant", response_model=RestaurantRead, status_code=201)
async def register_restaurant(
    restaurant_in: RestaurantCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Регистрация ресторана. До одобрения администратором он скрыт от покупателей.
    """
    return await restaurant_crud.create_restaurant(db, actor, restaurant_in)


@router.patch("/restaurant", response_model=RestaurantRead)
async def patch_my_restaurant(
    restaurant_in: RestaurantUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    return await restaurant_crud.update_restaurant(db, actor, restaurant_in)


# --- Меню ---

@router.get("/products", response_model=List[ProductRead])
async def list_my_products(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Все товары ресторана, включая недоступные.
    """
    return await product_crud.list_owner_products(db, actor)


@router.post("/products", response_model=ProductRead, status_code=201)
async def create_product_endpoint(
    product_in: ProductCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    return await product_crud.create_product(db, actor, product_in)


@router.patch("/products/{product_id}", response_model=ProductRead)
async def patch_product_endpoint(
    product_in: ProductUpdate,
    product_id: int = Path(..., description="ID товара"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Частичное обновление товара.
    Поддерживаемые поля: name, description, category, price, image_url, available.
    """
    return await product_crud.update_product(db, actor, product_id, product_in)


@router.post("/products/{product_id}/toggle", response_model=ProductRead)
async def toggle_product_endpoint(
    product_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Переключает доступность товара без удаления.
    """
    return await product_crud.toggle_availability(db, actor, product_id)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product_endpoint(
    product_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await product_crud.delete_product(db, actor, product_id)


# --- Заказы ---

@router.get("/orders", response_model=OrderList)
async def list_incoming_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Заказы ресторана, новые первыми.
    counts: количество по статусам для вкладок, считается по всем заказам.
    """
    orders = await list_restaurant_orders(db, actor)
    shown = filter_by_status(orders, status)
    return OrderList(
        orders=[OrderRead.from_orm_with_names(o, sorted(allowed_transitions(o.status))) for o in shown],
        counts=count_by_status(orders),
    )


@router.post("/orders/{order_id}/status", response_model=OrderRead)
async def change_order_status(
    status_in: OrderStatusUpdate,
    order_id: int = Path(..., description="ID заказа"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Переход статуса заказа: confirmed, preparing, delivered или cancelled.
    """
    order = await transition(db, actor, order_id, status_in.status)
    return OrderRead.from_orm_with_names(order, sorted(allowed_transitions(order.status)))
