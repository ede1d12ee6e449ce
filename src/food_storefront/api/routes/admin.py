from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.api.deps import get_current_actor
from food_storefront.crud import restaurant as restaurant_crud
from food_storefront.crud.order import count_by_status, filter_by_status, list_all_orders
from food_storefront.crud.order_status import allowed_transitions, transition
from food_storefront.crud.stats import dashboard_stats
from food_storefront.crud.user import list_users
from food_storefront.db.deps import get_async_session
from food_storefront.crud.access import Actor
from food_storefront.models import OrderStatusEnum, RoleEnum
from food_storefront.schemas.order import OrderList, OrderRead, OrderStatusUpdate
from food_storefront.schemas.restaurant import RestaurantAdminRead
from food_storefront.schemas.stats import DashboardStats
from food_storefront.schemas.user import UserOut


router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/stats", response_model=DashboardStats)
async def get_dashboard(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Общая статистика:
    - пользователи, рестораны, ожидающие одобрения
    - количество заказов и выручка
    """
    return await dashboard_stats(db, actor)


# --- Заказы ---

@router.get("/orders", response_model=OrderList)
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Все заказы системы с рестораном и покупателем, новые первыми.
    """
    orders = await list_all_orders(db, actor)
    return OrderList(
        orders=[
            OrderRead.from_orm_with_names(o, sorted(allowed_transitions(o.status)))
            for o in filter_by_status(orders, status)
        ],
        counts=count_by_status(orders),
    )


@router.post("/orders/{order_id}/status", response_model=OrderRead)
async def change_order_status(
    status_in: OrderStatusUpdate,
    order_id: int = Path(..., description="ID заказа"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    order = await transition(db, actor, order_id, status_in.status)
    return OrderRead.from_orm_with_names(order, sorted(allowed_transitions(order.status)))


# --- Рестораны ---

@router.get("/restaurants", response_model=List[RestaurantAdminRead])
async def list_all_restaurants(
    approved: Optional[bool] = Query(None, description="true: одобренные, false: ожидающие"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    restaurants = await restaurant_crud.list_restaurants(db, actor, approved=approved)
    return [RestaurantAdminRead.from_orm_with_owner(r) for r in restaurants]


@router.post("/restaurants/{restaurant_id}/approve", response_model=RestaurantAdminRead)
async def approve_restaurant(
    restaurant_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    restaurant = await restaurant_crud.set_approval(db, actor, restaurant_id, True)
    return RestaurantAdminRead.from_orm_with_owner(restaurant)


@router.post("/restaurants/{restaurant_id}/revoke", response_model=RestaurantAdminRead)
async def revoke_restaurant(
    restaurant_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Отзыв одобрения: ресторан и его меню снова скрыты от покупателей.
    """
    restaurant = await restaurant_crud.set_approval(db, actor, restaurant_id, False)
    return RestaurantAdminRead.from_orm_with_owner(restaurant)


@router.delete("/restaurants/{restaurant_id}", status_code=204)
async def remove_restaurant(
    restaurant_id: int = Path(..., description="ID ресторана"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Удаляет ресторан.
    """
    await restaurant_crud.delete_restaurant(db, actor, restaurant_id)


# --- Пользователи ---

@router.get("/users", response_model=List[UserOut])
async def list_all_users(
    role: Optional[RoleEnum] = Query(None, description="Фильтр по роли"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    return await list_users(db, actor, role=role)
