from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.crud.product import filter_by_category, list_menu, menu_categories
from food_storefront.crud.restaurant import get_public_restaurant, list_approved_restaurants
from food_storefront.db.deps import get_async_session
from food_storefront.schemas.product import MenuRead, ProductRead
from food_storefront.schemas.restaurant import RestaurantRead


router = APIRouter(prefix="/restaurants", tags=["catalog"])

@router.get("/", response_model=List[RestaurantRead])
async def list_restaurants(
    search: Optional[str] = Query(None, description="Поиск по названию"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Одобренные рестораны, новые первыми.
    """
    return await list_approved_restaurants(db, search=search)


@router.get("/{restaurant_id}", response_model=RestaurantRead)
async def get_restaurant(
    restaurant_id: int = Path(..., description="ID ресторана"),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_public_restaurant(db, restaurant_id)


@router.get("/{restaurant_id}/menu", response_model=MenuRead)
async def get_menu(
    restaurant_id: int = Path(..., description="ID ресторана"),
    category: Optional[str] = Query(None, description="Фильтр по категории"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Доступные товары ресторана и список категорий.
    Категории считаются по полному меню, даже если задан фильтр.
    """
    products = await list_menu(db, restaurant_id)
    return MenuRead(
        restaurant_id=restaurant_id,
        categories=menu_categories(products),
        products=[ProductRead.model_validate(p) for p in filter_by_category(products, category)],
    )
