from decimal import Decimal

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from food_storefront.api.deps import get_current_actor
from food_storefront.config import settings
from food_storefront.crud import cart as cart_crud
from food_storefront.crud.access import Actor, require_role
from food_storefront.db.deps import get_async_session
from food_storefront.models import RoleEnum
from food_storefront.schemas.cart import CartItemCreate, CartItemRead, CartItemUpdate, CartRead


router = APIRouter(prefix="/cart", tags=["cart"])

@router.get("/", response_model=CartRead)
async def read_cart(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Корзина покупателя: позиции, подытог, доставка и итог.
    при restaurant_ids > 1 оформить заказ нельзя, пока не останется один ресторан.
    """
    require_role(actor, RoleEnum.customer)
    lines = await cart_crud.get_cart(db, actor.id)
    subtotal = cart_crud.subtotal_of(lines)
    fee = settings.DELIVERY_FEE if lines else Decimal("0.00")
    return CartRead(
        items=[CartItemRead.from_orm_with_product(line) for line in lines],
        restaurant_ids=sorted({line.product.restaurant_id for line in lines}),
        subtotal=subtotal,
        delivery_fee=fee,
        total=subtotal + fee,
    )


@router.post("/items", response_model=CartItemRead, status_code=201)
async def add_cart_item(
    item_in: CartItemCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    line = await cart_crud.add_item(db, actor, item_in.product_id, item_in.quantity)
    return CartItemRead.from_orm_with_product(line)


@router.patch("/items/{line_id}", response_model=CartItemRead)
async def update_cart_item(
    item_in: CartItemUpdate,
    line_id: int = Path(..., description="ID позиции корзины"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Изменение количества. quantity < 1 игнорируется.
    """
    line = await cart_crud.set_quantity(db, actor, line_id, item_in.quantity)
    return CartItemRead.from_orm_with_product(line)


@router.delete("/items/{line_id}", status_code=204)
async def delete_cart_item(
    line_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await cart_crud.remove_item(db, actor, line_id)


@router.delete("/", status_code=204)
async def clear_cart(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_async_session),
):
    await cart_crud.clear_cart(db, actor)
