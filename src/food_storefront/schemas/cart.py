from pydantic import BaseModel, conint
from typing import List
from decimal import Decimal


class CartItemRead(BaseModel):
    id: int
    product_id: int
    product_name: str
    restaurant_id: int
    restaurant_name: str | None = None
    price: Decimal
    quantity: int
    line_total: Decimal

    @classmethod
    def from_orm_with_product(cls, line):
        product = line.product
        restaurant = product.restaurant
        return cls(
            id=line.id,
            product_id=line.product_id,
            product_name=product.name,
            restaurant_id=product.restaurant_id,
            restaurant_name=restaurant.name if restaurant else None,
            price=product.price,
            quantity=line.quantity,
            line_total=(product.price * line.quantity).quantize(Decimal("0.01")),
        )


class CartRead(BaseModel):
    items: List[CartItemRead] = []
    restaurant_ids: List[int] = []
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal


class CartItemCreate(BaseModel):
    product_id: int
    quantity: conint(ge=1) = 1


class CartItemUpdate(BaseModel):
    # значения < 1 игнорируются, для удаления есть DELETE
    quantity: int
