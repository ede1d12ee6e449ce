from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from food_storefront.models.order import OrderStatusEnum, PaymentMethodEnum


class OrderItemRead(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price: Decimal
    line_total: Decimal

    @classmethod
    def from_orm_item(cls, item):
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            price=item.price,
            line_total=(item.price * item.quantity).quantize(Decimal("0.01")),
        )


class OrderRead(BaseModel):
    id: int
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    restaurant_id: int
    restaurant_name: Optional[str] = None
    status: OrderStatusEnum
    payment_method: PaymentMethodEnum
    delivery_address: str
    contact_number: str
    request_token: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItemRead] = []
    total_price: Decimal
    count_items: int
    allowed_transitions: List[OrderStatusEnum] = []

    @classmethod
    def from_orm_with_names(cls, order, allowed_transitions=()):
        """
        Собирает заказ вместе с позициями, рестораном и покупателем.
        Связи должны быть подгружены заранее (selectinload).
        """
        count = sum(item.quantity for item in order.items)
        customer = order.customer
        restaurant = order.restaurant

        return cls(
            id=order.id,
            customer_id=order.customer_id,
            customer_name=customer.display_name if customer else None,
            customer_email=customer.email if customer else None,
            restaurant_id=order.restaurant_id,
            restaurant_name=restaurant.name if restaurant else None,
            status=order.status,
            payment_method=order.payment_method,
            delivery_address=order.delivery_address,
            contact_number=order.contact_number,
            request_token=order.request_token,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemRead.from_orm_item(i) for i in order.items],
            total_price=order.total_price,
            count_items=count,
            allowed_transitions=list(allowed_transitions),
        )


class OrderList(BaseModel):
    orders: List[OrderRead]
    counts: dict[str, int]


class OrderCreate(BaseModel):
    delivery_address: str = Field(..., max_length=512)
    contact_number: str = Field(..., max_length=64)
    payment_method: PaymentMethodEnum = PaymentMethodEnum.cash
    request_token: Optional[str] = Field(None, max_length=64)

    class Config:
        extra = "forbid"


class OrderStatusUpdate(BaseModel):
    status: OrderStatusEnum

    class Config:
        extra = "forbid"
