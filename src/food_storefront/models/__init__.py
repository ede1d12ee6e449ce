from .user import User, RoleEnum
from .restaurant import Restaurant
from .product import Product
from .cart_item import CartItem
from .order import Order, OrderStatusEnum, PaymentMethodEnum
from .order_item import OrderItem

__all__ = [
    "User",
    "RoleEnum",
    "Restaurant",
    "Product",
    "CartItem",
    "Order",
    "OrderStatusEnum",
    "PaymentMethodEnum",
    "OrderItem",
]
