from pydantic import BaseModel
from decimal import Decimal


class DashboardStats(BaseModel):
    total_users: int
    total_restaurants: int
    pending_restaurants: int
    total_orders: int
    total_revenue: Decimal
