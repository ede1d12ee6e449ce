from pydantic import BaseModel, Field, condecimal
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ProductRead(BaseModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    available: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=64)
    price: condecimal(gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=512)
    available: bool = True

    class Config:
        extra = "forbid"


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=64)
    price: Optional[condecimal(gt=0, max_digits=10, decimal_places=2)] = None
    image_url: Optional[str] = Field(None, max_length=512)
    available: Optional[bool] = None

    class Config:
        extra = "forbid"


class MenuRead(BaseModel):
    restaurant_id: int
    categories: list[str]
    products: list[ProductRead]
