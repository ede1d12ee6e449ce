from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from food_storefront.models.user import RoleEnum


class UserOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: RoleEnum
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=128)

    class Config:
        extra = "forbid"
