from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class RestaurantRead(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    contact: Optional[str] = None
    image_url: Optional[str] = None
    approved: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RestaurantAdminRead(RestaurantRead):
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None

    @classmethod
    def from_orm_with_owner(cls, restaurant):
        data = RestaurantRead.model_validate(restaurant).model_dump()
        owner = restaurant.owner
        return cls(
            **data,
            owner_name=owner.display_name if owner else None,
            owner_email=owner.email if owner else None,
        )


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=255)
    contact: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = Field(None, max_length=512)

    class Config:
        extra = "forbid"


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=255)
    contact: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = Field(None, max_length=512)

    class Config:
        extra = "forbid"
