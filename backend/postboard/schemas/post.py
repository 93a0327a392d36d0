from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    image_data: Optional[str] = None  # base64
    image_filename: Optional[str] = None


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)


class PostResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    price: Optional[Decimal] = None
    image_path: Optional[str] = None
    posted_at: datetime
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    is_active: bool


class PublicPostResponse(BaseModel):
    id: int
    title: str
    description: str
    price: Optional[Decimal] = None
    image_path: Optional[str] = None
    phone_number: str
    posted_at: datetime
    created_at: datetime
    expires_at: datetime
    is_active: bool


class DeletePostResponse(BaseModel):
    success: bool
    id: int
