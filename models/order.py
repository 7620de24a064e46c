from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUSES = [s.value for s in OrderStatus]


class ShippingAddress(BaseModel):
    street: str = Field(..., min_length=3, max_length=100)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    zip_code: str = Field(..., min_length=3, max_length=10)
    country: str = Field(..., min_length=1, max_length=50)

    @field_validator("street", "city", "state", "zip_code", "country", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class OrderItemIn(BaseModel):
    product_id: str = Field(..., pattern="^[0-9a-fA-F]{24}$")
    quantity: int = Field(..., ge=1, le=100)


class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1, max_length=20)
    shipping_address: ShippingAddress


class StatusUpdate(BaseModel):
    # Checked against ORDER_STATUSES by the service, not here.
    status: str
