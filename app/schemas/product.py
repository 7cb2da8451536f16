from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        decimal_places=2,
        description="Unit price, two decimal places, below 100 million"
    )

    category: str = Field("", max_length=100)
    status: Literal["active", "inactive"] = "active"


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0, lt=100_000_000, decimal_places=2)
    category: str | None = Field(None, max_length=100)
    status: Literal["active", "inactive"] | None = None


class ProductResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    category: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
