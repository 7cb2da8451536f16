# schemas/sale.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal
from decimal import Decimal


class SaleLineIn(BaseModel):
    # Log book rows may arrive without a product selected; they are dropped at commit
    product_id: int | None = None
    quantity: int = 1
    unit_price: Decimal | None = Field(None, ge=0, decimal_places=2)


class SaleCreate(BaseModel):
    items: List[SaleLineIn]
    request_id: str | None = Field(None, max_length=64)


class QuoteRequest(BaseModel):
    items: List[SaleLineIn]
    mode: Literal["pos", "log"] = "pos"


class QuoteResponse(BaseModel):
    mode: str
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    unit_count: int


class SaleItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str | None
    quantity: int
    price_at_sale: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


class SaleResponse(BaseModel):
    id: int
    entry_mode: str
    subtotal_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    created_at: datetime
    created_by: int | None
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True
