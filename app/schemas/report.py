# schemas/report.py

from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List

from app.schemas.sale import SaleResponse


class RevenuePoint(BaseModel):
    date: date
    revenue: Decimal


class CategoryCount(BaseModel):
    category: str
    products: int


class DashboardResponse(BaseModel):
    today: date
    today_revenue: Decimal
    month_revenue: Decimal
    active_products: int
    total_orders: int
    weekly_trend: List[RevenuePoint]
    categories: List[CategoryCount]
    recent_sales: List[SaleResponse]

    # Set when the figures could not be read; all numbers are zero in that case
    error: str | None = None
