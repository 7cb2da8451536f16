# =========================================================
# REPORTING ENGINE
#
# Read-only figures derived from sale history:
# - today / month revenue, 7 day trend
# - active product and order counts
# - filtered history + CSV / XLSX export
#
# Day boundaries are UTC calendar days. Revenue is always
# the sum of Sale.total_amount (tax included for POS sales).
# =========================================================

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.errors import PersistenceError
from app.models.products import Product, STATUS_ACTIVE
from app.models.sale_items import SaleItem
from app.models.sales import Sale
from app.services.cart import money

EXPORT_HEADER = ["Receipt ID", "Date", "Total Amount", "Items Count"]
EXPORT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _day_bounds(start_date: date, end_date: date):
    return (
        datetime.combine(start_date, datetime.min.time(), tzinfo=timezone.utc),
        datetime.combine(end_date, datetime.max.time(), tzinfo=timezone.utc),
    )


def _revenue_between(db: Session, start_date: date, end_date: date) -> Decimal:
    start_dt, end_dt = _day_bounds(start_date, end_date)

    total = (
        db.query(func.coalesce(func.sum(Sale.total_amount), 0))
        .filter(Sale.created_at.between(start_dt, end_dt))
        .scalar()
    )

    return money(total or 0)


def today_revenue(db: Session, today: Optional[date] = None) -> Decimal:
    today = today or utc_today()
    return _revenue_between(db, today, today)


def month_revenue(db: Session, today: Optional[date] = None) -> Decimal:
    today = today or utc_today()
    return _revenue_between(db, today.replace(day=1), today)


def weekly_trend(db: Session, today: Optional[date] = None) -> List[tuple]:
    """Seven (date, revenue) pairs ending today, oldest first, zero filled."""
    today = today or utc_today()
    start_date = today - timedelta(days=6)
    start_dt, end_dt = _day_bounds(start_date, today)

    buckets = {start_date + timedelta(days=i): Decimal("0.00") for i in range(7)}

    rows = (
        db.query(Sale.created_at, Sale.total_amount)
        .filter(Sale.created_at.between(start_dt, end_dt))
        .all()
    )

    for created_at, total_amount in rows:
        day = _as_utc(created_at).date()
        if day in buckets:
            buckets[day] = money(buckets[day] + total_amount)

    return sorted(buckets.items())


def active_product_count(db: Session) -> int:
    return (
        db.query(func.count(Product.id))
        .filter(Product.status == STATUS_ACTIVE)
        .scalar()
    ) or 0


def order_count(db: Session) -> int:
    return db.query(func.count(Sale.id)).scalar() or 0


def category_counts(db: Session) -> List[tuple]:
    rows = (
        db.query(Product.category, func.count(Product.id))
        .group_by(Product.category)
        .order_by(Product.category)
        .all()
    )
    return [(category or "Uncategorized", count) for category, count in rows]


def recent_sales(db: Session, limit: int = 5) -> List[Sale]:
    return (
        db.query(Sale)
        .options(joinedload(Sale.items).joinedload(SaleItem.product))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )


def dashboard_stats(db: Session, today: Optional[date] = None) -> dict:
    today = today or utc_today()

    return {
        "today": today,
        "today_revenue": today_revenue(db, today),
        "month_revenue": month_revenue(db, today),
        "active_products": active_product_count(db),
        "total_orders": order_count(db),
        "weekly_trend": [
            {"date": day, "revenue": revenue}
            for day, revenue in weekly_trend(db, today)
        ],
        "categories": [
            {"category": category, "products": count}
            for category, count in category_counts(db)
        ],
        "recent_sales": recent_sales(db),
    }


def empty_dashboard(today: Optional[date] = None, error: Optional[str] = None) -> dict:
    today = today or utc_today()
    zero = Decimal("0.00")

    return {
        "today": today,
        "today_revenue": zero,
        "month_revenue": zero,
        "active_products": 0,
        "total_orders": 0,
        "weekly_trend": [
            {"date": today - timedelta(days=i), "revenue": zero}
            for i in range(6, -1, -1)
        ],
        "categories": [],
        "recent_sales": [],
        "error": error,
    }


# =========================================================
# FILTERED HISTORY
# =========================================================
@dataclass
class SaleFilter:
    search: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes, they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _matches_search(sale: Sale, search: str) -> bool:
    return search in str(sale.id) or search in f"{money(sale.total_amount):.2f}"


def filter_sales(
    db: Session,
    filters: Optional[SaleFilter] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[Sale]:
    filters = filters or SaleFilter()

    query = db.query(Sale).options(
        joinedload(Sale.items).joinedload(SaleItem.product)
    )

    if filters.start_date:
        query = query.filter(Sale.created_at >= _day_bounds(filters.start_date, filters.start_date)[0])

    if filters.end_date:
        query = query.filter(Sale.created_at <= _day_bounds(filters.end_date, filters.end_date)[1])

    if filters.min_amount is not None:
        query = query.filter(Sale.total_amount >= filters.min_amount)

    if filters.max_amount is not None:
        query = query.filter(Sale.total_amount <= filters.max_amount)

    try:
        sales = query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Unable to read sales history", exc) from exc

    search = (filters.search or "").strip()
    if search:
        sales = [sale for sale in sales if _matches_search(sale, search)]

    if limit is not None:
        return sales[offset:offset + limit]
    return sales[offset:]


# =========================================================
# EXPORTS
# =========================================================
def export_rows(sales: List[Sale]) -> List[list]:
    rows = [list(EXPORT_HEADER)]

    for sale in sales:
        rows.append([
            str(sale.id),
            _as_utc(sale.created_at).strftime(EXPORT_DATE_FORMAT),
            f"{money(sale.total_amount):.2f}",
            str(len(sale.items)),
        ])

    return rows


def export_csv(sales: List[Sale]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(export_rows(sales))
    return buffer.getvalue()


def export_filename(today: Optional[date] = None, extension: str = "csv") -> str:
    today = today or utc_today()
    return f"leonisa_sales_report_{today.isoformat()}.{extension}"


def build_sales_workbook(
    sales: List[Sale],
    store_name: str,
    currency: str,
    filters: Optional[SaleFilter] = None,
) -> bytes:
    workbook = Workbook()

    # =======================
    # SHEET 1 - RAW SALES
    # =======================
    sheet = workbook.active
    sheet.title = "Sales Data"

    sheet.append([
        "Date",
        "Receipt ID",
        "Mode",
        "Product",
        "Quantity",
        "Unit Price",
        "Line Total",
        "Total Sale Amount",
    ])
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    total_revenue = Decimal("0.00")
    total_tax = Decimal("0.00")
    units = 0

    for sale in sales:
        total_revenue += sale.total_amount
        total_tax += sale.tax_amount

        for item in sale.items:
            units += item.quantity
            sheet.append([
                _as_utc(sale.created_at).strftime(EXPORT_DATE_FORMAT),
                sale.id,
                sale.entry_mode,
                item.product_name or f"Product #{item.product_id}",
                item.quantity,
                float(item.price_at_sale),
                float(item.line_total),
                float(sale.total_amount),
            ])

    # =======================
    # SHEET 2 - SUMMARY
    # =======================
    summary = workbook.create_sheet(title="Summary")

    filters = filters or SaleFilter()
    period_start = filters.start_date.isoformat() if filters.start_date else "beginning"
    period_end = filters.end_date.isoformat() if filters.end_date else "today"

    summary.append(["Store", store_name])
    summary.append(["Period", f"{period_start} to {period_end}"])
    summary.append([])
    summary.append(["Receipts", len(sales)])
    summary.append(["Units Sold", units])
    summary.append([f"Total Revenue ({currency})", float(total_revenue)])
    summary.append([f"Tax Collected ({currency})", float(total_tax)])

    if sales:
        summary.append([
            f"Average Receipt ({currency})",
            float(money(total_revenue / len(sales))),
        ])

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()
