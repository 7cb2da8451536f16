# =========================================================
# SALES ROUTER
#
# Two ways to record a sale:
# - /sales/checkout : POS basket, flat tax folded into total
# - /sales/log      : manual log book entry, no tax
#
# Both go through the sale recorder, which writes the sale
# and its items as one transaction.
# =========================================================

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_current_user, SessionContext
from app.schemas.sale import SaleCreate, SaleResponse, QuoteRequest, QuoteResponse
from app.services import sale_recorder
from app.services.cart import CommitLine, SalePolicy
from app.services.reporting import SaleFilter, filter_sales
from app.core.rate_limiter import limiter

router = APIRouter(prefix="/sales", tags=["Sales"])


def _commit_lines(items) -> list[CommitLine]:
    return [
        CommitLine(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for item in items
    ]


def sale_filter_params(
    search: Optional[str] = Query(None, description="Receipt ID or amount contains"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
) -> SaleFilter:
    return SaleFilter(
        search=search,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
    )


# =========================================================
# QUOTE (TOTALS PREVIEW, NOTHING SAVED)
# =========================================================
@router.post("/quote", response_model=QuoteResponse)
def quote_sale(
    quote_data: QuoteRequest,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    policy = SalePolicy(quote_data.mode)
    totals = sale_recorder.quote(db, _commit_lines(quote_data.items), policy)

    return QuoteResponse(
        mode=policy.value,
        subtotal=totals.subtotal,
        tax_rate=totals.tax_rate,
        tax=totals.tax,
        total=totals.total,
        unit_count=totals.unit_count,
    )


# =========================================================
# POS CHECKOUT
# =========================================================
@router.post("/checkout", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def checkout(
    request: Request,
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    return sale_recorder.record_sale(
        db,
        _commit_lines(sale_data.items),
        SalePolicy.POS,
        acting_user=current_user,
        request_id=sale_data.request_id,
    )


# =========================================================
# LOG BOOK ENTRY
# =========================================================
@router.post("/log", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def log_sale(
    request: Request,
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    return sale_recorder.record_sale(
        db,
        _commit_lines(sale_data.items),
        SalePolicy.LOG,
        acting_user=current_user,
        request_id=sale_data.request_id,
    )


# =========================================================
# LIST SALES (FILTERED HISTORY)
# =========================================================
@router.get("", response_model=list[SaleResponse])
def list_sales(
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
    filters: SaleFilter = Depends(sale_filter_params),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return filter_sales(db, filters, limit=limit, offset=offset)


# =========================================================
# GET SINGLE SALE (RECEIPT)
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    sale = sale_recorder.get_sale(db, sale_id)

    if not sale:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sale not found",
        )

    return sale
