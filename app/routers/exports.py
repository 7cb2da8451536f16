from io import BytesIO

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.auth import get_admin_user
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.routers.sales import sale_filter_params
from app.services.reporting import (
    SaleFilter,
    build_sales_workbook,
    export_csv,
    export_filename,
    filter_sales,
)

router = APIRouter(prefix="/exports", tags=["Exports"])


# =========================================================
# CSV (ONE ROW PER RECEIPT)
# =========================================================
@router.get("/sales.csv")
@limiter.limit("10/minute")
def export_sales_csv(
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_admin_user),
    filters: SaleFilter = Depends(sale_filter_params),
):
    sales = filter_sales(db, filters)
    filename = export_filename(extension="csv")

    return Response(
        content=export_csv(sales),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =========================================================
# EXCEL (ONE ROW PER ITEM + SUMMARY SHEET)
# =========================================================
@router.get("/sales.xlsx")
@limiter.limit("5/minute")
def export_sales_xlsx(
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_admin_user),
    filters: SaleFilter = Depends(sale_filter_params),
):
    sales = filter_sales(db, filters)
    filename = export_filename(extension="xlsx")

    output = BytesIO(
        build_sales_workbook(
            sales,
            store_name=settings.STORE_NAME,
            currency=settings.CURRENCY_SYMBOL,
            filters=filters,
        )
    )

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
