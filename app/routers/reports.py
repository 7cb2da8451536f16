# =========================================================
# REPORTS ROUTER (ADMIN DASHBOARD)
#
# - Today / month revenue
# - Active products, total orders
# - Last 7 days revenue trend
#
# A failed read returns a zeroed dashboard with `error` set
# instead of failing the whole view. The trend falls back
# to seven zero days.
# =========================================================

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.core.auth import get_admin_user
from app.schemas.report import DashboardResponse, RevenuePoint
from app.services import reporting

router = APIRouter(prefix="/reports", tags=["Reports"])

logger = logging.getLogger("app.reports")


# =========================================================
# DASHBOARD
# =========================================================
@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    current_user=Depends(get_admin_user),
):
    try:
        return reporting.dashboard_stats(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Dashboard figures could not be read")
        return reporting.empty_dashboard(error="Sales figures are temporarily unavailable")


# =========================================================
# 7 DAY TREND
# =========================================================
@router.get("/trend", response_model=list[RevenuePoint])
def revenue_trend(
    db: Session = Depends(get_db),
    current_user=Depends(get_admin_user),
):
    try:
        trend = reporting.weekly_trend(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Revenue trend could not be read")
        return reporting.empty_dashboard()["weekly_trend"]

    return [{"date": day, "revenue": revenue} for day, revenue in trend]
