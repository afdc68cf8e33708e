from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas.common import Envelope
from app.schemas.dashboard import ChartPeriod, DashboardOverview, DashboardStats, PaymentMethodShare, SalesChart
from app.services.dashboard_service import dashboard_overview, dashboard_stats, payment_methods, sales_chart

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[DashboardOverview],
    summary="Headline figures, category mix and recent documents",
)
def dashboard_api(db: Session = Depends(get_db)):
    return {"data": dashboard_overview(db)}


@router.get(
    "/stats",
    response_model=Envelope[DashboardStats],
    summary="Headline sales and stock figures",
)
def dashboard_stats_api(db: Session = Depends(get_db)):
    return {"data": dashboard_stats(db)}


@router.get(
    "/sales-chart",
    response_model=Envelope[SalesChart],
    summary="Sales bucketed by hour, week, month, quarter, year or custom days",
)
def sales_chart_api(
    period: ChartPeriod = "week",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    return {"data": sales_chart(db, period=period, start_date=start_date, end_date=end_date)}


@router.get(
    "/payment-methods",
    response_model=Envelope[List[PaymentMethodShare]],
    summary="Document count and amount per payment method",
)
def payment_methods_api(
    period: ChartPeriod = "month",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    rows = payment_methods(db, period=period, start_date=start_date, end_date=end_date)
    return {"data": rows, "count": len(rows)}
