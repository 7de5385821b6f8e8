from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_dashboard_service
from src.schemas.dashboard import DashboardSummary, ReportingPeriod
from src.services.dashboard_service import DashboardService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_reporting_period(
    period: str = Query(default="all", pattern="^(today|month|year|range|all)$"),
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
) -> ReportingPeriod:
    return ReportingPeriod(
        kind=period,
        year=year,
        month=month,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/summary")
def dashboard_summary(
    period: ReportingPeriod = Depends(get_reporting_period),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardSummary]:
    data = service.get_summary(period)
    meta = Meta(
        as_of_date=date.today().isoformat(),
        source="tickets",
        time_window=period.label(),
        calculation_version="v1",
    )
    return ResponseEnvelope(data=data, pagination=None, meta=meta)
