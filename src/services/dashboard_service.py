from __future__ import annotations

from datetime import datetime
from typing import Optional

from src.analytics.ticket_stats import calculate_ticket_stats
from src.core.config import get_settings
from src.core.errors import BadRequestError
from src.schemas.dashboard import DashboardSummary, ReportingPeriod
from src.services.bookings_service import BookingsService
from src.shared.time import local_now


RECENT_BOOKINGS_LIMIT = 5


def validate_period(period: ReportingPeriod) -> None:
    if period.kind == "month" and (period.year is None or period.month is None):
        raise BadRequestError("Monthly period requires year and month")
    if period.kind == "year" and period.year is None:
        raise BadRequestError("Yearly period requires year")
    if (
        period.kind == "range"
        and period.start_date
        and period.end_date
        and period.start_date > period.end_date
    ):
        raise BadRequestError("Range start must not be after range end")


class DashboardService:
    def __init__(self, bookings_service: BookingsService) -> None:
        self.bookings_service = bookings_service
        self.settings = get_settings()

    def get_summary(self, period: ReportingPeriod, now: Optional[datetime] = None) -> DashboardSummary:
        validate_period(period)
        snapshot = self.bookings_service.load_snapshot()
        stats = calculate_ticket_stats(
            snapshot,
            period,
            now or local_now(self.settings.local_timezone),
            upcoming_hours=self.settings.standard_alert_hours,
        )
        # Snapshot arrives newest first from storage.
        recent = [
            self.bookings_service.summarize(booking)
            for booking in snapshot[:RECENT_BOOKINGS_LIMIT]
        ]
        return DashboardSummary(period=period, stats=stats, recent_bookings=recent)
