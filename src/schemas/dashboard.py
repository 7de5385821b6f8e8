from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from src.schemas.bookings import BookingSummary
from src.shared.base import BaseSchema


PeriodKind = Literal["today", "month", "year", "range", "all"]


class ReportingPeriod(BaseSchema):
    kind: PeriodKind = "all"
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def label(self) -> str:
        if self.kind == "month":
            return f"{self.year:04d}-{self.month:02d}"
        if self.kind == "year":
            return str(self.year)
        if self.kind == "range":
            start = self.start_date.isoformat() if self.start_date else ""
            end = self.end_date.isoformat() if self.end_date else ""
            return f"{start}..{end}"
        return self.kind


class TicketStats(BaseSchema):
    total_tickets: int = 0
    total_sales: Decimal = Decimal("0")
    total_purchase: Decimal = Decimal("0")
    total_profit: Decimal = Decimal("0")
    dummy_count: int = 0
    upcoming_flights: int = 0


class DashboardSummary(BaseSchema):
    period: ReportingPeriod
    stats: TicketStats
    recent_bookings: List[BookingSummary] = Field(default_factory=list)
