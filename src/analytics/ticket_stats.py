from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List

from src.analytics.departure_windows import STANDARD_WINDOW_HOURS, count_upcoming_segments
from src.schemas.bookings import Booking
from src.schemas.dashboard import ReportingPeriod, TicketStats


def in_period(booking: Booking, period: ReportingPeriod, now: datetime) -> bool:
    if period.kind == "all":
        return True
    issued = booking.issued_date
    if issued is None:
        return False
    if period.kind == "today":
        return issued >= now.date()
    if period.kind == "month":
        return issued.year == period.year and issued.month == period.month
    if period.kind == "year":
        return issued.year == period.year
    if period.start_date and issued < period.start_date:
        return False
    if period.end_date and issued > period.end_date:
        return False
    return True


def filter_by_period(
    bookings: Iterable[Booking], period: ReportingPeriod, now: datetime
) -> List[Booking]:
    return [booking for booking in bookings if in_period(booking, period, now)]


def calculate_ticket_stats(
    bookings: Iterable[Booking],
    period: ReportingPeriod,
    now: datetime,
    upcoming_hours: int = STANDARD_WINDOW_HOURS,
) -> TicketStats:
    snapshot = list(bookings)
    selected = filter_by_period(snapshot, period, now)

    total_sales = sum((booking.sales_price for booking in selected), Decimal("0"))
    total_purchase = sum((booking.purchase_price for booking in selected), Decimal("0"))
    total_profit = sum((booking.profit for booking in selected), Decimal("0"))

    return TicketStats(
        total_tickets=len(selected),
        total_sales=total_sales,
        total_purchase=total_purchase,
        total_profit=total_profit,
        dummy_count=sum(1 for booking in selected if booking.is_dummy),
        # Counted over every booking regardless of the reporting period.
        upcoming_flights=count_upcoming_segments(snapshot, now, hours=upcoming_hours),
    )
