from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from src.analytics.journey import summarize_journey
from src.schemas.alerts import AlertUrgency, DepartureWindows, JourneyEvent, QualifyingSegment
from src.schemas.bookings import Booking


STANDARD_WINDOW_HOURS = 48
URGENT_WINDOW_HOURS = 24


def _in_window(departure_at: Optional[datetime], start: datetime, end: datetime) -> bool:
    return departure_at is not None and start <= departure_at <= end


def _qualifying_segments(
    booking: Booking,
    start: datetime,
    end: datetime,
    excluded: Set[Tuple[str, int]],
) -> List[QualifyingSegment]:
    matches: List[QualifyingSegment] = []
    for index, segment in enumerate(booking.segments):
        if (booking.id, index) in excluded:
            continue
        departure_at = segment.departure_at()
        if not _in_window(departure_at, start, end):
            continue
        matches.append(
            QualifyingSegment(segment_index=index, departure_at=departure_at, segment=segment)
        )
    matches.sort(key=lambda item: item.departure_at)
    return matches


def _journey_event(
    booking: Booking, urgency: AlertUrgency, segments: List[QualifyingSegment]
) -> JourneyEvent:
    return JourneyEvent(
        booking_id=booking.id,
        pnr=booking.pnr,
        airline=booking.airline,
        lead_passenger_name=booking.lead_passenger_name,
        customer_name=booking.customer_name,
        is_dummy=booking.is_dummy,
        urgency=urgency,
        earliest_departure_at=segments[0].departure_at,
        segments=segments,
        journey=summarize_journey(booking.segments, booking_id=booking.id),
    )


def evaluate_departure_windows(
    bookings: Iterable[Booking],
    now: datetime,
    standard_hours: int = STANDARD_WINDOW_HOURS,
    urgent_hours: int = URGENT_WINDOW_HOURS,
) -> DepartureWindows:
    """Group segments departing soon into one journey event per booking.

    Dummy bookings are checked against the shorter urgent window first; any
    segment claimed there is left out of the standard window so the two result
    sets never share a segment. Both windows are closed intervals starting at
    ``now``.
    """
    snapshot = list(bookings)
    urgent_end = now + timedelta(hours=urgent_hours)
    standard_end = now + timedelta(hours=standard_hours)

    urgent: List[JourneyEvent] = []
    claimed: Set[Tuple[str, int]] = set()
    for booking in snapshot:
        if not booking.is_dummy:
            continue
        segments = _qualifying_segments(booking, now, urgent_end, excluded=set())
        if not segments:
            continue
        claimed.update((booking.id, item.segment_index) for item in segments)
        urgent.append(_journey_event(booking, "urgent", segments))

    standard: List[JourneyEvent] = []
    for booking in snapshot:
        segments = _qualifying_segments(booking, now, standard_end, excluded=claimed)
        if segments:
            standard.append(_journey_event(booking, "standard", segments))

    urgent.sort(key=lambda event: event.earliest_departure_at)
    standard.sort(key=lambda event: event.earliest_departure_at)
    return DepartureWindows(generated_at=now, urgent=urgent, standard=standard)


def count_upcoming_segments(
    bookings: Iterable[Booking], now: datetime, hours: int = STANDARD_WINDOW_HOURS
) -> int:
    end = now + timedelta(hours=hours)
    return sum(
        1
        for booking in bookings
        for segment in booking.segments
        if _in_window(segment.departure_at(), now, end)
    )
