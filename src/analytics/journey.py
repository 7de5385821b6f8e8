from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional, Sequence

from src.schemas.bookings import FlightSegment, JourneySummary, JourneyType, SegmentConnection


logger = logging.getLogger(__name__)

TRANSIT_MAX_GAP = timedelta(hours=24)


def build_journey_path(segments: Sequence[FlightSegment]) -> List[str]:
    """End-to-end city path; a destination equal to the previous node is not repeated."""
    if not segments:
        return []
    path: List[str] = [segments[0].origin or ""]
    for segment in segments:
        destination = segment.destination or ""
        if destination != path[-1]:
            path.append(destination)
    return path


def _connection_gap(previous: FlightSegment, following: FlightSegment) -> Optional[timedelta]:
    arrival = previous.arrival_at()
    departure = following.departure_at()
    if arrival is None or departure is None:
        return None
    return departure - arrival


def classify_journey(segments: Sequence[FlightSegment]) -> Optional[JourneyType]:
    if not segments:
        return None
    if len(segments) == 1:
        return "Direct"
    for previous, following in zip(segments, segments[1:]):
        gap = _connection_gap(previous, following)
        if gap is not None and timedelta(0) < gap < TRANSIT_MAX_GAP:
            return "Transit"
    return "Stopover"


def describe_connections(segments: Sequence[FlightSegment]) -> List[SegmentConnection]:
    connections: List[SegmentConnection] = []
    for index, (previous, following) in enumerate(zip(segments, segments[1:])):
        gap = _connection_gap(previous, following)
        if gap is None:
            kind = "unknown"
        elif gap <= timedelta(0):
            kind = "anomaly"
        elif gap < TRANSIT_MAX_GAP:
            kind = "transit"
        else:
            kind = "stopover"
        connections.append(
            SegmentConnection(
                after_segment_index=index,
                city=previous.destination,
                gap_minutes=int(gap.total_seconds() // 60) if gap is not None else None,
                kind=kind,
            )
        )
    return connections


def summarize_journey(
    segments: Sequence[FlightSegment], booking_id: Optional[str] = None
) -> JourneySummary:
    # Non-positive gaps still fall through to Stopover; they are only flagged.
    has_anomaly = any(
        connection.kind == "anomaly" for connection in describe_connections(segments)
    )
    if has_anomaly:
        logger.warning(
            "Connection departs at or before previous arrival booking_id=%s", booking_id
        )
    return JourneySummary(
        path=build_journey_path(segments),
        journey_type=classify_journey(segments),
        has_connection_anomaly=has_anomaly,
    )
