from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import Field

from src.schemas.bookings import FlightSegment, JourneySummary
from src.shared.base import BaseSchema


AlertUrgency = Literal["urgent", "standard"]


class QualifyingSegment(BaseSchema):
    segment_index: int
    departure_at: datetime
    segment: FlightSegment


class JourneyEvent(BaseSchema):
    booking_id: str
    pnr: str
    airline: str
    lead_passenger_name: str
    customer_name: str
    is_dummy: bool
    urgency: AlertUrgency
    earliest_departure_at: datetime
    segments: List[QualifyingSegment]
    journey: JourneySummary


class DepartureWindows(BaseSchema):
    generated_at: datetime
    urgent: List[JourneyEvent] = Field(default_factory=list)
    standard: List[JourneyEvent] = Field(default_factory=list)


class DepartureAlert(BaseSchema):
    key: str
    booking_id: str
    segment_index: int
    urgency: AlertUrgency
    message: str


class NotificationEntry(BaseSchema):
    key: str
    urgency: AlertUrgency
    message: str
    created_at: datetime
