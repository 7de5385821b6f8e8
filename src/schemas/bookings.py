from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field, computed_field, field_validator

from src.shared.base import BaseSchema, to_camel
from src.shared.time import combine_date_time


PassengerType = Literal["ADT", "CHD", "INF"]
BookingStatus = Literal["Confirmed", "Cancelled", "Changed"]
JourneyType = Literal["Direct", "Transit", "Stopover"]
ConnectionKind = Literal["transit", "stopover", "anomaly", "unknown"]
BookingSortKey = Literal[
    "issued_date",
    "passenger",
    "route",
    "pnr",
    "is_dummy",
    "customer",
    "sales_price",
]
SortOrder = Literal["asc", "desc"]

BOOKING_STATUSES: tuple[str, ...] = ("Confirmed", "Cancelled", "Changed")

PASSENGER_TYPE_ALIASES = {
    "ADT": "ADT",
    "ADULT": "ADT",
    "CHD": "CHD",
    "CHILD": "CHD",
    "INF": "INF",
    "INFANT": "INF",
}


class Passenger(BaseSchema):
    name: str
    e_ticket_no: Optional[str] = None
    type: PassengerType = "ADT"

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: object) -> str:
        if not isinstance(value, str):
            return "ADT"
        return PASSENGER_TYPE_ALIASES.get(value.strip().upper(), "ADT")


class FlightSegment(BaseSchema):
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure_date: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_date: Optional[str] = None
    arrival_time: Optional[str] = None
    flight_no: Optional[str] = None

    def departure_at(self) -> Optional[datetime]:
        return combine_date_time(self.departure_date, self.departure_time)

    def arrival_at(self) -> Optional[datetime]:
        return combine_date_time(self.arrival_date, self.arrival_time)

    def is_complete(self) -> bool:
        return bool(
            (self.origin or "").strip()
            and (self.destination or "").strip()
            and (self.departure_date or "").strip()
        )


class BookingFields(BaseSchema):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, validate_assignment=True
    )

    passengers: List[Passenger] = Field(default_factory=list)
    segments: List[FlightSegment] = Field(default_factory=list)
    pnr: str = ""
    issued_date: Optional[date] = None
    airline: str = ""
    customer_name: str = ""
    supplier_name: str = ""
    sales_price: Decimal = Decimal("0")
    purchase_price: Decimal = Decimal("0")
    is_dummy: bool = False
    status: BookingStatus = "Confirmed"
    reminder_sent: bool = False
    ticket_file_path: Optional[str] = None

    @computed_field
    @property
    def profit(self) -> Decimal:
        return self.sales_price - self.purchase_price


class BookingSaveRequest(BookingFields):
    # Stored rows may predate this bound; only new submissions are held to it.
    sales_price: Decimal = Field(default=Decimal("0"), ge=0)
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)


class BookingFlagsUpdate(BaseSchema):
    status: Optional[BookingStatus] = None
    reminder_sent: Optional[bool] = None


class Booking(BookingFields):
    id: str
    created_at: Optional[datetime] = None

    @property
    def lead_passenger_name(self) -> str:
        return self.passengers[0].name if self.passengers else ""


class JourneySummary(BaseSchema):
    path: List[str] = Field(default_factory=list)
    journey_type: Optional[JourneyType] = None
    has_connection_anomaly: bool = False


class SegmentConnection(BaseSchema):
    after_segment_index: int
    city: Optional[str] = None
    gap_minutes: Optional[int] = None
    kind: ConnectionKind


class BookingSummary(Booking):
    journey: JourneySummary


class BookingDetail(BookingSummary):
    connections: List[SegmentConnection] = Field(default_factory=list)


class BookingQuery(BaseSchema):
    search: Optional[str] = None
    airline: Optional[str] = None
    status: Optional[str] = None
    pnr: Optional[str] = None
    customer: Optional[str] = None
    passenger: Optional[str] = None
    issued_from: Optional[date] = None
    issued_to: Optional[date] = None
    sort_by: BookingSortKey = "issued_date"
    sort_order: SortOrder = "desc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1, le=500)
