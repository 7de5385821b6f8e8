from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from src.schemas.bookings import FlightSegment, Passenger
from src.shared.base import BaseSchema


SUPPORTED_TICKET_MIME_TYPES = frozenset(
    {"application/pdf", "image/png", "image/jpeg", "image/webp", "image/gif"}
)


class BookingDraft(BaseSchema):
    passengers: Optional[List[Passenger]] = None
    segments: Optional[List[FlightSegment]] = None
    pnr: Optional[str] = None
    airline: Optional[str] = None
    issued_date: Optional[date] = None


class TicketExtractionRequest(BaseSchema):
    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str
    content_base64: str = Field(..., min_length=1)
    draft_id: Optional[str] = Field(default=None, max_length=64)
    current: Optional[BookingDraft] = None


class TicketExtractionResult(BaseSchema):
    ticket_file_path: Optional[str] = None
    draft: BookingDraft
    extracted: bool
    notice: Optional[str] = None
    model_name: Optional[str] = None
