from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from src.analytics.booking_query import distinct_airlines, query_bookings
from src.analytics.journey import describe_connections, summarize_journey
from src.core.errors import BadRequestError, NotFoundError, UpstreamError
from src.models.tickets import TicketRecord
from src.repositories.ticket_files_repository import TicketFilesRepository
from src.repositories.tickets_repository import TicketsRepository
from src.schemas.bookings import (
    BOOKING_STATUSES,
    Booking,
    BookingDetail,
    BookingFlagsUpdate,
    BookingQuery,
    BookingSaveRequest,
    BookingSummary,
    FlightSegment,
    Passenger,
)
from src.shared.response import Pagination


logger = logging.getLogger(__name__)


def validate_booking_submission(request: BookingSaveRequest) -> None:
    problems: List[str] = []
    if not request.passengers:
        problems.append("At least one passenger is required")
    if any(not passenger.name.strip() for passenger in request.passengers):
        problems.append("Every passenger needs a name")
    if not request.segments:
        problems.append("At least one flight segment is required")
    incomplete = [index for index, segment in enumerate(request.segments) if not segment.is_complete()]
    if incomplete:
        problems.append("Flight segments need origin, destination and departure date")
    if problems:
        raise BadRequestError(
            problems[0],
            details={"problems": problems, "incompleteSegments": incomplete},
        )


def normalize_submission(request: BookingSaveRequest) -> BookingSaveRequest:
    segments = [
        segment.model_copy(
            update={
                "origin": (segment.origin or "").strip().upper(),
                "destination": (segment.destination or "").strip().upper(),
                "flight_no": segment.flight_no.strip().upper() if segment.flight_no else None,
            }
        )
        for segment in request.segments
    ]
    passengers = [
        passenger.model_copy(update={"name": passenger.name.strip()})
        for passenger in request.passengers
    ]
    return request.model_copy(
        update={
            "pnr": request.pnr.strip().upper(),
            "airline": request.airline.strip(),
            "passengers": passengers,
            "segments": segments,
        }
    )


def _parse_items(raw_items: Optional[List[Dict[str, Any]]], model: Any, record_id: str) -> List[Any]:
    items: List[Any] = []
    for raw in raw_items or []:
        try:
            items.append(model.model_validate(raw))
        except ValidationError:
            logger.warning("Skipping malformed %s on ticket %s", model.__name__, record_id)
    return items


def to_booking(record: TicketRecord) -> Booking:
    status = record.status if record.status in BOOKING_STATUSES else "Confirmed"
    return Booking(
        id=record.id,
        passengers=_parse_items(record.passengers, Passenger, record.id),
        segments=_parse_items(record.segments, FlightSegment, record.id),
        pnr=record.pnr or "",
        issued_date=record.issued_date,
        airline=record.airline or "",
        customer_name=record.customer_name or "",
        supplier_name=record.supplier_name or "",
        sales_price=record.sales_price or 0,
        purchase_price=record.purchase_price or 0,
        is_dummy=bool(record.is_dummy),
        status=status,
        reminder_sent=bool(record.reminder_sent),
        created_at=record.created_at,
        ticket_file_path=record.ticket_file_path,
    )


def to_ticket_payload(request: BookingSaveRequest) -> Dict[str, Any]:
    return {
        "passengers": [passenger.model_dump(by_alias=True) for passenger in request.passengers],
        "segments": [segment.model_dump(by_alias=True) for segment in request.segments],
        "pnr": request.pnr,
        "issued_date": request.issued_date.isoformat() if request.issued_date else None,
        "airline": request.airline,
        "customer_name": request.customer_name,
        "supplier_name": request.supplier_name,
        "sales_price": str(request.sales_price),
        "purchase_price": str(request.purchase_price),
        "profit": str(request.profit),
        "is_dummy": request.is_dummy,
        "status": request.status,
        "reminder_sent": request.reminder_sent,
        "ticket_file_path": request.ticket_file_path,
    }


class BookingsService:
    def __init__(
        self,
        repository: TicketsRepository,
        files_repository: TicketFilesRepository,
    ) -> None:
        self.repository = repository
        self.files_repository = files_repository

    def load_snapshot(self) -> List[Booking]:
        try:
            records = self.repository.list_tickets()
        except httpx.HTTPError as exc:
            logger.error("Loading tickets failed: %s", exc)
            raise UpstreamError("Could not load tickets") from exc
        bookings: List[Booking] = []
        for record in records:
            try:
                bookings.append(to_booking(record))
            except ValidationError as exc:
                logger.warning("Skipping unreadable ticket %s: %s", record.id, exc)
        return bookings

    def list_bookings(self, query: BookingQuery) -> Tuple[List[BookingSummary], Pagination]:
        page, pagination = query_bookings(self.load_snapshot(), query)
        return [self.summarize(booking) for booking in page], pagination

    def list_airlines(self) -> List[str]:
        return distinct_airlines(self.load_snapshot())

    def get_booking(self, booking_id: str) -> BookingDetail:
        return self._to_detail(to_booking(self._require_record(booking_id)))

    def create_booking(self, request: BookingSaveRequest) -> BookingDetail:
        validate_booking_submission(request)
        payload = to_ticket_payload(normalize_submission(request))
        try:
            record = self.repository.insert_ticket(payload)
        except httpx.HTTPError as exc:
            logger.error("Creating ticket failed: %s", exc)
            raise UpstreamError("Could not save ticket") from exc
        return self._to_detail(to_booking(record))

    def update_booking(self, booking_id: str, request: BookingSaveRequest) -> BookingDetail:
        validate_booking_submission(request)
        payload = to_ticket_payload(normalize_submission(request))
        return self._to_detail(to_booking(self._update(booking_id, payload)))

    def update_flags(self, booking_id: str, flags: BookingFlagsUpdate) -> BookingSummary:
        payload: Dict[str, Any] = {}
        if flags.status is not None:
            payload["status"] = flags.status
        if flags.reminder_sent is not None:
            payload["reminder_sent"] = flags.reminder_sent
        if not payload:
            raise BadRequestError("Nothing to update; send status or reminderSent")
        return self.summarize(to_booking(self._update(booking_id, payload)))

    def delete_booking(self, booking_id: str) -> None:
        record = self._require_record(booking_id)
        try:
            if record.ticket_file_path:
                self.files_repository.remove(record.ticket_file_path)
            deleted = self.repository.delete_ticket(booking_id)
        except httpx.HTTPError as exc:
            logger.error("Deleting ticket %s failed: %s", booking_id, exc)
            raise UpstreamError("Could not delete ticket") from exc
        if not deleted:
            raise NotFoundError("Ticket not found")

    def _require_record(self, booking_id: str) -> TicketRecord:
        try:
            record = self.repository.get_ticket_by_id(booking_id)
        except httpx.HTTPError as exc:
            logger.error("Loading ticket %s failed: %s", booking_id, exc)
            raise UpstreamError("Could not load ticket") from exc
        if not record:
            raise NotFoundError("Ticket not found")
        return record

    def _update(self, booking_id: str, payload: Dict[str, Any]) -> TicketRecord:
        try:
            record = self.repository.update_ticket(booking_id, payload)
        except httpx.HTTPError as exc:
            logger.error("Updating ticket %s failed: %s", booking_id, exc)
            raise UpstreamError("Could not update ticket") from exc
        if not record:
            raise NotFoundError("Ticket not found")
        return record

    @staticmethod
    def summarize(booking: Booking) -> BookingSummary:
        return BookingSummary(
            **booking.model_dump(exclude={"profit"}),
            journey=summarize_journey(booking.segments, booking_id=booking.id),
        )

    @staticmethod
    def _to_detail(booking: Booking) -> BookingDetail:
        return BookingDetail(
            **booking.model_dump(exclude={"profit"}),
            journey=summarize_journey(booking.segments, booking_id=booking.id),
            connections=describe_connections(booking.segments),
        )
