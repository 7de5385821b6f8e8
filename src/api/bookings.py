from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from src.api.dependencies import get_alerts_service, get_bookings_service
from src.core.errors import UpstreamError
from src.schemas.bookings import (
    BookingDetail,
    BookingFlagsUpdate,
    BookingQuery,
    BookingSaveRequest,
    BookingSummary,
)
from src.services.alerts_service import AlertsService
from src.services.bookings_service import BookingsService
from src.shared.response import Meta, ResponseEnvelope


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

BOOKINGS_SOURCE = "tickets"


def _meta(time_window: str = "all") -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source=BOOKINGS_SOURCE,
        time_window=time_window,
        calculation_version="v1",
    )


def _refresh_alerts(alerts: AlertsService) -> None:
    # The write already succeeded; a failed refresh is picked up by the next recompute.
    try:
        alerts.refresh_notifications()
    except UpstreamError as exc:
        logger.warning("Refreshing departure alerts after booking write failed: %s", exc.message)


def get_booking_query(
    search: Optional[str] = Query(default=None, max_length=200),
    airline: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None, pattern="^(All|Confirmed|Cancelled|Changed)$"),
    pnr: Optional[str] = Query(default=None, max_length=20),
    customer: Optional[str] = Query(default=None),
    passenger: Optional[str] = Query(default=None, max_length=200),
    issued_from: Optional[date] = Query(default=None),
    issued_to: Optional[date] = Query(default=None),
    sort_by: str = Query(
        default="issued_date",
        pattern="^(issued_date|passenger|route|pnr|is_dummy|customer|sales_price)$",
    ),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=25, ge=1, le=500),
) -> BookingQuery:
    return BookingQuery(
        search=search,
        airline=airline,
        status=status,
        pnr=pnr,
        customer=customer,
        passenger=passenger,
        issued_from=issued_from,
        issued_to=issued_to,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )


@router.get("")
def list_bookings(
    query: BookingQuery = Depends(get_booking_query),
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[List[BookingSummary]]:
    data, pagination = service.list_bookings(query)
    return ResponseEnvelope(data=data, pagination=pagination, meta=_meta())


@router.get("/airlines")
def list_booking_airlines(
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[List[str]]:
    return ResponseEnvelope(data=service.list_airlines(), meta=_meta())


@router.get("/{booking_id}")
def get_booking(
    booking_id: str,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[BookingDetail]:
    return ResponseEnvelope(data=service.get_booking(booking_id), meta=_meta("na"))


@router.post("", status_code=201)
def create_booking(
    request: BookingSaveRequest,
    service: BookingsService = Depends(get_bookings_service),
    alerts: AlertsService = Depends(get_alerts_service),
) -> ResponseEnvelope[BookingDetail]:
    data = service.create_booking(request)
    _refresh_alerts(alerts)
    return ResponseEnvelope(data=data, meta=_meta("na"))


@router.put("/{booking_id}")
def update_booking(
    booking_id: str,
    request: BookingSaveRequest,
    service: BookingsService = Depends(get_bookings_service),
    alerts: AlertsService = Depends(get_alerts_service),
) -> ResponseEnvelope[BookingDetail]:
    data = service.update_booking(booking_id, request)
    _refresh_alerts(alerts)
    return ResponseEnvelope(data=data, meta=_meta("na"))


@router.patch("/{booking_id}/flags")
def update_booking_flags(
    booking_id: str,
    request: BookingFlagsUpdate,
    service: BookingsService = Depends(get_bookings_service),
    alerts: AlertsService = Depends(get_alerts_service),
) -> ResponseEnvelope[BookingSummary]:
    data = service.update_flags(booking_id, request)
    _refresh_alerts(alerts)
    return ResponseEnvelope(data=data, meta=_meta("na"))


@router.delete("/{booking_id}", status_code=204)
def delete_booking(
    booking_id: str,
    service: BookingsService = Depends(get_bookings_service),
    alerts: AlertsService = Depends(get_alerts_service),
) -> Response:
    service.delete_booking(booking_id)
    _refresh_alerts(alerts)
    return Response(status_code=204)
