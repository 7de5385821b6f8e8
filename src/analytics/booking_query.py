from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from src.schemas.bookings import Booking, BookingQuery
from src.shared.response import Pagination, paginate_list


ALL_OPTION = "all"

_FILTER_FIELDS = (
    "search",
    "airline",
    "status",
    "pnr",
    "customer",
    "passenger",
    "issued_from",
    "issued_to",
    "page_size",
)


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _is_unset(value: Optional[str]) -> bool:
    normalized = _normalize(value)
    return not normalized or normalized == ALL_OPTION


def matches_search(booking: Booking, search: Optional[str]) -> bool:
    term = _normalize(search)
    if not term:
        return True
    for passenger in booking.passengers:
        if term in _normalize(passenger.name) or term in _normalize(passenger.e_ticket_no):
            return True
    if term in _normalize(booking.pnr):
        return True
    for segment in booking.segments:
        if term in _normalize(segment.origin) or term in _normalize(segment.destination):
            return True
    return term in _normalize(booking.airline) or term in _normalize(booking.customer_name)


def matches_filters(booking: Booking, query: BookingQuery) -> bool:
    if not _is_unset(query.airline) and booking.airline != query.airline:
        return False
    if not _is_unset(query.status) and booking.status != query.status:
        return False
    if not _is_unset(query.customer) and booking.customer_name != query.customer:
        return False
    pnr_term = _normalize(query.pnr)
    if pnr_term and pnr_term not in _normalize(booking.pnr):
        return False
    passenger_term = _normalize(query.passenger)
    if passenger_term and not any(
        passenger_term in _normalize(passenger.name) for passenger in booking.passengers
    ):
        return False
    if query.issued_from or query.issued_to:
        issued = booking.issued_date
        if issued is None:
            return False
        if query.issued_from and issued < query.issued_from:
            return False
        if query.issued_to and issued > query.issued_to:
            return False
    return matches_search(booking, query.search)


def _first_origin(booking: Booking) -> str:
    return _normalize(booking.segments[0].origin) if booking.segments else ""


SORT_KEYS: Dict[str, Callable[[Booking], Any]] = {
    "issued_date": lambda booking: booking.issued_date.isoformat() if booking.issued_date else "",
    "passenger": lambda booking: _normalize(booking.lead_passenger_name),
    "route": _first_origin,
    "pnr": lambda booking: _normalize(booking.pnr),
    "is_dummy": lambda booking: booking.is_dummy,
    "customer": lambda booking: _normalize(booking.customer_name),
    "sales_price": lambda booking: booking.sales_price,
}


def sort_bookings(bookings: Iterable[Booking], sort_by: str, sort_order: str) -> List[Booking]:
    key = SORT_KEYS[sort_by]
    return sorted(bookings, key=key, reverse=sort_order == "desc")


def filter_and_sort(bookings: Iterable[Booking], query: BookingQuery) -> List[Booking]:
    matched = [booking for booking in bookings if matches_filters(booking, query)]
    return sort_bookings(matched, query.sort_by, query.sort_order)


def query_bookings(
    bookings: Iterable[Booking], query: BookingQuery
) -> Tuple[List[Booking], Pagination]:
    ordered = filter_and_sort(bookings, query)
    page = query.page
    if page > 1 and (page - 1) * query.page_size >= len(ordered):
        # A page number left over from a wider result set falls back to the first page.
        page = 1
    return paginate_list(ordered, page, query.page_size)


def reset_page_on_change(previous: BookingQuery, current: BookingQuery) -> BookingQuery:
    """Send the caller back to page 1 whenever a filter or the page size moved.

    Stateful callers that keep the previous query between requests apply this;
    stateless requests are covered by the fallback in ``query_bookings``.
    """
    changed = any(getattr(previous, name) != getattr(current, name) for name in _FILTER_FIELDS)
    if changed and current.page != 1:
        return current.model_copy(update={"page": 1})
    return current


def distinct_airlines(bookings: Iterable[Booking]) -> List[str]:
    seen: List[str] = []
    for booking in bookings:
        if booking.airline and booking.airline not in seen:
            seen.append(booking.airline)
    return seen
