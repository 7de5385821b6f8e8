from __future__ import annotations

import os
from datetime import datetime
from decimal import Decimal
from typing import List, Tuple

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_alerts_service,
    get_bookings_service,
    get_dashboard_service,
    get_directory_service,
    get_ticket_extraction_service,
)
from src.core.errors import BadRequestError, ConflictError, NotFoundError
from src.main import create_app
from src.schemas.alerts import DepartureWindows, NotificationEntry
from src.schemas.bookings import (
    BookingDetail,
    BookingFlagsUpdate,
    BookingQuery,
    BookingSaveRequest,
    BookingSummary,
    FlightSegment,
    JourneySummary,
    Passenger,
)
from src.schemas.dashboard import DashboardSummary, ReportingPeriod, TicketStats
from src.schemas.directory import (
    Customer,
    CustomerSaveRequest,
    CustomerUpdateResult,
    RenameOutcome,
    Supplier,
    SupplierSaveRequest,
    SupplierUpdateResult,
)
from src.schemas.extraction import BookingDraft, TicketExtractionRequest, TicketExtractionResult
from src.shared.response import Pagination


def _summary() -> BookingSummary:
    return BookingSummary(
        id="ticket-1",
        passengers=[Passenger(name="Jane Perera", e_ticket_no="6031234567890")],
        segments=[
            FlightSegment(
                origin="CMB",
                destination="DXB",
                departure_date="2026-03-11",
                departure_time="09:30",
                arrival_date="2026-03-11",
                arrival_time="12:45",
                flight_no="UL225",
            )
        ],
        pnr="ABC123",
        airline="SriLankan Airlines",
        customer_name="Acme Travel",
        supplier_name="Global Fares",
        sales_price=Decimal("1200.00"),
        purchase_price=Decimal("950.00"),
        journey=JourneySummary(path=["CMB", "DXB"], journey_type="Direct"),
    )


class FakeBookingsService:
    def list_bookings(self, query: BookingQuery) -> Tuple[List[BookingSummary], Pagination]:
        self.last_query = query
        return [_summary()], Pagination(
            page=query.page, page_size=query.page_size, total_items=1, total_pages=1
        )

    def list_airlines(self) -> List[str]:
        return ["SriLankan Airlines", "Emirates"]

    def get_booking(self, booking_id: str) -> BookingDetail:
        if booking_id != "ticket-1":
            raise NotFoundError("Ticket not found")
        return BookingDetail(**_summary().model_dump(exclude={"profit"}))

    def create_booking(self, request: BookingSaveRequest) -> BookingDetail:
        if not request.passengers:
            raise BadRequestError(
                "At least one passenger is required",
                details={"problems": ["At least one passenger is required"], "incompleteSegments": []},
            )
        return BookingDetail(
            **request.model_dump(exclude={"profit"}),
            id="ticket-2",
            journey=JourneySummary(),
        )

    def update_booking(self, booking_id: str, request: BookingSaveRequest) -> BookingDetail:
        detail = self.create_booking(request)
        return detail.model_copy(update={"id": booking_id})

    def update_flags(self, booking_id: str, flags: BookingFlagsUpdate) -> BookingSummary:
        summary = _summary()
        return summary.model_copy(
            update={"id": booking_id, "status": flags.status or summary.status}
        )

    def delete_booking(self, booking_id: str) -> None:
        if booking_id != "ticket-1":
            raise NotFoundError("Ticket not found")


class FakeDirectoryService:
    def list_customers(self) -> List[Customer]:
        return [Customer(id="cust-1", name="Acme Travel", phone="+94 11 000 0000")]

    def create_customer(self, request: CustomerSaveRequest) -> Customer:
        if request.name.strip().casefold() == "acme travel":
            raise ConflictError(
                "Customer 'Acme Travel' already exists", conflicting_value="Acme Travel"
            )
        return Customer(id="cust-2", name=request.name.strip(), phone=request.phone)

    def update_customer(self, customer_id: str, request: CustomerSaveRequest) -> CustomerUpdateResult:
        return CustomerUpdateResult(
            customer=Customer(id=customer_id, name=request.name, phone=request.phone),
            outcome=RenameOutcome(
                status="bookings_cascaded",
                party_type="customer",
                entity_id=customer_id,
                previous_name="Acme Travel",
                current_name=request.name,
                cascaded_bookings=3,
            ),
        )

    def delete_customer(self, customer_id: str) -> None:
        if customer_id != "cust-1":
            raise NotFoundError("Customer not found")

    def list_suppliers(self) -> List[Supplier]:
        return [Supplier(id="sup-1", name="Global Fares", contact="desk@globalfares.test")]

    def create_supplier(self, request: SupplierSaveRequest) -> Supplier:
        return Supplier(id="sup-2", name=request.name.strip(), contact=request.contact)

    def update_supplier(self, supplier_id: str, request: SupplierSaveRequest) -> SupplierUpdateResult:
        return SupplierUpdateResult(
            supplier=Supplier(id=supplier_id, name=request.name, contact=request.contact),
            outcome=RenameOutcome(
                status="cascade_failed",
                party_type="supplier",
                entity_id=supplier_id,
                previous_name="Global Fares",
                current_name=request.name,
                reason="Tickets still show 'Global Fares'; reload to reconcile",
            ),
        )

    def delete_supplier(self, supplier_id: str) -> None:
        _ = supplier_id


class FakeDashboardService:
    def get_summary(self, period: ReportingPeriod) -> DashboardSummary:
        if period.kind == "month" and period.month is None:
            raise BadRequestError("Monthly period requires year and month")
        return DashboardSummary(
            period=period,
            stats=TicketStats(
                total_tickets=3,
                total_sales=Decimal("3000"),
                total_purchase=Decimal("2400"),
                total_profit=Decimal("600"),
                dummy_count=1,
                upcoming_flights=2,
            ),
            recent_bookings=[_summary()],
        )


class FakeAlertsService:
    def get_departure_windows(self) -> DepartureWindows:
        return DepartureWindows(generated_at=datetime(2026, 3, 10, 12, 0))

    def refresh_notifications(self) -> List[NotificationEntry]:
        return [
            NotificationEntry(
                key="ticket-1:0:urgent",
                urgency="urgent",
                message="Dummy booking ABC123 (Jane Perera) expires: CMB-DXB departs 2026-03-11 06:00",
                created_at=datetime(2026, 3, 10, 12, 0),
            )
        ]


class FakeTicketExtractionService:
    def process_upload(self, request: TicketExtractionRequest) -> TicketExtractionResult:
        if request.file_name.startswith("blurry"):
            return TicketExtractionResult(
                ticket_file_path="tickets/draft-1/1700000000000.png",
                draft=request.current or BookingDraft(),
                extracted=False,
                notice="Ticket extraction is not configured. Enter the ticket details manually.",
            )
        return TicketExtractionResult(
            ticket_file_path="tickets/draft-1/1700000000000.pdf",
            draft=BookingDraft(pnr="XYZ789", airline="Emirates"),
            extracted=True,
            model_name="gpt-5-mini",
        )


@pytest.fixture()
def client() -> TestClient:
    app = create_app()
    app.dependency_overrides[get_bookings_service] = FakeBookingsService
    app.dependency_overrides[get_directory_service] = FakeDirectoryService
    app.dependency_overrides[get_dashboard_service] = FakeDashboardService
    app.dependency_overrides[get_alerts_service] = FakeAlertsService
    app.dependency_overrides[get_ticket_extraction_service] = FakeTicketExtractionService
    return TestClient(app)
