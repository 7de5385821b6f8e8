from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence

import httpx

from src.core.errors import ConflictError, NotFoundError, UpstreamError
from src.models.tickets import CustomerRecord, SupplierRecord
from src.repositories.directory_repository import DirectoryRepository
from src.repositories.tickets_repository import TicketsRepository
from src.schemas.bookings import Booking
from src.schemas.directory import (
    Customer,
    CustomerSaveRequest,
    CustomerUpdateResult,
    PartyType,
    RenameOutcome,
    Supplier,
    SupplierSaveRequest,
    SupplierUpdateResult,
)


logger = logging.getLogger(__name__)

BOOKING_NAME_FIELDS = {"customer": "customer_name", "supplier": "supplier_name"}


class _Named(Protocol):
    id: str
    name: str


def normalize_party_name(name: str) -> str:
    return name.strip().casefold()


def find_name_conflict(
    name: str, existing: Iterable[_Named], exclude_id: Optional[str] = None
) -> Optional[_Named]:
    wanted = normalize_party_name(name)
    for item in existing:
        if item.id != exclude_id and normalize_party_name(item.name) == wanted:
            return item
    return None


def rename_party_in_bookings(
    bookings: Sequence[Booking], party_type: PartyType, previous_name: str, current_name: str
) -> List[Booking]:
    """Return the booking set with the denormalized customer/supplier name replaced.

    For callers holding an in-memory booking set; the stored rows are updated
    in bulk by ``DirectoryService`` through ``TicketsRepository.rename_party``.
    """
    field = BOOKING_NAME_FIELDS[party_type]
    return [
        booking.model_copy(update={field: current_name})
        if getattr(booking, field) == previous_name
        else booking
        for booking in bookings
    ]


class DirectoryService:
    def __init__(
        self, repository: DirectoryRepository, tickets_repository: TicketsRepository
    ) -> None:
        self.repository = repository
        self.tickets_repository = tickets_repository

    def list_customers(self) -> List[Customer]:
        return [self._to_customer(record) for record in self._load_customers()]

    def create_customer(self, request: CustomerSaveRequest) -> Customer:
        name = request.name.strip()
        self._ensure_unique("Customer", name, self._load_customers())
        try:
            record = self.repository.insert_customer({"name": name, "phone": request.phone})
        except httpx.HTTPError as exc:
            logger.error("Creating customer failed: %s", exc)
            raise UpstreamError("Could not save customer") from exc
        return self._to_customer(record)

    def update_customer(self, customer_id: str, request: CustomerSaveRequest) -> CustomerUpdateResult:
        name = request.name.strip()
        customers = self._load_customers()
        current = next((item for item in customers if item.id == customer_id), None)
        if current is None:
            raise NotFoundError("Customer not found")
        self._ensure_unique("Customer", name, customers, exclude_id=customer_id)
        try:
            record = self.repository.update_customer(
                customer_id, {"name": name, "phone": request.phone}
            )
        except httpx.HTTPError as exc:
            logger.error("Updating customer %s failed: %s", customer_id, exc)
            raise UpstreamError("Could not update customer") from exc
        if record is None:
            raise NotFoundError("Customer not found")
        outcome = self._cascade_rename("customer", customer_id, current.name, record.name)
        return CustomerUpdateResult(customer=self._to_customer(record), outcome=outcome)

    def delete_customer(self, customer_id: str) -> None:
        try:
            deleted = self.repository.delete_customer(customer_id)
        except httpx.HTTPError as exc:
            logger.error("Deleting customer %s failed: %s", customer_id, exc)
            raise UpstreamError("Could not delete customer") from exc
        if not deleted:
            raise NotFoundError("Customer not found")

    def list_suppliers(self) -> List[Supplier]:
        return [self._to_supplier(record) for record in self._load_suppliers()]

    def create_supplier(self, request: SupplierSaveRequest) -> Supplier:
        name = request.name.strip()
        self._ensure_unique("Supplier", name, self._load_suppliers())
        try:
            record = self.repository.insert_supplier({"name": name, "contact": request.contact})
        except httpx.HTTPError as exc:
            logger.error("Creating supplier failed: %s", exc)
            raise UpstreamError("Could not save supplier") from exc
        return self._to_supplier(record)

    def update_supplier(self, supplier_id: str, request: SupplierSaveRequest) -> SupplierUpdateResult:
        name = request.name.strip()
        suppliers = self._load_suppliers()
        current = next((item for item in suppliers if item.id == supplier_id), None)
        if current is None:
            raise NotFoundError("Supplier not found")
        self._ensure_unique("Supplier", name, suppliers, exclude_id=supplier_id)
        try:
            record = self.repository.update_supplier(
                supplier_id, {"name": name, "contact": request.contact}
            )
        except httpx.HTTPError as exc:
            logger.error("Updating supplier %s failed: %s", supplier_id, exc)
            raise UpstreamError("Could not update supplier") from exc
        if record is None:
            raise NotFoundError("Supplier not found")
        outcome = self._cascade_rename("supplier", supplier_id, current.name, record.name)
        return SupplierUpdateResult(supplier=self._to_supplier(record), outcome=outcome)

    def delete_supplier(self, supplier_id: str) -> None:
        try:
            deleted = self.repository.delete_supplier(supplier_id)
        except httpx.HTTPError as exc:
            logger.error("Deleting supplier %s failed: %s", supplier_id, exc)
            raise UpstreamError("Could not delete supplier") from exc
        if not deleted:
            raise NotFoundError("Supplier not found")

    def _cascade_rename(
        self, party_type: PartyType, entity_id: str, previous_name: str, current_name: str
    ) -> RenameOutcome:
        outcome = RenameOutcome(
            status="entity_renamed",
            party_type=party_type,
            entity_id=entity_id,
            previous_name=previous_name,
            current_name=current_name,
        )
        if previous_name == current_name:
            return outcome
        # The entity rename is already persisted; a failed cascade is reported, not rolled back.
        try:
            cascaded = self.tickets_repository.rename_party(
                BOOKING_NAME_FIELDS[party_type], previous_name, current_name
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Cascading %s rename %r -> %r failed: %s",
                party_type,
                previous_name,
                current_name,
                exc,
            )
            return outcome.model_copy(
                update={
                    "status": "cascade_failed",
                    "reason": f"Tickets still show '{previous_name}'; reload to reconcile ({exc})",
                }
            )
        return outcome.model_copy(update={"status": "bookings_cascaded", "cascaded_bookings": cascaded})

    @staticmethod
    def _ensure_unique(
        label: str, name: str, existing: Iterable[_Named], exclude_id: Optional[str] = None
    ) -> None:
        conflict = find_name_conflict(name, existing, exclude_id=exclude_id)
        if conflict is not None:
            raise ConflictError(
                f"{label} '{conflict.name}' already exists", conflicting_value=conflict.name
            )

    def _load_customers(self) -> List[CustomerRecord]:
        try:
            return self.repository.list_customers()
        except httpx.HTTPError as exc:
            logger.error("Loading customers failed: %s", exc)
            raise UpstreamError("Could not load customers") from exc

    def _load_suppliers(self) -> List[SupplierRecord]:
        try:
            return self.repository.list_suppliers()
        except httpx.HTTPError as exc:
            logger.error("Loading suppliers failed: %s", exc)
            raise UpstreamError("Could not load suppliers") from exc

    @staticmethod
    def _to_customer(record: CustomerRecord) -> Customer:
        return Customer(
            id=record.id, name=record.name, phone=record.phone, created_at=record.created_at
        )

    @staticmethod
    def _to_supplier(record: SupplierRecord) -> Supplier:
        return Supplier(
            id=record.id, name=record.name, contact=record.contact, created_at=record.created_at
        )
