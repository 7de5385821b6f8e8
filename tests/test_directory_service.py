from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from factories import make_booking
from src.core.errors import ConflictError, NotFoundError
from src.models.tickets import CustomerRecord, SupplierRecord
from src.schemas.directory import CustomerSaveRequest, SupplierSaveRequest
from src.services.directory_service import (
    DirectoryService,
    find_name_conflict,
    rename_party_in_bookings,
)


class StubDirectoryRepository:
    def __init__(self) -> None:
        self.customers: List[CustomerRecord] = [
            CustomerRecord(id="cust-1", name="Acme Travel", phone="011"),
            CustomerRecord(id="cust-2", name="Blue Sky", phone=None),
        ]
        self.suppliers: List[SupplierRecord] = [
            SupplierRecord(id="sup-1", name="Global Fares", contact="desk@globalfares.test"),
        ]
        self.inserted: Optional[Dict[str, Any]] = None

    def list_customers(self) -> List[CustomerRecord]:
        return list(self.customers)

    def insert_customer(self, payload: Dict[str, Any]) -> CustomerRecord:
        self.inserted = payload
        record = CustomerRecord(id=f"cust-{len(self.customers) + 1}", **payload)
        self.customers.append(record)
        return record

    def update_customer(self, customer_id: str, payload: Dict[str, Any]) -> Optional[CustomerRecord]:
        for index, record in enumerate(self.customers):
            if record.id == customer_id:
                self.customers[index] = record.model_copy(update=payload)
                return self.customers[index]
        return None

    def delete_customer(self, customer_id: str) -> bool:
        before = len(self.customers)
        self.customers = [record for record in self.customers if record.id != customer_id]
        return len(self.customers) < before

    def list_suppliers(self) -> List[SupplierRecord]:
        return list(self.suppliers)

    def insert_supplier(self, payload: Dict[str, Any]) -> SupplierRecord:
        record = SupplierRecord(id=f"sup-{len(self.suppliers) + 1}", **payload)
        self.suppliers.append(record)
        return record

    def update_supplier(self, supplier_id: str, payload: Dict[str, Any]) -> Optional[SupplierRecord]:
        for index, record in enumerate(self.suppliers):
            if record.id == supplier_id:
                self.suppliers[index] = record.model_copy(update=payload)
                return self.suppliers[index]
        return None

    def delete_supplier(self, supplier_id: str) -> bool:
        before = len(self.suppliers)
        self.suppliers = [record for record in self.suppliers if record.id != supplier_id]
        return len(self.suppliers) < before


class StubTicketsRepository:
    def __init__(self, renamed: int = 0, fail: bool = False) -> None:
        self.renamed = renamed
        self.fail = fail
        self.calls: List[Tuple[str, str, str]] = []

    def rename_party(self, column: str, previous_name: str, current_name: str) -> int:
        self.calls.append((column, previous_name, current_name))
        if self.fail:
            raise httpx.ReadTimeout("timed out")
        return self.renamed


def _service(tickets: Optional[StubTicketsRepository] = None):
    repository = StubDirectoryRepository()
    tickets = tickets or StubTicketsRepository(renamed=2)
    return DirectoryService(repository=repository, tickets_repository=tickets), repository, tickets


def test_duplicate_customer_name_is_rejected_ignoring_case_and_spaces():
    service, repository, _ = _service()
    with pytest.raises(ConflictError) as exc_info:
        service.create_customer(CustomerSaveRequest(name="  acme TRAVEL "))
    assert exc_info.value.details == {"conflictingValue": "Acme Travel"}
    assert exc_info.value.status_code == 409
    assert repository.inserted is None


def test_create_customer_trims_name():
    service, repository, _ = _service()
    customer = service.create_customer(CustomerSaveRequest(name=" Sunrise Tours ", phone="077"))
    assert customer.name == "Sunrise Tours"
    assert repository.inserted == {"name": "Sunrise Tours", "phone": "077"}


def test_rename_to_another_customers_name_conflicts():
    service, _, tickets = _service()
    with pytest.raises(ConflictError):
        service.update_customer("cust-2", CustomerSaveRequest(name="acme travel"))
    assert tickets.calls == []


def test_updating_phone_only_keeps_name_and_skips_cascade():
    service, _, tickets = _service()
    result = service.update_customer("cust-1", CustomerSaveRequest(name="Acme Travel", phone="022"))
    assert result.customer.phone == "022"
    assert result.outcome.status == "entity_renamed"
    assert tickets.calls == []


def test_customer_rename_cascades_to_bookings():
    service, _, tickets = _service()
    result = service.update_customer("cust-1", CustomerSaveRequest(name="Acme Tours"))
    assert tickets.calls == [("customer_name", "Acme Travel", "Acme Tours")]
    assert result.customer.name == "Acme Tours"
    assert result.outcome.status == "bookings_cascaded"
    assert result.outcome.cascaded_bookings == 2


def test_failed_cascade_keeps_entity_rename_and_reports_it():
    service, repository, _ = _service(StubTicketsRepository(fail=True))
    result = service.update_supplier("sup-1", SupplierSaveRequest(name="World Fares"))
    assert result.outcome.status == "cascade_failed"
    assert "Global Fares" in result.outcome.reason
    assert repository.suppliers[0].name == "World Fares"


def test_update_missing_customer_raises_not_found():
    service, _, _ = _service()
    with pytest.raises(NotFoundError):
        service.update_customer("cust-99", CustomerSaveRequest(name="Nobody"))


def test_delete_missing_supplier_raises_not_found():
    service, _, _ = _service()
    with pytest.raises(NotFoundError):
        service.delete_supplier("sup-99")


def test_rename_replaces_only_exact_matches():
    bookings = [
        make_booking("t-1", customer_name="Acme Travel"),
        make_booking("t-2", customer_name="Acme Travel Ltd"),
        make_booking("t-3", customer_name="Acme Travel"),
    ]
    renamed = rename_party_in_bookings(bookings, "customer", "Acme Travel", "Acme Tours")
    assert [booking.customer_name for booking in renamed] == [
        "Acme Tours",
        "Acme Travel Ltd",
        "Acme Tours",
    ]
    assert all(booking.customer_name != "Acme Travel" for booking in renamed)
    assert bookings[0].customer_name == "Acme Travel"


def test_supplier_rename_leaves_customer_names_alone():
    bookings = [make_booking(customer_name="Global Fares", supplier_name="Global Fares")]
    renamed = rename_party_in_bookings(bookings, "supplier", "Global Fares", "World Fares")
    assert renamed[0].supplier_name == "World Fares"
    assert renamed[0].customer_name == "Global Fares"


def test_find_name_conflict_excludes_the_record_being_edited():
    records = [CustomerRecord(id="cust-1", name="Acme Travel")]
    assert find_name_conflict("ACME travel", records, exclude_id="cust-1") is None
    assert find_name_conflict("ACME travel", records).id == "cust-1"
