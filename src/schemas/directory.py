from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from src.shared.base import BaseSchema


PartyType = Literal["customer", "supplier"]
RenameStatus = Literal["entity_renamed", "bookings_cascaded", "cascade_failed"]


class Customer(BaseSchema):
    id: str
    name: str
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


class Supplier(BaseSchema):
    id: str
    name: str
    contact: Optional[str] = None
    created_at: Optional[datetime] = None


class CustomerSaveRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = None


class SupplierSaveRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200)
    contact: Optional[str] = None


class RenameOutcome(BaseSchema):
    status: RenameStatus
    party_type: PartyType
    entity_id: str
    previous_name: str
    current_name: str
    cascaded_bookings: int = 0
    reason: Optional[str] = None


class CustomerUpdateResult(BaseSchema):
    customer: Customer
    outcome: RenameOutcome


class SupplierUpdateResult(BaseSchema):
    supplier: Supplier
    outcome: RenameOutcome
