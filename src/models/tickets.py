from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class TicketRecord(BaseModel):
    id: str
    passengers: Optional[List[Dict[str, Any]]] = None
    segments: Optional[List[Dict[str, Any]]] = None
    pnr: Optional[str] = None
    issued_date: Optional[date] = None
    airline: Optional[str] = None
    customer_name: Optional[str] = None
    supplier_name: Optional[str] = None
    sales_price: Optional[Decimal] = None
    purchase_price: Optional[Decimal] = None
    profit: Optional[Decimal] = None
    is_dummy: Optional[bool] = None
    status: Optional[str] = None
    reminder_sent: Optional[bool] = None
    created_at: Optional[datetime] = None
    ticket_file_path: Optional[str] = None


class CustomerRecord(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


class SupplierRecord(BaseModel):
    id: str
    name: str
    contact: Optional[str] = None
    created_at: Optional[datetime] = None
