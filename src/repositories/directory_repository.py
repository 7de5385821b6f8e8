from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.core.supabase import SupabaseClient
from src.models.tickets import CustomerRecord, SupplierRecord


class DirectoryRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_customers(self) -> List[CustomerRecord]:
        rows = self.client.select(table="customers", select="*", order="name.asc")
        return [CustomerRecord.model_validate(row) for row in rows]

    def insert_customer(self, payload: Dict[str, Any]) -> CustomerRecord:
        rows = self.client.insert(table="customers", payload=payload)
        return CustomerRecord.model_validate(rows[0])

    def update_customer(self, customer_id: str, payload: Dict[str, Any]) -> Optional[CustomerRecord]:
        rows = self.client.update(
            table="customers", payload=payload, filters=[("id", f"eq.{customer_id}")]
        )
        if not rows:
            return None
        return CustomerRecord.model_validate(rows[0])

    def delete_customer(self, customer_id: str) -> bool:
        return bool(self.client.delete(table="customers", filters=[("id", f"eq.{customer_id}")]))

    def list_suppliers(self) -> List[SupplierRecord]:
        rows = self.client.select(table="suppliers", select="*", order="name.asc")
        return [SupplierRecord.model_validate(row) for row in rows]

    def insert_supplier(self, payload: Dict[str, Any]) -> SupplierRecord:
        rows = self.client.insert(table="suppliers", payload=payload)
        return SupplierRecord.model_validate(rows[0])

    def update_supplier(self, supplier_id: str, payload: Dict[str, Any]) -> Optional[SupplierRecord]:
        rows = self.client.update(
            table="suppliers", payload=payload, filters=[("id", f"eq.{supplier_id}")]
        )
        if not rows:
            return None
        return SupplierRecord.model_validate(rows[0])

    def delete_supplier(self, supplier_id: str) -> bool:
        return bool(self.client.delete(table="suppliers", filters=[("id", f"eq.{supplier_id}")]))
