from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.core.supabase import SupabaseClient
from src.models.tickets import TicketRecord


TICKETS_TABLE = "tickets"


class TicketsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_tickets(self, limit: int = 5000) -> List[TicketRecord]:
        rows = self.client.select(
            table=TICKETS_TABLE,
            select="*",
            order="created_at.desc",
            limit=limit,
        )
        return [TicketRecord.model_validate(row) for row in rows]

    def get_ticket_by_id(self, ticket_id: str) -> Optional[TicketRecord]:
        rows = self.client.select(
            table=TICKETS_TABLE,
            select="*",
            filters=[("id", f"eq.{ticket_id}")],
            limit=1,
        )
        if not rows:
            return None
        return TicketRecord.model_validate(rows[0])

    def insert_ticket(self, payload: Dict[str, Any]) -> TicketRecord:
        rows = self.client.insert(table=TICKETS_TABLE, payload=payload)
        return TicketRecord.model_validate(rows[0])

    def update_ticket(self, ticket_id: str, payload: Dict[str, Any]) -> Optional[TicketRecord]:
        rows = self.client.update(
            table=TICKETS_TABLE,
            payload=payload,
            filters=[("id", f"eq.{ticket_id}")],
        )
        if not rows:
            return None
        return TicketRecord.model_validate(rows[0])

    def delete_ticket(self, ticket_id: str) -> bool:
        rows = self.client.delete(table=TICKETS_TABLE, filters=[("id", f"eq.{ticket_id}")])
        return bool(rows)

    def rename_party(self, column: str, previous_name: str, current_name: str) -> int:
        rows = self.client.update(
            table=TICKETS_TABLE,
            payload={column: current_name},
            filters=[(column, f"eq.{previous_name}")],
        )
        return len(rows)
