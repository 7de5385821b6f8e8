from __future__ import annotations

import json
from typing import List
from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest

from src.core.supabase import SupabaseClient
from src.repositories.ticket_files_repository import TicketFilesRepository
from src.repositories.tickets_repository import TicketsRepository


@pytest.fixture()
def requests_seen(monkeypatch) -> List[httpx.Request]:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "PATCH":
            return httpx.Response(200, json=[{"id": "t-1"}, {"id": "t-2"}])
        if request.url.path.startswith("/storage/v1"):
            return httpx.Response(200, json={"Key": "ok"})
        return httpx.Response(200, json=[])

    client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(SupabaseClient, "_shared_client", client)
    return seen


def test_rename_party_patches_rows_with_the_old_name(requests_seen):
    renamed = TicketsRepository().rename_party("customer_name", "Acme Travel", "Acme Tours")

    assert renamed == 2
    request = requests_seen[0]
    assert request.method == "PATCH"
    assert request.url.path == "/rest/v1/tickets"
    assert dict(parse_qsl(urlsplit(str(request.url)).query)) == {"customer_name": "eq.Acme Travel"}
    assert json.loads(request.content) == {"customer_name": "Acme Tours"}


def test_missing_ticket_returns_none(requests_seen):
    assert TicketsRepository().get_ticket_by_id("missing") is None
    assert requests_seen[0].url.params["id"] == "eq.missing"


def test_ticket_files_are_stored_and_removed_in_bucket(requests_seen):
    repository = TicketFilesRepository()
    path = repository.upload("tickets/draft-1/1.pdf", b"%PDF", "application/pdf")
    repository.remove(path)

    upload, removal = requests_seen
    assert upload.method == "POST"
    assert upload.url.path == "/storage/v1/object/app-files/tickets/draft-1/1.pdf"
    assert upload.headers["content-type"] == "application/pdf"
    assert removal.method == "DELETE"
    assert json.loads(removal.content) == {"prefixes": ["tickets/draft-1/1.pdf"]}


def test_unfiltered_delete_is_refused(requests_seen):
    with pytest.raises(ValueError):
        SupabaseClient().delete("tickets", filters=[])
    assert requests_seen == []
