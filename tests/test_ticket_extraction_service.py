from __future__ import annotations

import base64
import json
from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, List

import httpx
import pytest

from src.core.errors import BadRequestError, ExtractionError
from src.schemas.bookings import Passenger
from src.schemas.extraction import BookingDraft, TicketExtractionRequest
from src.services import ticket_extraction_service
from src.services.ticket_extraction_service import (
    TicketExtractionService,
    build_ticket_file_path,
    merge_booking_draft,
    normalize_extracted_payload,
)


class StubTicketFilesRepository:
    def __init__(self) -> None:
        self.uploaded: List[str] = []

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        _ = content, content_type
        self.uploaded.append(path)
        return path

    def remove(self, path: str) -> None:
        _ = path


def _service(api_key: Any = None) -> TicketExtractionService:
    service = TicketExtractionService(files_repository=StubTicketFilesRepository())
    service.settings = SimpleNamespace(
        openai_api_key=api_key,
        openai_model_extraction="gpt-5-mini",
        openai_max_retries=1,
        openai_timeout_seconds=5,
    )
    return service


def _upload(**overrides: Any) -> TicketExtractionRequest:
    fields = {
        "file_name": "eticket.pdf",
        "mime_type": "application/pdf",
        "content_base64": base64.b64encode(b"%PDF-1.4 ticket").decode("ascii"),
        "draft_id": "draft-1",
    }
    fields.update(overrides)
    return TicketExtractionRequest(**fields)


def _completion(payload: Any) -> httpx.Response:
    return httpx.Response(
        200,
        json={"choices": [{"message": {"content": json.dumps(payload)}}]},
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
    )


def test_normalize_extracted_payload_cleans_values():
    draft = normalize_extracted_payload(
        {
            "passengers": [{"name": " Jane Perera ", "eTicketNo": "603 1234"}, {"name": ""}],
            "segments": [
                {"origin": "cmb", "destination": "dxb", "departureDate": "2026-03-11", "flightNo": "ul225"},
                {"origin": "", "destination": ""},
            ],
            "pnr": "abc123",
            "issuedDate": "2026-03-01",
            "airlineName": "SriLankan Airlines",
        }
    )
    assert [passenger.name for passenger in draft.passengers] == ["Jane Perera"]
    assert draft.segments[0].origin == "CMB"
    assert draft.segments[0].flight_no == "UL225"
    assert len(draft.segments) == 1
    assert draft.pnr == "ABC123"
    assert draft.issued_date == date(2026, 3, 1)
    assert draft.airline == "SriLankan Airlines"


def test_unparseable_issue_date_is_dropped():
    draft = normalize_extracted_payload({"issuedDate": "01/03/2026"})
    assert draft.issued_date is None


def test_merge_keeps_current_values_for_absent_fields():
    current = BookingDraft(
        passengers=[Passenger(name="Typed By Hand")],
        pnr="OLD111",
        airline="Emirates",
    )
    merged = merge_booking_draft(current, BookingDraft(pnr="NEW222"))
    assert merged.pnr == "NEW222"
    assert merged.airline == "Emirates"
    assert merged.passengers[0].name == "Typed By Hand"


def test_ticket_file_path_uses_draft_and_timestamp():
    path = build_ticket_file_path("draft-1", "Scan.JPEG", datetime(2026, 3, 10, 12, 0))
    assert path.startswith("tickets/draft-1/")
    assert path.endswith(".jpeg")


def test_unsupported_mime_type_is_rejected():
    with pytest.raises(BadRequestError):
        _service().process_upload(_upload(mime_type="text/plain"))


def test_invalid_base64_is_rejected():
    with pytest.raises(BadRequestError):
        _service().process_upload(_upload(content_base64="not base64!"))


def test_missing_api_key_returns_notice_and_keeps_draft():
    service = _service(api_key=None)
    current = BookingDraft(pnr="HAND01")
    result = service.process_upload(_upload(current=current))
    assert result.extracted is False
    assert "Enter the ticket details manually" in result.notice
    assert result.draft.pnr == "HAND01"
    assert result.ticket_file_path == service.files_repository.uploaded[0]


def test_extract_without_api_key_raises():
    with pytest.raises(ExtractionError):
        _service(api_key=None).extract("AAAA", "image/png")


def test_successful_extraction_merges_into_current_draft(monkeypatch):
    captured = {}

    def fake_post(url: str, **kwargs: Any) -> httpx.Response:
        captured["url"] = url
        captured["body"] = kwargs["json"]
        return _completion({"pnr": "xyz789", "airlineName": "Emirates"})

    monkeypatch.setattr(ticket_extraction_service.httpx, "post", fake_post)
    result = _service(api_key="sk-test").process_upload(
        _upload(current=BookingDraft(issued_date=date(2026, 3, 1)))
    )

    assert result.extracted is True
    assert result.model_name == "gpt-5-mini"
    assert result.draft.pnr == "XYZ789"
    assert result.draft.airline == "Emirates"
    assert result.draft.issued_date == date(2026, 3, 1)
    assert captured["body"]["messages"][0]["content"][0]["type"] == "file"


def test_extraction_retries_then_reports_failure(monkeypatch):
    calls = []

    def failing_post(url: str, **kwargs: Any) -> httpx.Response:
        _ = kwargs
        calls.append(url)
        raise httpx.ConnectError("unreachable")

    monkeypatch.setattr(ticket_extraction_service.httpx, "post", failing_post)
    result = _service(api_key="sk-test").process_upload(_upload(mime_type="image/png", file_name="t.png"))
    assert len(calls) == 2
    assert result.extracted is False
    assert result.notice
