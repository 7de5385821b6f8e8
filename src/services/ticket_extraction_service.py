from __future__ import annotations

import base64
import binascii
import json
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

from src.core.config import get_settings
from src.core.errors import BadRequestError, ExtractionError, UpstreamError
from src.repositories.ticket_files_repository import TicketFilesRepository
from src.schemas.bookings import FlightSegment, Passenger
from src.schemas.extraction import (
    SUPPORTED_TICKET_MIME_TYPES,
    BookingDraft,
    TicketExtractionRequest,
    TicketExtractionResult,
)


logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Extract flight ticket information. Extract ALL flight segments found. For each segment, "
    "extract origin, destination, departure date/time, and arrival date/time. Match each "
    "passenger with their e-ticket number. Respond with a JSON object with keys: "
    "passengers (list of {name, eTicketNo}), segments (list of {origin, destination, "
    "departureDate YYYY-MM-DD, departureTime HH:MM, arrivalDate YYYY-MM-DD, arrivalTime HH:MM, "
    "flightNo}), pnr (6-character locator), issuedDate (YYYY-MM-DD), airlineName."
)


@dataclass
class ExtractionOutcome:
    draft: BookingDraft
    model_name: str
    latency_ms: int


def _clean(value: Any, upper: bool = False) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text.upper() if upper else text


def normalize_extracted_payload(payload: Dict[str, Any]) -> BookingDraft:
    passengers: List[Passenger] = []
    for item in payload.get("passengers") or []:
        if not isinstance(item, dict):
            continue
        name = _clean(item.get("name"))
        if not name:
            continue
        passengers.append(Passenger(name=name, e_ticket_no=_clean(item.get("eTicketNo"))))

    segments: List[FlightSegment] = []
    for item in payload.get("segments") or []:
        if not isinstance(item, dict):
            continue
        segment = FlightSegment(
            origin=_clean(item.get("origin"), upper=True),
            destination=_clean(item.get("destination"), upper=True),
            departure_date=_clean(item.get("departureDate")),
            departure_time=_clean(item.get("departureTime")),
            arrival_date=_clean(item.get("arrivalDate")),
            arrival_time=_clean(item.get("arrivalTime")),
            flight_no=_clean(item.get("flightNo"), upper=True),
        )
        if segment.origin or segment.destination:
            segments.append(segment)

    issued_date: Optional[date] = None
    raw_issued = _clean(payload.get("issuedDate"))
    if raw_issued:
        try:
            issued_date = date.fromisoformat(raw_issued)
        except ValueError:
            issued_date = None

    return BookingDraft(
        passengers=passengers or None,
        segments=segments or None,
        pnr=_clean(payload.get("pnr"), upper=True),
        airline=_clean(payload.get("airlineName") or payload.get("airline")),
        issued_date=issued_date,
    )


def merge_booking_draft(current: Optional[BookingDraft], extracted: BookingDraft) -> BookingDraft:
    """Overlay extracted values on the form state; absent values keep what is there."""
    base = current or BookingDraft()
    updates = {
        field: value
        for field, value in extracted.model_dump(exclude_none=True).items()
        if value not in ([], "")
    }
    if not updates:
        return base
    return BookingDraft.model_validate({**base.model_dump(), **updates})


def build_ticket_file_path(draft_id: str, file_name: str, now: datetime) -> str:
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else "bin"
    return f"tickets/{draft_id}/{int(now.timestamp() * 1000)}.{extension}"


class TicketExtractionService:
    def __init__(self, files_repository: TicketFilesRepository) -> None:
        self.files_repository = files_repository
        self.settings = get_settings()

    def process_upload(self, request: TicketExtractionRequest) -> TicketExtractionResult:
        if request.mime_type not in SUPPORTED_TICKET_MIME_TYPES:
            raise BadRequestError("Unsupported ticket file type")
        try:
            content = base64.b64decode(request.content_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise BadRequestError("Ticket file content must be base64 encoded") from exc

        draft_id = request.draft_id or uuid.uuid4().hex
        path = build_ticket_file_path(draft_id, request.file_name, datetime.now())
        try:
            stored_path = self.files_repository.upload(path, content, request.mime_type)
        except httpx.HTTPError as exc:
            logger.error("Uploading ticket file failed: %s", exc)
            raise UpstreamError("Could not store ticket file") from exc

        current = request.current or BookingDraft()
        try:
            outcome = self.extract(request.content_base64, request.mime_type, request.file_name)
        except ExtractionError as exc:
            logger.warning("Ticket extraction failed for %s: %s", stored_path, exc.message)
            return TicketExtractionResult(
                ticket_file_path=stored_path,
                draft=current,
                extracted=False,
                notice=f"{exc.message}. Enter the ticket details manually.",
            )
        return TicketExtractionResult(
            ticket_file_path=stored_path,
            draft=merge_booking_draft(current, outcome.draft),
            extracted=True,
            model_name=outcome.model_name,
        )

    def extract(self, content_base64: str, mime_type: str, file_name: str = "ticket") -> ExtractionOutcome:
        api_key = self.settings.openai_api_key
        if not api_key:
            raise ExtractionError("Ticket extraction is not configured")

        model_name = self.settings.openai_model_extraction
        attempts = max(self.settings.openai_max_retries, 0) + 1
        last_error: Optional[Exception] = None
        for _ in range(attempts):
            started = time.perf_counter()
            try:
                response = httpx.post(
                    "https://api.openai.com/v1/chat/completions",
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": model_name,
                        "temperature": 0.1,
                        "response_format": {"type": "json_object"},
                        "messages": [
                            {
                                "role": "user",
                                "content": [
                                    self._file_part(content_base64, mime_type, file_name),
                                    {"type": "text", "text": EXTRACTION_PROMPT},
                                ],
                            }
                        ],
                    },
                    timeout=self.settings.openai_timeout_seconds,
                )
                response.raise_for_status()
                content = self._extract_content(response.json())
                structured_payload = json.loads(content)
                if not isinstance(structured_payload, dict):
                    raise ValueError("Model response must be a JSON object")
                return ExtractionOutcome(
                    draft=normalize_extracted_payload(structured_payload),
                    model_name=model_name,
                    latency_ms=int((time.perf_counter() - started) * 1000),
                )
            except (httpx.HTTPError, ValueError) as exc:
                last_error = exc
                continue

        raise ExtractionError(f"Ticket extraction failed after {attempts} attempt(s): {last_error}")

    @staticmethod
    def _file_part(content_base64: str, mime_type: str, file_name: str) -> Dict[str, Any]:
        data_url = f"data:{mime_type};base64,{content_base64}"
        if mime_type == "application/pdf":
            return {"type": "file", "file": {"filename": file_name, "file_data": data_url}}
        return {"type": "image_url", "image_url": {"url": data_url}}

    @staticmethod
    def _extract_content(response_payload: Dict[str, Any]) -> str:
        choices = response_payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ValueError("Model response choices missing")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ValueError("Model response message missing")
        content = message.get("content")
        if not isinstance(content, str):
            raise ValueError("Model response content missing")
        return content
