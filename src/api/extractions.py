from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends

from src.api.dependencies import get_ticket_extraction_service
from src.schemas.extraction import TicketExtractionRequest, TicketExtractionResult
from src.services.ticket_extraction_service import TicketExtractionService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/extractions", tags=["extractions"])


@router.post("")
def extract_ticket(
    request: TicketExtractionRequest,
    service: TicketExtractionService = Depends(get_ticket_extraction_service),
) -> ResponseEnvelope[TicketExtractionResult]:
    result = service.process_upload(request)
    meta = Meta(
        as_of_date=date.today().isoformat(),
        source="ticket_extraction",
        time_window="na",
        calculation_version="v1",
        data_status="live" if result.extracted else "degraded",
        degraded=not result.extracted,
    )
    return ResponseEnvelope(data=result, pagination=None, meta=meta)
