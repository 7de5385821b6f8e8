from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Depends

from src.api.dependencies import get_alerts_service
from src.core.config import get_settings
from src.schemas.alerts import DepartureWindows, NotificationEntry
from src.services.alerts_service import AlertsService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/alerts", tags=["alerts"])


def _meta() -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="tickets",
        time_window=f"{get_settings().standard_alert_hours}h",
        calculation_version="v1",
    )


@router.get("/departures")
def departure_alerts(
    service: AlertsService = Depends(get_alerts_service),
) -> ResponseEnvelope[DepartureWindows]:
    return ResponseEnvelope(data=service.get_departure_windows(), meta=_meta())


@router.get("/notifications")
def notification_feed(
    service: AlertsService = Depends(get_alerts_service),
) -> ResponseEnvelope[List[NotificationEntry]]:
    return ResponseEnvelope(data=service.refresh_notifications(), meta=_meta())
