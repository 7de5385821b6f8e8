from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Sequence

from src.schemas.alerts import DepartureAlert, DepartureWindows, JourneyEvent, NotificationEntry


NOTIFICATION_LOG_CAP = 30


def alert_key(booking_id: str, segment_index: int, urgency: str) -> str:
    return f"{booking_id}:{segment_index}:{urgency}"


def _format_message(event: JourneyEvent, departure_at: datetime, route: str) -> str:
    when = departure_at.strftime("%Y-%m-%d %H:%M")
    passenger = event.lead_passenger_name or "Unnamed passenger"
    if event.urgency == "urgent":
        return f"Dummy booking {event.pnr} ({passenger}) expires: {route} departs {when}"
    return f"Upcoming departure {event.pnr} ({passenger}): {route} departs {when}"


def build_departure_alerts(windows: DepartureWindows) -> List[DepartureAlert]:
    alerts: List[DepartureAlert] = []
    for event in [*windows.urgent, *windows.standard]:
        for item in event.segments:
            route = f"{item.segment.origin or '?'}-{item.segment.destination or '?'}"
            alerts.append(
                DepartureAlert(
                    key=alert_key(event.booking_id, item.segment_index, event.urgency),
                    booking_id=event.booking_id,
                    segment_index=item.segment_index,
                    urgency=event.urgency,
                    message=_format_message(event, item.departure_at, route),
                )
            )
    return alerts


def merge_notification_log(
    log: Sequence[NotificationEntry],
    alerts: Iterable[DepartureAlert],
    now: datetime,
    cap: int = NOTIFICATION_LOG_CAP,
) -> List[NotificationEntry]:
    """Prepend alerts whose message is not logged yet, newest first, keeping ``cap`` entries."""
    known = {entry.message for entry in log}
    fresh: List[NotificationEntry] = []
    for alert in alerts:
        if alert.message in known:
            continue
        known.add(alert.message)
        fresh.append(
            NotificationEntry(
                key=alert.key, urgency=alert.urgency, message=alert.message, created_at=now
            )
        )
    fresh.reverse()
    return [*fresh, *log][:cap]
