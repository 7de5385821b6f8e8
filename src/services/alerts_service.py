from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import List, Optional

from src.analytics.departure_windows import evaluate_departure_windows
from src.analytics.notifications import build_departure_alerts, merge_notification_log
from src.core.config import get_settings
from src.schemas.alerts import DepartureWindows, NotificationEntry
from src.services.bookings_service import BookingsService
from src.shared.time import local_now


class NotificationFeed:
    """Process-wide rolling log of departure alerts, newest first."""

    def __init__(self, cap: int) -> None:
        self.cap = cap
        self._entries: List[NotificationEntry] = []
        self._lock = Lock()

    def publish(self, windows: DepartureWindows) -> List[NotificationEntry]:
        alerts = build_departure_alerts(windows)
        with self._lock:
            self._entries = merge_notification_log(
                self._entries, alerts, now=windows.generated_at, cap=self.cap
            )
            return list(self._entries)

    def entries(self) -> List[NotificationEntry]:
        with self._lock:
            return list(self._entries)


class AlertsService:
    def __init__(self, bookings_service: BookingsService, feed: NotificationFeed) -> None:
        self.bookings_service = bookings_service
        self.feed = feed
        self.settings = get_settings()

    def _now(self) -> datetime:
        return local_now(self.settings.local_timezone)

    def get_departure_windows(self, now: Optional[datetime] = None) -> DepartureWindows:
        """Recompute both windows and feed the resulting alerts into the notification log."""
        windows = evaluate_departure_windows(
            self.bookings_service.load_snapshot(),
            now or self._now(),
            standard_hours=self.settings.standard_alert_hours,
            urgent_hours=self.settings.urgent_alert_hours,
        )
        self.feed.publish(windows)
        return windows

    def refresh_notifications(self, now: Optional[datetime] = None) -> List[NotificationEntry]:
        self.get_departure_windows(now)
        return self.feed.entries()
