from __future__ import annotations

from functools import lru_cache

from src.core.config import get_settings
from src.repositories.directory_repository import DirectoryRepository
from src.repositories.ticket_files_repository import TicketFilesRepository
from src.repositories.tickets_repository import TicketsRepository
from src.services.alerts_service import AlertsService, NotificationFeed
from src.services.bookings_service import BookingsService
from src.services.dashboard_service import DashboardService
from src.services.directory_service import DirectoryService
from src.services.ticket_extraction_service import TicketExtractionService


@lru_cache
def get_tickets_repository() -> TicketsRepository:
    return TicketsRepository()


@lru_cache
def get_ticket_files_repository() -> TicketFilesRepository:
    return TicketFilesRepository()


@lru_cache
def get_directory_repository() -> DirectoryRepository:
    return DirectoryRepository()


@lru_cache
def get_notification_feed() -> NotificationFeed:
    return NotificationFeed(cap=get_settings().notification_log_cap)


def get_bookings_service() -> BookingsService:
    return BookingsService(
        repository=get_tickets_repository(),
        files_repository=get_ticket_files_repository(),
    )


def get_directory_service() -> DirectoryService:
    return DirectoryService(
        repository=get_directory_repository(),
        tickets_repository=get_tickets_repository(),
    )


def get_dashboard_service() -> DashboardService:
    return DashboardService(bookings_service=get_bookings_service())


def get_alerts_service() -> AlertsService:
    return AlertsService(bookings_service=get_bookings_service(), feed=get_notification_feed())


def get_ticket_extraction_service() -> TicketExtractionService:
    return TicketExtractionService(files_repository=get_ticket_files_repository())
