from __future__ import annotations

from fastapi import APIRouter

from src.api.alerts import router as alerts_router
from src.api.bookings import router as bookings_router
from src.api.customers import router as customers_router
from src.api.dashboard import router as dashboard_router
from src.api.extractions import router as extractions_router
from src.api.health import router as health_router
from src.api.suppliers import router as suppliers_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(bookings_router)
api_router.include_router(customers_router)
api_router.include_router(suppliers_router)
api_router.include_router(dashboard_router)
api_router.include_router(alerts_router)
api_router.include_router(extractions_router)
