"""API endpoints for the ScienceHub backend."""

from fastapi import APIRouter

from .analytics import router as analytics_router
from .availability import router as availability_router
from .events import router as events_router
from .registrations import router as registrations_router

api_router = APIRouter()

api_router.include_router(registrations_router)
api_router.include_router(events_router)
api_router.include_router(analytics_router)
api_router.include_router(availability_router)

__all__ = ["api_router"]
