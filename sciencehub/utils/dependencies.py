"""
FastAPI dependencies wiring request handlers to the database and services.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..database import DatabaseManager
from ..services.analytics_service import AnalyticsService
from ..services.availability_service import AvailabilityService
from ..services.event_service import EventService
from ..services.notification_service import NotificationDispatcher
from ..services.registration_service import RegistrationService
from ..stores.sqlalchemy_store import SQLAlchemyEventStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_manager(request: Request) -> DatabaseManager:
    return request.app.state.db


async def get_db(db_manager: DatabaseManager = Depends(get_db_manager)) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for getting database sessions.

    Usage in FastAPI endpoints:
        @router.post("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with db_manager.get_session() as session:
        yield session


def get_registration_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> RegistrationService:
    return RegistrationService(SQLAlchemyEventStore(db), settings)


def get_event_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> EventService:
    return EventService(db, settings)


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_availability_service(db: AsyncSession = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_notification_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notifications
