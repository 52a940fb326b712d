"""FastAPI application setup and configuration."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from sciencehub.api import api_router
from sciencehub.config import Settings, get_settings
from sciencehub.database import DatabaseManager
from sciencehub.middleware import CORSHeadersMiddleware, ErrorHandlerMiddleware, LoggingMiddleware
from sciencehub.middleware.error_handler import (
    http_exception_handler,
    request_validation_error_handler,
    science_hub_error_handler,
)
from sciencehub.schemas.common import HealthResponse
from sciencehub.services.notification_service import NotificationDispatcher
from sciencehub.utils.exceptions import ScienceHubError
from sciencehub.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting ScienceHub backend ({settings.environment})")
    await app.state.db.initialize(create_tables=settings.database_url.startswith("sqlite"))
    yield
    logger.info("Shutting down ScienceHub backend")
    await app.state.db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The database manager and notification dispatcher are created here and
    stored on ``app.state``; handlers reach them through dependencies.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="ScienceHub API",
        description="Event registration, event management, availability and page-view analytics.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "registrations", "description": "Event registration and admin registration management"},
            {"name": "events", "description": "Event create and update"},
            {"name": "availability", "description": "Date and time availability for the booking picker"},
            {"name": "analytics", "description": "Page-view tracking and reporting"},
            {"name": "health", "description": "Service health"},
        ],
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = DatabaseManager(settings)
    app.state.notifications = NotificationDispatcher(settings)

    app.add_exception_handler(ScienceHubError, science_hub_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Added innermost first: errors, then logging, then CORS on the outside
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.debug)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSHeadersMiddleware,
        allow_origin=settings.cors_allow_origin,
        allow_headers=settings.cors_allow_headers,
        allow_methods=settings.cors_allow_methods,
    )

    app.include_router(api_router)

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check():
        """Basic health check endpoint."""
        return HealthResponse()

    return app


def _configure_logging(settings: Settings) -> None:
    setup_logging(
        log_level="DEBUG" if settings.debug else settings.log_level,
        log_file=settings.log_file,
        enable_json_logging=settings.enable_json_logging or settings.environment == "production",
    )


_configure_logging(get_settings())
app = create_app()
