"""
Error handling middleware and exception handlers for the ScienceHub backend.

Every error leaves the API as ``{"error": ..., "error_code": ..., "error_id": ...}``.
"""

import logging
import traceback
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.exceptions import (
    BusinessLogicError,
    ConcurrencyError,
    ErrorCode,
    ExternalServiceError,
    NotFoundError,
    ScienceHubError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_MAP = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.METHOD_NOT_ALLOWED: status.HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_REGISTRATION: status.HTTP_409_CONFLICT,
    ErrorCode.TIME_SLOT_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENCY_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.OPTIMISTIC_LOCK_FAILURE: status.HTTP_409_CONFLICT,
    ErrorCode.PERSISTENCE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.NOTIFICATION_SERVICE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
}


def status_code_for(exc: ScienceHubError) -> int:
    """Map error codes to HTTP status codes."""
    return STATUS_MAP.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(exc: ScienceHubError, error_id: Optional[str] = None) -> JSONResponse:
    content: Dict[str, Any] = exc.to_dict()
    content["error_id"] = error_id or str(uuid4())

    headers = {}
    if exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)

    return JSONResponse(status_code=status_code_for(exc), content=content, headers=headers)


def _describe_validation_errors(exc: RequestValidationError) -> tuple[str, Dict[str, list]]:
    field_errors: Dict[str, list] = {}
    missing = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part != "body"]
        field_path = ".".join(loc) or "body"
        field_errors.setdefault(field_path, []).append(error["msg"])
        if error["type"] == "missing":
            missing.append(field_path)

    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        first_field = next(iter(field_errors), "body")
        message = f"Invalid {first_field}: {field_errors[first_field][0]}" if field_errors else "Invalid request"
    return message, field_errors


async def science_hub_error_handler(request: Request, exc: ScienceHubError) -> JSONResponse:
    _log_domain_error(exc, request)
    return error_response(exc)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request bodies that fail validation are client errors (400)."""
    message, field_errors = _describe_validation_errors(exc)
    logger.warning(f"Request validation failed for {request.method} {request.url.path}: {message}")
    return error_response(ValidationError(message, field_errors=field_errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    content = {
        "error": str(exc.detail),
        "error_code": error_code.value,
        "error_id": str(uuid4()),
    }
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


def _log_domain_error(exc: ScienceHubError, request: Request, error_id: Optional[str] = None) -> None:
    extra = {
        "error_id": error_id,
        "error_code": exc.error_code.value,
        "method": request.method,
        "path": request.url.path,
        "details": exc.details,
    }
    if isinstance(exc, (ValidationError, NotFoundError, BusinessLogicError)):
        logger.warning(f"Client error: {exc.message}", extra=extra)
    elif isinstance(exc, (ConcurrencyError, ExternalServiceError)):
        logger.error(f"System error: {exc.message}", extra=extra)
    else:
        logger.error(f"Server error: {exc.message}", extra=extra)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Converts anything the exception handlers let through into a 500 error body."""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        error_id = str(uuid4())

        try:
            return await call_next(request)
        except ScienceHubError as exc:
            _log_domain_error(exc, request, error_id)
            return error_response(exc, error_id)
        except Exception as exc:
            return self._handle_unexpected_error(request, exc, error_id)

    def _handle_unexpected_error(self, request: Request, exc: Exception, error_id: str) -> JSONResponse:
        logger.error(
            f"Unexpected error [{error_id}]: {exc}",
            extra={
                "error_id": error_id,
                "error_type": type(exc).__name__,
                "method": request.method,
                "path": request.url.path,
                "traceback": traceback.format_exc(),
            },
        )

        content: Dict[str, Any] = {
            "error": str(exc) or "An unknown error occurred",
            "error_code": ErrorCode.INTERNAL_ERROR.value,
            "error_id": error_id,
        }
        if self.debug:
            content["debug"] = {"error_type": type(exc).__name__, "traceback": traceback.format_exc()}

        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
