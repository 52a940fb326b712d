"""
Custom exceptions for the ScienceHub backend.
"""

from typing import Any, Dict, Optional, List
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the platform."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Business logic errors
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    TIME_SLOT_CONFLICT = "TIME_SLOT_CONFLICT"

    # Concurrency errors
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    OPTIMISTIC_LOCK_FAILURE = "OPTIMISTIC_LOCK_FAILURE"

    # Upstream errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    NOTIFICATION_SERVICE_ERROR = "NOTIFICATION_SERVICE_ERROR"


class ScienceHubError(Exception):
    """Base exception class for the ScienceHub backend."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        retry_after: Optional[int] = None
    ):
        """Initialize the exception with comprehensive error information."""
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.suggestions = suggestions or []
        self.retry_after = retry_after
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the flat error body returned by the API."""
        result = {
            "error": self.message,
            "error_code": self.error_code.value,
        }

        if self.details:
            result["details"] = self.details

        if self.suggestions:
            result["suggestions"] = self.suggestions

        if self.retry_after:
            result["retry_after"] = self.retry_after

        return result


class ValidationError(ScienceHubError):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field_errors: Optional[Dict[str, List[str]]] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"field_errors": field_errors} if field_errors else None,
            **kwargs
        )
        self.field_errors = field_errors or {}


class NotFoundError(ScienceHubError):
    """Base exception for resource not found errors."""

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id} if resource_type else None,
            **kwargs
        )


class EventNotFoundError(NotFoundError):
    """Exception raised when an event is not found."""

    def __init__(self, event_id: str, **kwargs):
        super().__init__(
            f"Event {event_id} not found",
            resource_type="event",
            resource_id=event_id,
            **kwargs
        )


class RegistrationNotFoundError(NotFoundError):
    """Exception raised when a registration is not in the event's list."""

    def __init__(self, registration_id: str, event_id: Optional[str] = None, **kwargs):
        super().__init__(
            f"Registration {registration_id} not found",
            resource_type="registration",
            resource_id=registration_id,
            **kwargs
        )
        self.event_id = event_id


class PageViewNotFoundError(NotFoundError):
    """Exception raised when no page view matches a session and path."""

    def __init__(self, session_id: str, path: str, **kwargs):
        super().__init__(
            "No matching page view found",
            resource_type="page_view",
            resource_id=f"{session_id}:{path}",
            **kwargs
        )


class BusinessLogicError(ScienceHubError):
    """Base exception for business rule violations."""
    pass


class CapacityExceededError(BusinessLogicError):
    """Exception raised when a registration would exceed event capacity."""

    def __init__(self, requested: int, available: int, event_id: Optional[str] = None, **kwargs):
        super().__init__(
            f"Capacity exceeded: requested {requested}, available {available}",
            error_code=ErrorCode.CAPACITY_EXCEEDED,
            details={"requested": requested, "available": available, "event_id": event_id},
            suggestions=["Try registering fewer tickets"],
            **kwargs
        )
        self.requested = requested
        self.available = available


class DuplicateRegistrationError(BusinessLogicError):
    """Exception raised when a registration id is already in the event's list."""

    def __init__(self, registration_id: str, event_id: Optional[str] = None, **kwargs):
        super().__init__(
            f"Registration {registration_id} already exists",
            error_code=ErrorCode.DUPLICATE_REGISTRATION,
            details={"registration_id": registration_id, "event_id": event_id},
            **kwargs
        )


class TimeSlotConflictError(BusinessLogicError):
    """Exception raised when an event's time overlaps existing slots."""

    def __init__(self, message: str, conflicting_slot_ids: Optional[List[str]] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.TIME_SLOT_CONFLICT,
            details={"conflicting_slot_ids": conflicting_slot_ids or []},
            suggestions=["Choose a different time"],
            **kwargs
        )


class ConcurrencyError(ScienceHubError):
    """Exception raised for concurrency-related issues."""

    def __init__(self, message: str, retry_after: int = 1, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.CONCURRENCY_CONFLICT)
        super().__init__(
            message,
            retry_after=retry_after,
            suggestions=["Please try again"],
            **kwargs
        )


class OptimisticLockError(ConcurrencyError):
    """Exception raised when a conditional write finds a newer version."""

    def __init__(self, resource_type: str, resource_id: str, **kwargs):
        super().__init__(
            f"{resource_type} {resource_id} was modified by another request",
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=ErrorCode.OPTIMISTIC_LOCK_FAILURE,
            **kwargs
        )


class PersistenceError(ScienceHubError):
    """Exception raised when the database rejects a read or write."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.PERSISTENCE_ERROR,
            **kwargs
        )


class ExternalServiceError(ScienceHubError):
    """Exception raised for external service failures."""

    def __init__(self, service_name: str, message: str, status_code: Optional[int] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.EXTERNAL_SERVICE_ERROR)
        super().__init__(
            f"{service_name} service error: {message}",
            details={"service_name": service_name, "status_code": status_code},
            **kwargs
        )
        self.status_code = status_code


class NotificationDeliveryError(ExternalServiceError):
    """Exception raised when the messaging endpoint rejects a message."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            "notification",
            message,
            error_code=ErrorCode.NOTIFICATION_SERVICE_ERROR,
            **kwargs
        )
