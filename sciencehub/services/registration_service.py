"""
Registration recorder with capacity accounting and optimistic concurrency control.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from ..config import Settings, get_settings
from ..models.event import Event
from ..schemas.pricing import PriceQuote
from ..schemas.registration import (
    EventRegistrations,
    EventRegistrationsResponse,
    RegistrationRecord,
)
from ..stores.interfaces import EventRegistrationStore
from ..utils.exceptions import (
    CapacityExceededError,
    DuplicateRegistrationError,
    RegistrationNotFoundError,
    ValidationError,
)
from ..utils.logging_config import log_business_event
from ..utils.retry import retry_on_concurrency_error
from .pricing_service import quote_for_event

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    """Outcome of a recorded registration."""

    event: Event
    registration: Dict[str, Any]
    quote: PriceQuote
    registrations: EventRegistrations
    version: int

    @property
    def registration_id(self) -> str:
        return self.registration["id"]

    @property
    def total_amount(self) -> float:
        return self.registration["total_amount"]


class RegistrationService:
    """Service for recording, cancelling and listing event registrations."""

    def __init__(self, store: EventRegistrationStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.max_attempts = self.settings.registration_max_attempts

    @retry_on_concurrency_error(max_attempts=3, base_delay=0.05, max_delay=0.5)
    async def register(self, event_id: UUID, record: RegistrationRecord) -> RegistrationResult:
        """
        Append a registration to an event and persist the recomputed counters.

        The event is re-read on every attempt, so a write that loses a race is
        retried against fresh counters and the capacity check sees them.

        Args:
            event_id: ID of the event to register for
            record: Registration submitted by the form

        Returns:
            RegistrationResult with the stored entry and the server-side quote

        Raises:
            ValidationError: Ticket counts outside the configured bounds
            EventNotFoundError: Unknown event
            DuplicateRegistrationError: Registration id already present
            CapacityExceededError: Not enough headroom left
            ConcurrencyError: Still conflicting after all attempts
            PersistenceError: The store failed to read or write
        """
        self._validate_ticket_bounds(record)

        snapshot = await self.store.load(event_id)
        event = snapshot.event
        registrations = snapshot.registrations
        if snapshot.legacy_shape:
            logger.info(f"Event {event_id} has legacy registrations; writing structured shape")

        adults = record.adult_tickets
        children = 0 if event.adults_only else record.child_tickets

        registration_id = record.id or str(uuid4())
        if registrations.find(registration_id) is not None:
            raise DuplicateRegistrationError(registration_id, str(event_id))

        self._check_capacity(registrations.recomputed(), adults + children, event_id)

        quote = quote_for_event(event, adults, children)
        total_amount = float(quote.total)
        if record.total_amount and abs(record.total_amount - total_amount) > 0.005:
            logger.warning(
                f"Client total {record.total_amount} differs from computed total "
                f"{total_amount} for event {event_id}"
            )

        created_at = record.created_at or datetime.now(timezone.utc)
        entry = {
            **record.model_dump(mode="json"),
            "id": registration_id,
            "adult_tickets": adults,
            "child_tickets": children,
            "total_amount": total_amount,
            "status": True,
            "created_at": created_at.isoformat(),
        }

        updated = registrations.with_registration(entry)
        version = await self.store.save_registrations(event_id, updated, snapshot.version)

        log_business_event("registration_recorded", {
            "event_id": str(event_id),
            "registration_id": registration_id,
            "adult_tickets": adults,
            "child_tickets": children,
            "total_amount": total_amount,
            "current": updated.current,
        })

        return RegistrationResult(
            event=event,
            registration=entry,
            quote=quote,
            registrations=updated,
            version=version,
        )

    @retry_on_concurrency_error(max_attempts=3, base_delay=0.05, max_delay=0.5)
    async def set_registration_status(
        self,
        event_id: UUID,
        registration_id: str,
        active: bool,
    ) -> EventRegistrationsResponse:
        """Cancel or reactivate one registration and recompute the counters.

        Entries are never removed. Reactivating is subject to the capacity check.
        """
        snapshot = await self.store.load(event_id)
        registrations = snapshot.registrations

        entry = registrations.find(registration_id)
        if entry is None:
            raise RegistrationNotFoundError(registration_id, str(event_id))

        if bool(entry.get("status")) == active:
            return self._response(event_id, registrations.recomputed(), snapshot.version)

        if active:
            requested = int(entry.get("adult_tickets") or 0) + int(entry.get("child_tickets") or 0)
            self._check_capacity(registrations.recomputed(), requested, event_id)

        updated = registrations.with_status(registration_id, active)
        version = await self.store.save_registrations(event_id, updated, snapshot.version)

        log_business_event("registration_status_changed", {
            "event_id": str(event_id),
            "registration_id": registration_id,
            "active": active,
            "current": updated.current,
        })

        return self._response(event_id, updated, version)

    async def get_registrations(self, event_id: UUID) -> EventRegistrationsResponse:
        """Registrations of an event in structured shape, legacy rows included."""
        snapshot = await self.store.load(event_id)
        return self._response(event_id, snapshot.registrations, snapshot.version)

    def _validate_ticket_bounds(self, record: RegistrationRecord) -> None:
        field_errors = {}
        if record.adult_tickets > self.settings.max_adult_tickets:
            field_errors["adult_tickets"] = [
                f"At most {self.settings.max_adult_tickets} adult tickets per registration"
            ]
        if record.child_tickets > self.settings.max_child_tickets:
            field_errors["child_tickets"] = [
                f"At most {self.settings.max_child_tickets} child tickets per registration"
            ]
        if field_errors:
            raise ValidationError("Invalid ticket counts", field_errors=field_errors)

    @staticmethod
    def _check_capacity(registrations: EventRegistrations, requested: int, event_id: UUID) -> None:
        capacity = registrations.capacity
        if capacity is None:
            return
        if registrations.current + requested > capacity:
            available = max(capacity - registrations.current, 0)
            logger.info(
                f"Rejecting {requested} tickets for event {event_id}: "
                f"{registrations.current}/{capacity} taken"
            )
            raise CapacityExceededError(requested, available, str(event_id))

    @staticmethod
    def _response(event_id: UUID, registrations: EventRegistrations, version: int) -> EventRegistrationsResponse:
        return EventRegistrationsResponse(
            event_id=event_id,
            version=version,
            **registrations.model_dump(),
        )
