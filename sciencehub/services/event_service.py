"""
Event service for creating and updating events from the admin dashboard.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..models.event import Event
from ..schemas.event import EventRecord
from ..schemas.registration import EventRegistrations
from ..stores.sqlalchemy_store import registrations_of
from ..utils.exceptions import (
    EventNotFoundError,
    OptimisticLockError,
    PersistenceError,
    ScienceHubError,
    ValidationError,
)
from ..utils.logging_config import log_business_event
from ..utils.retry import retry_on_concurrency_error
from .availability_service import AvailabilityService

logger = logging.getLogger(__name__)


def _column_values(record: EventRecord) -> Dict[str, Any]:
    values = record.model_dump(exclude={"id", "max_registrations"})
    values["status"] = record.status.value
    values["payment_type"] = record.payment_type.value
    return values


class EventService:
    """Service class for event management operations."""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        """Initialize the event service with database session."""
        self.db = db
        self.settings = settings or get_settings()
        self.max_attempts = self.settings.registration_max_attempts
        self.availability = AvailabilityService(db)

    async def get_event(self, event_id: UUID) -> Event:
        result = await self.db.execute(
            select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
        )
        event = result.scalar_one_or_none()
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    async def save_event(self, record: EventRecord, is_new: bool) -> Event:
        """
        Insert or update an event and keep its time slot in step.

        Args:
            record: Validated event form data
            is_new: Insert when true, update by ``record.id`` otherwise

        Returns:
            The stored event

        Raises:
            ValidationError: Update without an id
            EventNotFoundError: Updating an unknown event
            TimeSlotConflictError: The event's time overlaps another slot
            PersistenceError: The database rejected the write
        """
        if is_new:
            event = await self._create_event(record)
        else:
            if record.id is None:
                raise ValidationError(
                    "Missing required field: eventData.id",
                    field_errors={"id": ["required when updating an event"]},
                )
            event = await self._update_event(record)

        log_business_event("event_saved", {
            "event_id": str(event.id),
            "is_new": is_new,
            "status": event.status,
        })
        return event

    async def _create_event(self, record: EventRecord) -> Event:
        event = Event(**_column_values(record))
        if record.id is not None:
            event.id = record.id
        event.registrations = EventRegistrations(max_regs=record.max_registrations or None).model_dump(mode="json")
        event.version = 1

        try:
            self.db.add(event)
            await self.db.flush()
            await self.availability.sync_event_slot(event)
            await self.db.commit()
        except ScienceHubError:
            await self.db.rollback()
            raise
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Database integrity error creating event: {e}")
            raise PersistenceError(f"Failed to create event: {e.orig}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating event: {e}")
            raise PersistenceError(f"Failed to create event: {e}") from e

        await self.db.refresh(event)
        logger.info(f"Created event {event.id}: {event.title}")
        return event

    @retry_on_concurrency_error(max_attempts=3, base_delay=0.05, max_delay=0.5)
    async def _update_event(self, record: EventRecord) -> Event:
        event = await self.get_event(record.id)
        expected_version = event.version

        values = _column_values(record)
        if "max_registrations" in record.model_fields_set:
            registrations, _ = registrations_of(event)
            values["registrations"] = registrations.model_copy(
                update={"max_regs": record.max_registrations or None}
            ).model_dump(mode="json")

        statement = (
            update(Event)
            .where(Event.id == record.id, Event.version == expected_version)
            .values(**values, version=Event.version + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(statement)
            if result.rowcount == 0:
                await self.db.rollback()
                raise OptimisticLockError("Event", str(record.id))

            event = await self.get_event(record.id)
            await self.availability.sync_event_slot(event)
            await self.db.commit()
        except ScienceHubError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating event {record.id}: {e}")
            raise PersistenceError(f"Failed to update event: {e}") from e

        await self.db.refresh(event)
        logger.info(f"Updated event {event.id} to version {event.version}")
        return event
