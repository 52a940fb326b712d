"""SQLAlchemy implementation of the EventRegistrationStore."""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import Event
from ..schemas.registration import EventRegistrations
from ..utils.exceptions import EventNotFoundError, OptimisticLockError, PersistenceError
from .interfaces import EventRegistrationStore, EventSnapshot

logger = logging.getLogger(__name__)


def registrations_of(event: Event) -> tuple[EventRegistrations, bool]:
    """Structured registrations of an event row and whether they came from legacy columns."""
    if event.registrations:
        return EventRegistrations.model_validate(event.registrations), False
    return EventRegistrations.from_legacy(
        event.registrations_list,
        event.max_registrations,
        event.current_registration_count,
    ), True


class SQLAlchemyEventStore(EventRegistrationStore):
    """Event registration store on the ``events`` table.

    Writes are ``UPDATE ... WHERE id = :id AND version = :expected`` and bump
    the version, so two writers that read the same version cannot both win.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load(self, event_id: UUID) -> EventSnapshot:
        query = (
            select(Event)
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching event data for {event_id}: {e}")
            raise PersistenceError(f"Failed to fetch event data: {e}") from e

        event = result.scalar_one_or_none()
        if event is None:
            raise EventNotFoundError(str(event_id))

        registrations, legacy_shape = registrations_of(event)
        return EventSnapshot(
            event=event,
            registrations=registrations,
            version=event.version,
            legacy_shape=legacy_shape,
        )

    async def save_registrations(
        self,
        event_id: UUID,
        registrations: EventRegistrations,
        expected_version: int,
    ) -> int:
        statement = (
            update(Event)
            .where(Event.id == event_id, Event.version == expected_version)
            .values(
                registrations=registrations.model_dump(mode="json"),
                version=Event.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
            if result.rowcount == 0:
                await self.session.rollback()
                raise OptimisticLockError("Event", str(event_id))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating event {event_id}: {e}")
            raise PersistenceError(f"Failed to update event: {e}") from e

        return expected_version + 1
