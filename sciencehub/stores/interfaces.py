"""Store interfaces (repository pattern).

The registration recorder reads and writes an event's registrations through
this interface so that the persistence collaborator can be swapped for a fake
in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import UUID

from ..models.event import Event
from ..schemas.registration import EventRegistrations


@dataclass(frozen=True)
class EventSnapshot:
    """An event as read at one version, with registrations in structured shape."""

    event: Event
    registrations: EventRegistrations
    version: int
    legacy_shape: bool = False


class EventRegistrationStore(ABC):
    """Interface for reading and conditionally writing event registrations."""

    @abstractmethod
    async def load(self, event_id: UUID) -> EventSnapshot:
        """Return the event's current registrations and version.

        Raises:
            EventNotFoundError: If the event does not exist.
            PersistenceError: If the read fails.
        """
        ...

    @abstractmethod
    async def save_registrations(
        self,
        event_id: UUID,
        registrations: EventRegistrations,
        expected_version: int,
    ) -> int:
        """Write the structured shape if the event is still at ``expected_version``.

        Returns:
            The event's new version.

        Raises:
            OptimisticLockError: If another writer got there first.
            PersistenceError: If the write fails.
        """
        ...
