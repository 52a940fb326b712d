"""Pytest configuration and shared fixtures."""

import asyncio
import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

import httpx
import pytest

from sciencehub.config import Settings
from sciencehub.database import DatabaseManager
from sciencehub.main import create_app
from sciencehub.models import Event, TimeSlot
from sciencehub.schemas.registration import EventRegistrations
from sciencehub.stores.interfaces import EventRegistrationStore, EventSnapshot
from sciencehub.stores.sqlalchemy_store import registrations_of
from sciencehub.utils.exceptions import EventNotFoundError, OptimisticLockError


def make_event(**overrides: Any) -> Event:
    """A transient Event with every column the services read set explicitly."""
    values: Dict[str, Any] = dict(
        id=uuid4(),
        title="Night at the Observatory",
        short_description="Telescopes and talks",
        description=None,
        event_type="lecture",
        age_category="6+",
        bg_image=None,
        date=dt.date(2030, 5, 17),
        start_time=dt.datetime(2030, 5, 17, 19, 0),
        end_time=dt.datetime(2030, 5, 17, 21, 0),
        location="Main hall",
        status="active",
        payment_type="cost",
        price=Decimal("500"),
        currency="RUB",
        couple_discount=None,
        child_half_price=False,
        adults_only=False,
        payment_link=None,
        languages=["ru"],
        speakers=[],
        registrations=EventRegistrations(max_regs=None).model_dump(mode="json"),
        max_registrations=None,
        current_registration_count=None,
        registrations_list=None,
        version=1,
    )
    values.update(overrides)
    return Event(**values)


def registration_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+7 900 000 00 00",
        "comment": None,
        "adult_tickets": 1,
        "child_tickets": 0,
        "total_amount": 0,
    }
    payload.update(overrides)
    return payload


class InMemoryEventStore(EventRegistrationStore):
    """EventRegistrationStore over a dict of transient Event objects.

    With ``hold_loads = n`` every load waits until ``n`` loads have happened,
    so that ``n`` concurrent registrations all read the same version.
    """

    def __init__(self):
        self.events: Dict[UUID, Event] = {}
        self.saves = 0
        self.hold_loads = 0
        self._loads = 0
        self._released = asyncio.Event()
        self.fail_saves_with: Optional[Exception] = None

    def add(self, event: Event) -> Event:
        self.events[event.id] = event
        return event

    async def load(self, event_id: UUID) -> EventSnapshot:
        event = self.events.get(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))

        registrations, legacy_shape = registrations_of(event)
        snapshot = EventSnapshot(
            event=event,
            registrations=registrations,
            version=event.version,
            legacy_shape=legacy_shape,
        )

        if self.hold_loads:
            self._loads += 1
            if self._loads >= self.hold_loads:
                self._released.set()
            await self._released.wait()
        return snapshot

    async def save_registrations(
        self,
        event_id: UUID,
        registrations: EventRegistrations,
        expected_version: int,
    ) -> int:
        if self.fail_saves_with is not None:
            raise self.fail_saves_with
        event = self.events[event_id]
        if event.version != expected_version:
            raise OptimisticLockError("Event", str(event_id))
        event.registrations = registrations.model_dump(mode="json")
        event.version += 1
        self.saves += 1
        return event.version

    def registrations(self, event_id: UUID) -> EventRegistrations:
        return EventRegistrations.model_validate(self.events[event_id].registrations)


class RecordingDispatcher:
    """Notification dispatcher that keeps messages instead of sending them."""

    def __init__(self):
        self.messages: List[str] = []

    def dispatch(self, text: str, background_tasks=None) -> None:
        self.messages.append(text)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        telegram_bot_token=None,
        telegram_chat_id=None,
        notifications_use_queue=False,
        registration_max_attempts=3,
    )


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
async def db_manager(settings):
    manager = DatabaseManager(settings)
    await manager.initialize(create_tables=True)
    yield manager
    await manager.close()


@pytest.fixture
async def session(db_manager):
    async with db_manager.session_factory() as session:
        yield session


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def app(settings, db_manager, dispatcher):
    application = create_app(settings)
    application.state.db = db_manager
    application.state.notifications = dispatcher
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def stored_event(session):
    """An event persisted in the test database."""
    event = make_event()
    session.add(event)
    await session.commit()
    return event


async def add_slot(session, date: dt.date, start: str, end: str, **details: Any) -> TimeSlot:
    slot = TimeSlot(date=date, start_time=start, end_time=end, slot_details=details)
    session.add(slot)
    await session.commit()
    return slot
