"""Tests for SQLAlchemyEventStore on SQLite."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from sciencehub.models import Event
from sciencehub.schemas.registration import EventRegistrations, RegistrationRecord
from sciencehub.services.registration_service import RegistrationService
from sciencehub.stores.sqlalchemy_store import SQLAlchemyEventStore
from sciencehub.utils.exceptions import EventNotFoundError, OptimisticLockError

from conftest import make_event, registration_payload


async def reload(session, event_id) -> Event:
    result = await session.execute(
        select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


class TestSQLAlchemyEventStore:
    """Tests for loading and conditionally writing registrations."""

    async def test_load_structured_shape(self, session, stored_event):
        store = SQLAlchemyEventStore(session)
        snapshot = await store.load(stored_event.id)
        assert snapshot.version == 1
        assert snapshot.legacy_shape is False
        assert snapshot.registrations.reg_list == []

    async def test_load_unknown_event(self, session):
        with pytest.raises(EventNotFoundError):
            await SQLAlchemyEventStore(session).load(uuid4())

    async def test_save_bumps_version(self, session, stored_event):
        store = SQLAlchemyEventStore(session)
        snapshot = await store.load(stored_event.id)
        updated = snapshot.registrations.with_registration(
            {"id": "r1", "adult_tickets": 2, "child_tickets": 1, "status": True}
        )

        new_version = await store.save_registrations(stored_event.id, updated, snapshot.version)

        event = await reload(session, stored_event.id)
        assert new_version == 2
        assert event.version == 2
        assert event.registrations["current"] == 3
        assert event.registrations["reg_list"][0]["id"] == "r1"

    async def test_stale_version_is_rejected(self, session, stored_event):
        """A write based on an old read does not overwrite a newer one."""
        event_id = stored_event.id
        store = SQLAlchemyEventStore(session)
        stale = await store.load(event_id)

        first = stale.registrations.with_registration({"id": "winner", "adult_tickets": 1, "status": True})
        await store.save_registrations(event_id, first, stale.version)

        second = stale.registrations.with_registration({"id": "loser", "adult_tickets": 1, "status": True})
        with pytest.raises(OptimisticLockError):
            await store.save_registrations(event_id, second, stale.version)

        event = await reload(session, event_id)
        assert [entry["id"] for entry in event.registrations["reg_list"]] == ["winner"]

    async def test_legacy_row_is_written_in_structured_shape(self, session, settings):
        event = make_event(
            registrations=None,
            registrations_list=[{"id": "old", "adult_tickets": 2, "child_tickets": 0, "status": True}],
            max_registrations=10,
            current_registration_count=2,
        )
        session.add(event)
        await session.commit()

        service = RegistrationService(SQLAlchemyEventStore(session), settings)
        await service.register(
            event.id,
            RegistrationRecord(**registration_payload(id="new", adult_tickets=1, child_tickets=1)),
        )

        stored = EventRegistrations.model_validate((await reload(session, event.id)).registrations)
        assert stored.max_regs == 10
        assert stored.current_adults == 3
        assert stored.current_children == 1
        assert [entry["id"] for entry in stored.reg_list] == ["old", "new"]
