"""Tests for page-view analytics and registration reporting."""

import csv
import io
from decimal import Decimal

import pytest

from sciencehub.schemas.analytics import PageViewCreate, TimeSpentUpdate
from sciencehub.schemas.registration import EventRegistrations
from sciencehub.services.analytics_service import CSV_COLUMNS, AnalyticsService
from sciencehub.utils.exceptions import PageViewNotFoundError

from conftest import make_event


def registrations(max_regs=None, *entries) -> dict:
    return EventRegistrations(max_regs=max_regs, reg_list=list(entries)).recomputed().model_dump(mode="json")


@pytest.fixture
def service(session) -> AnalyticsService:
    return AnalyticsService(session)


class TestPageViews:
    """Tests for tracking views and their durations."""

    async def test_time_spent_goes_to_most_recent_view(self, service, session):
        first = await service.track_page_view(PageViewCreate(path="/", session_id="s1"))
        second = await service.track_page_view(PageViewCreate(path="/", session_id="s1"))

        updated = await service.update_time_spent(TimeSpentUpdate(session_id="s1", path="/", time_spent=12))

        assert updated.id == second.id
        await session.refresh(first)
        assert first.time_spent is None

    async def test_unknown_view(self, service):
        with pytest.raises(PageViewNotFoundError):
            await service.update_time_spent(TimeSpentUpdate(session_id="s1", path="/", time_spent=1))

    async def test_page_stats_exclude_admin_by_default(self, service):
        for session_id, time_spent in [("a", 10), ("a", 20), ("b", None)]:
            await service.track_page_view(PageViewCreate(path="/events", session_id=session_id))
            if time_spent is not None:
                await service.update_time_spent(
                    TimeSpentUpdate(session_id=session_id, path="/events", time_spent=time_spent)
                )
        await service.track_page_view(PageViewCreate(path="/admin", session_id="x", is_admin=True))

        stats = await service.get_page_stats()

        assert [s.path for s in stats] == ["/events"]
        assert stats[0].visits == 3
        assert stats[0].unique_visitors == 2
        assert stats[0].avg_time_spent == 15.0

        with_admin = await service.get_page_stats(include_admin=True)
        assert {s.path for s in with_admin} == {"/events", "/admin"}


class TestEventStats:
    """Tests for per-event registration statistics."""

    async def test_counts_active_registrations_only(self, service, session):
        event = make_event(registrations=registrations(
            10,
            {"id": "a", "adult_tickets": 2, "child_tickets": 1, "status": True, "total_amount": 1500},
            {"id": "b", "adult_tickets": 1, "child_tickets": 0, "status": False, "total_amount": 500},
            {"id": "c", "adult_tickets": 1, "child_tickets": 1, "status": True, "total_amount": 1000},
        ))
        session.add(event)
        await session.commit()

        [stats] = await service.get_event_stats()

        assert stats.registrations == 2
        assert stats.cancelled == 1
        assert (stats.adults, stats.children, stats.total) == (3, 2, 5)
        assert stats.max_regs == 10
        assert stats.fill_percentage == 50.0
        assert stats.revenue == Decimal("2500")

    async def test_legacy_event_and_unbounded_capacity(self, service, session):
        session.add(make_event(
            registrations=None,
            registrations_list=[{"id": "old", "adult_tickets": 4, "status": True}],
            max_registrations=0,
            current_registration_count=4,
        ))
        await session.commit()

        [stats] = await service.get_event_stats()

        assert stats.total == 4
        assert stats.max_regs is None
        assert stats.fill_percentage is None

    async def test_csv_export(self, client, session):
        session.add(make_event(title="Stars", registrations=registrations(
            None, {"id": "a", "adult_tickets": 1, "status": True, "total_amount": 500},
        )))
        await session.commit()

        response = await client.get("/analytics/events/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert list(rows[0]) == CSV_COLUMNS
        assert rows[0]["title"] == "Stars"
        assert rows[0]["total"] == "1"
