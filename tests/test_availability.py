"""Tests for the availability projector and time slot checks."""

import datetime as dt

import pytest
from sqlalchemy import select

from sciencehub.models import TimeSlot
from sciencehub.schemas.availability import DateStatus
from sciencehub.services.availability_service import (
    TIME_GRID,
    AvailabilityService,
    date_status,
    find_conflicting_slots,
    is_time_available,
    project_date_availability,
    slots_overlap,
    validate_time_format,
)
from sciencehub.utils.exceptions import TimeSlotConflictError

from conftest import add_slot, make_event

DAY = dt.date(2030, 5, 17)
NEXT_DAY = dt.date(2030, 5, 18)


def slot(start="10:00", end="12:00", date=DAY, **details) -> TimeSlot:
    return TimeSlot(date=date, start_time=start, end_time=end, slot_details=details)


class TestProjectDateAvailability:
    """Tests for whole-date classification."""

    def test_partial_when_some_slots_booked(self):
        """One booked slot out of three makes the date partial."""
        slots = [slot(booked=True), slot("12:00", "14:00"), slot("14:00", "16:00")]
        assert project_date_availability(slots)[DAY] is DateStatus.PARTIAL

    def test_free_when_nothing_booked(self):
        assert project_date_availability([slot(), slot("13:00", "14:00")])[DAY] is DateStatus.FREE

    def test_busy_when_everything_booked(self):
        slots = [slot(booked=True), slot("13:00", "14:00", type="event")]
        assert project_date_availability(slots)[DAY] is DateStatus.BUSY

    def test_event_type_counts_as_booked(self):
        assert project_date_availability([slot(type="event")])[DAY] is DateStatus.BUSY

    def test_dates_are_classified_independently(self):
        projection = project_date_availability([slot(booked=True), slot(date=NEXT_DAY)])
        assert projection == {DAY: DateStatus.BUSY, NEXT_DAY: DateStatus.FREE}

    def test_missing_date_is_busy(self):
        """A date with no returned slots defaults to busy."""
        projection = project_date_availability([slot()])
        assert date_status(projection, NEXT_DAY) is DateStatus.BUSY
        assert date_status({}, DAY) is DateStatus.BUSY


class TestIsTimeAvailable:
    """Tests for probing a single time of day."""

    def test_no_matching_slot_is_available(self):
        """A time no slot covers is available, unlike a missing date."""
        assert is_time_available([slot("10:00", "12:00", booked=True)], "15:00") is True
        assert is_time_available([], "15:00") is True

    @pytest.mark.parametrize("probe", ["10:00", "11:00", "12:00"])
    def test_booked_slot_covers_both_ends(self, probe):
        assert is_time_available([slot("10:00", "12:00", booked=True)], probe) is False

    def test_unbooked_slot_is_available(self):
        assert is_time_available([slot("10:00", "12:00")], "11:00") is True

    def test_any_booked_overlapping_slot_blocks_the_time(self):
        """A free slot listed first does not hide a booked one covering the same time."""
        slots = [slot("09:00", "13:00"), slot("10:30", "12:00", booked=True)]
        assert is_time_available(slots, "11:00") is False
        assert is_time_available(slots, "12:30") is True

    def test_accepts_seconds_in_slot_times(self):
        assert is_time_available([slot("10:00:00", "12:00:00", type="event")], "11:30") is False


class TestTimeSlotConflicts:
    """Tests for overlap detection."""

    def test_touching_intervals_do_not_overlap(self):
        assert slots_overlap("10:00", "12:00", "12:00", "13:00") is False

    def test_overlapping_intervals(self):
        assert slots_overlap("10:00", "12:00", "11:59", "13:00") is True
        assert slots_overlap("09:00", "18:00", "10:00", "11:00") is True

    def test_find_conflicting_slots_filters_date_and_excluded_event(self):
        own = slot("10:00", "12:00", event_id="e1", type="event")
        other = slot("11:00", "13:00", event_id="e2", type="event")
        elsewhere = slot("10:00", "12:00", date=NEXT_DAY)

        conflicts = find_conflicting_slots([own, other, elsewhere], DAY, "10:30", "11:30", "e1")

        assert conflicts == [other]

    @pytest.mark.parametrize("value,valid", [
        ("09:30", True), ("9:30", True), ("23:59", True),
        ("24:00", False), ("12:60", False), ("noon", False),
    ])
    def test_time_format(self, value, valid):
        assert validate_time_format(value) is valid

    def test_time_grid_spans_evening(self):
        assert TIME_GRID[0] == dt.time(9, 0)
        assert TIME_GRID[-1] == dt.time(22, 30)
        assert len(TIME_GRID) == 28


class TestAvailabilityService:
    """Tests for the database-backed availability service."""

    async def test_list_dates_from_today(self, session):
        await add_slot(session, dt.date(2020, 1, 1), "10:00", "11:00", booked=True)
        await add_slot(session, DAY, "10:00", "11:00", booked=True)
        await add_slot(session, DAY, "12:00", "13:00")

        dates = await AvailabilityService(session).list_date_availability(today=dt.date(2030, 1, 1))

        assert [(d.date, d.status) for d in dates] == [(DAY, DateStatus.PARTIAL)]

    async def test_get_day_with_probe(self, session):
        await add_slot(session, DAY, "18:00", "20:00", type="event", event_title="Stars")

        day = await AvailabilityService(session).get_day(DAY, "19:00")

        assert day.status is DateStatus.BUSY
        assert day.probe_available is False
        grid = {entry.time: entry.available for entry in day.time_grid}
        assert grid["17:30"] is True
        assert grid["18:00"] is False
        assert grid["20:00"] is False
        assert grid["20:30"] is True

    async def test_check_time_slot_reports_conflicts(self, session):
        await add_slot(session, DAY, "18:00", "20:00", type="event", event_title="Stars")
        service = AvailabilityService(session)

        clash = await service.check_time_slot(DAY, "19:00", "21:00")
        assert clash.is_valid is False
        assert "Stars" in clash.message
        assert len(clash.conflicts) == 1

        free = await service.check_time_slot(DAY, "20:00", "21:00")
        assert free.is_valid is True

    async def test_check_time_slot_validates_input(self, session):
        service = AvailabilityService(session)
        assert (await service.check_time_slot(DAY, "7pm", "21:00")).is_valid is False
        assert (await service.check_time_slot(DAY, "21:00", "20:00")).is_valid is False

    async def test_sync_event_slot_creates_then_moves(self, session):
        event = make_event()
        session.add(event)
        await session.flush()
        service = AvailabilityService(session)

        await service.sync_event_slot(event)
        await session.commit()

        event.start_time = dt.datetime(2030, 5, 17, 10, 0)
        event.end_time = dt.datetime(2030, 5, 17, 11, 30)
        await service.sync_event_slot(event)
        await session.commit()

        slots = (await session.execute(select(TimeSlot))).scalars().all()
        assert len(slots) == 1
        assert (slots[0].start_time, slots[0].end_time) == ("10:00", "11:30")
        assert slots[0].slot_details["type"] == "event"
        assert slots[0].slot_details["event_id"] == str(event.id)

    async def test_sync_event_slot_rejects_conflict(self, session):
        await add_slot(session, DAY, "20:00", "22:00", booked=True, event_title="Rent")
        event = make_event()
        session.add(event)
        await session.flush()

        with pytest.raises(TimeSlotConflictError):
            await AvailabilityService(session).sync_event_slot(event)
