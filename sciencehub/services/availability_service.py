"""
Availability projection over time slots, and time slot conflict checks.

A slot counts as booked when ``slot_details.booked`` is true or its
``slot_details.type`` is ``event``. A date missing from the data is reported
busy, while a time with no covering slot is reported available.
"""

import datetime as dt
import logging
import re
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import Event
from ..models.time_slot import TimeSlot
from ..schemas.availability import (
    DateAvailability,
    DateStatus,
    DayAvailabilityResponse,
    TimeGridEntry,
    TimeSlotCheckResponse,
    TimeSlotResponse,
)
from ..utils.exceptions import TimeSlotConflictError, ValidationError

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

# 09:00 to 22:30 in 30 minute steps
TIME_GRID = [dt.time(hour, minute) for hour in range(9, 23) for minute in (0, 30)]

TimeLike = Union[str, dt.time]


def to_time(value: TimeLike) -> dt.time:
    """Parse ``H:MM``, ``HH:MM`` or ``HH:MM:SS``."""
    if isinstance(value, dt.time):
        return value
    hours, _, rest = value.strip().partition(":")
    return dt.time.fromisoformat(f"{int(hours):02d}:{rest}")


def format_time(value: dt.time) -> str:
    return value.strftime("%H:%M")


def validate_time_format(value: str) -> bool:
    return bool(TIME_PATTERN.match(value))


def validate_time_order(start: TimeLike, end: TimeLike) -> bool:
    return to_time(start) < to_time(end)


def project_date_availability(slots: Iterable[TimeSlot]) -> Dict[dt.date, DateStatus]:
    """Classify every date present in ``slots`` as free, partial or busy."""
    counts: Dict[dt.date, List[int]] = OrderedDict()
    for slot in sorted(slots, key=lambda s: s.date):
        total_booked = counts.setdefault(slot.date, [0, 0])
        total_booked[0] += 1
        if slot.is_booked:
            total_booked[1] += 1

    projection = {}
    for date, (total, booked) in counts.items():
        if booked == 0:
            projection[date] = DateStatus.FREE
        elif booked < total:
            projection[date] = DateStatus.PARTIAL
        else:
            projection[date] = DateStatus.BUSY
    return projection


def date_status(projection: Dict[dt.date, DateStatus], date: dt.date) -> DateStatus:
    """Status of ``date``; dates absent from the projection are busy."""
    return projection.get(date, DateStatus.BUSY)


def matching_slots(slots: Iterable[TimeSlot], probe: TimeLike) -> List[TimeSlot]:
    """Slots whose range contains ``probe``, both ends inclusive."""
    probe_time = to_time(probe)
    return [
        slot for slot in slots
        if to_time(slot.start_time) <= probe_time <= to_time(slot.end_time)
    ]


def is_time_available(slots: Iterable[TimeSlot], probe: TimeLike) -> bool:
    """Whether ``probe`` is free on the date the slots belong to.

    With no covering slot the time is available. Where covering slots
    overlap, any booked one makes the time unavailable.
    """
    return not any(slot.is_booked for slot in matching_slots(slots, probe))


def time_grid(slots: Iterable[TimeSlot]) -> List[TimeGridEntry]:
    slots = list(slots)
    return [
        TimeGridEntry(time=format_time(t), available=is_time_available(slots, t))
        for t in TIME_GRID
    ]


def slots_overlap(start1: TimeLike, end1: TimeLike, start2: TimeLike, end2: TimeLike) -> bool:
    """Strict interval overlap; touching intervals do not overlap."""
    return to_time(start1) < to_time(end2) and to_time(start2) < to_time(end1)


def find_conflicting_slots(
    slots: Iterable[TimeSlot],
    date: dt.date,
    start: TimeLike,
    end: TimeLike,
    exclude_event_id: Optional[str] = None,
) -> List[TimeSlot]:
    """Slots on ``date`` overlapping ``start``-``end``, skipping the excluded event's own slots."""
    conflicts = []
    for slot in slots:
        details = slot.slot_details or {}
        if exclude_event_id and str(details.get("event_id")) == str(exclude_event_id):
            continue
        if slot.date != date:
            continue
        if slots_overlap(slot.start_time, slot.end_time, start, end):
            conflicts.append(slot)
    return conflicts


def conflict_message(conflicts: List[TimeSlot]) -> str:
    if not conflicts:
        return "Time slot is available"
    if len(conflicts) == 1:
        conflict = conflicts[0]
        title = (conflict.slot_details or {}).get("event_title") or "Unknown event"
        return f'Time is taken by "{title}" ({conflict.start_time} - {conflict.end_time})'
    return f"Time overlaps {len(conflicts)} existing slots. Choose a different time."


class AvailabilityService:
    """Service for reading availability and maintaining event-owned time slots."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_slots(self, date: dt.date) -> List[TimeSlot]:
        query = select(TimeSlot).where(TimeSlot.date == date).order_by(TimeSlot.start_time)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_date_availability(self, today: Optional[dt.date] = None) -> List[DateAvailability]:
        """Projected status of every date with slots, from today onward."""
        today = today or dt.date.today()
        query = (
            select(TimeSlot)
            .where(TimeSlot.date >= today)
            .order_by(TimeSlot.date, TimeSlot.start_time)
        )
        result = await self.session.execute(query)
        projection = project_date_availability(result.scalars().all())
        return [DateAvailability(date=date, status=status) for date, status in projection.items()]

    async def get_day(self, date: dt.date, probe_time: Optional[str] = None) -> DayAvailabilityResponse:
        """Slots, picker grid and optional probe result for one date."""
        if probe_time is not None and not validate_time_format(probe_time):
            raise ValidationError(
                "Invalid time format, use HH:MM",
                field_errors={"time": ["must match HH:MM"]},
            )

        slots = await self.get_slots(date)
        status = date_status(project_date_availability(slots), date)
        return DayAvailabilityResponse(
            date=date,
            status=status,
            slots=[TimeSlotResponse.model_validate(slot) for slot in slots],
            time_grid=time_grid(slots),
            probe_time=probe_time,
            probe_available=is_time_available(slots, probe_time) if probe_time else None,
        )

    async def check_time_slot(
        self,
        date: dt.date,
        start_time: str,
        end_time: str,
        exclude_event_id: Optional[str] = None,
    ) -> TimeSlotCheckResponse:
        """Validate a proposed range and report the slots it would conflict with."""
        if not validate_time_format(start_time) or not validate_time_format(end_time):
            return TimeSlotCheckResponse(is_valid=False, message="Invalid time format, use HH:MM")
        if not validate_time_order(start_time, end_time):
            return TimeSlotCheckResponse(is_valid=False, message="End time must be after start time")

        slots = await self.get_slots(date)
        conflicts = find_conflicting_slots(slots, date, start_time, end_time, exclude_event_id)
        return TimeSlotCheckResponse(
            is_valid=not conflicts,
            message=conflict_message(conflicts),
            conflicts=[TimeSlotResponse.model_validate(slot) for slot in conflicts],
        )

    async def sync_event_slot(self, event: Event) -> Optional[TimeSlot]:
        """
        Create or move the slot an event occupies.

        Events without a date or a start/end time hold no slot. Does not
        commit; the caller owns the transaction.

        Raises:
            TimeSlotConflictError: The event's time overlaps another slot
        """
        if not (event.date and event.start_time and event.end_time):
            return None

        start = format_time(event.start_time.time())
        end = format_time(event.end_time.time())
        event_id = str(event.id)

        conflicts = find_conflicting_slots(
            await self.get_slots(event.date), event.date, start, end, exclude_event_id=event_id
        )
        if conflicts:
            raise TimeSlotConflictError(
                conflict_message(conflicts),
                conflicting_slot_ids=[str(slot.id) for slot in conflicts],
            )

        query = select(TimeSlot).where(TimeSlot.slot_details["event_id"].as_string() == event_id)
        slot = (await self.session.execute(query)).scalars().first()
        details = {
            "type": "event",
            "event_id": event_id,
            "event_title": event.title,
            "event_type": event.event_type,
            "location": event.location,
        }
        if slot is None:
            slot = TimeSlot(date=event.date, start_time=start, end_time=end, slot_details=details)
            self.session.add(slot)
        else:
            slot.date = event.date
            slot.start_time = start
            slot.end_time = end
            slot.slot_details = {**(slot.slot_details or {}), **details}

        logger.info(f"Time slot for event {event_id} set to {event.date} {start}-{end}")
        return slot
