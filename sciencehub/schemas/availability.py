"""
Availability schemas for the booking picker and time slot checks.
"""

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DateStatus(str, Enum):
    """Availability of a whole date."""

    FREE = "free"
    PARTIAL = "partial"
    BUSY = "busy"


class DateAvailability(BaseModel):
    """Projected status of one date."""

    date: dt.date
    status: DateStatus


class TimeSlotResponse(BaseModel):
    """Schema for time slot response."""

    id: UUID
    date: dt.date
    start_time: str
    end_time: str
    slot_details: Dict[str, Any] = Field(default_factory=dict)
    is_booked: bool

    model_config = ConfigDict(from_attributes=True)


class TimeGridEntry(BaseModel):
    """One selectable start time of the picker."""

    time: str = Field(..., description="HH:MM")
    available: bool


class DayAvailabilityResponse(BaseModel):
    """Slots and time grid of a single date, with an optional probe result."""

    date: dt.date
    status: DateStatus
    slots: List[TimeSlotResponse]
    time_grid: List[TimeGridEntry]
    probe_time: Optional[str] = None
    probe_available: Optional[bool] = None


class TimeSlotCheckRequest(BaseModel):
    """Schema for checking a proposed time range against existing slots."""

    date: dt.date
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    exclude_event_id: Optional[str] = Field(None, description="Ignore slots owned by this event")


class TimeSlotCheckResponse(BaseModel):
    """Result of a time slot check."""

    is_valid: bool
    message: str
    conflicts: List[TimeSlotResponse] = Field(default_factory=list)
