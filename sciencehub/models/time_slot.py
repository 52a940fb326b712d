"""
Time slot model backing the date/time availability picker.
"""

import datetime as dt
from typing import Any

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


class TimeSlot(Base):
    """A date/time range with a free-form details payload.

    ``start_time`` and ``end_time`` are ``HH:MM`` or ``HH:MM:SS`` strings, so
    lexicographic comparison orders them correctly.
    """

    __tablename__ = "time_slots"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    slot_details: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict, nullable=False)

    @property
    def is_booked(self) -> bool:
        details = self.slot_details or {}
        return bool(details.get("booked")) or details.get("type") == "event"

    def __repr__(self) -> str:
        return f"<TimeSlot(id={self.id}, date={self.date}, {self.start_time}-{self.end_time})>"
