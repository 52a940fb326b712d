"""
Database models for the ScienceHub backend.
"""

from .base import Base
from .event import Event
from .time_slot import TimeSlot
from .page_view import PageView

__all__ = [
    "Base",
    "Event",
    "TimeSlot",
    "PageView",
]
