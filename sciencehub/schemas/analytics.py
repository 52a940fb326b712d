"""
Pydantic schemas for page-view tracking and reporting.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PageViewCreate(BaseModel):
    """Body of ``POST /track-page-view``."""
    path: str = Field(..., min_length=1, max_length=1024, description="Visited path")
    session_id: str = Field(..., min_length=1, max_length=255, description="Browser session id")
    user_id: Optional[str] = Field(None, max_length=255)
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    is_admin: bool = False


class TimeSpentUpdate(BaseModel):
    """Body of ``POST /update-time-spent``."""
    session_id: str = Field(..., min_length=1, max_length=255)
    path: str = Field(..., min_length=1, max_length=1024)
    time_spent: int = Field(..., ge=0, description="Seconds spent on the page")

    @field_validator('time_spent', mode='before')
    @classmethod
    def round_fractional_seconds(cls, v):
        if isinstance(v, float):
            return round(v)
        return v


class EventRegistrationStats(BaseModel):
    """Schema for per-event registration statistics."""
    event_id: UUID = Field(..., description="Event ID")
    title: str = Field(..., description="Event title")
    date: Optional[dt.date] = Field(None, description="Event date")
    registrations: int = Field(..., description="Active registrations")
    cancelled: int = Field(..., description="Cancelled registrations")
    adults: int = Field(..., description="Adult tickets over active registrations")
    children: int = Field(..., description="Child tickets over active registrations")
    total: int = Field(..., description="All tickets over active registrations")
    max_regs: Optional[int] = Field(None, description="Capacity, empty when unlimited")
    fill_percentage: Optional[float] = Field(None, description="Share of capacity taken")
    revenue: Decimal = Field(..., description="Sum of totals over active registrations")
    currency: Optional[str] = None


class PageStats(BaseModel):
    """Schema for per-path visit statistics."""
    path: str
    visits: int
    unique_visitors: int
    avg_time_spent: float = Field(..., description="Average seconds spent, over views that reported it")
