"""
Event schemas for request/response validation.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .pricing import PaymentMode


class EventStatus(str, Enum):
    """Publication status of an event."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAST = "past"


class EventRecord(BaseModel):
    """Event as submitted by the admin event form."""

    id: Optional[UUID] = None
    title: str = Field(..., min_length=1, max_length=70, description="Event title")
    short_description: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = Field(None, max_length=800)
    event_type: Optional[str] = Field(None, max_length=100)
    age_category: Optional[str] = Field(None, max_length=10)
    bg_image: Optional[str] = Field(None, max_length=1024)

    date: dt.date = Field(..., description="Event date")
    start_time: dt.datetime = Field(..., description="Start date and time")
    end_time: dt.datetime = Field(..., description="End date and time")
    location: str = Field(..., min_length=1, max_length=255)
    status: EventStatus = EventStatus.DRAFT

    payment_type: PaymentMode = PaymentMode.FREE
    price: Optional[Decimal] = Field(None, ge=0, description="Ticket price")
    currency: Optional[str] = Field(None, max_length=10)
    couple_discount: Optional[Decimal] = Field(None, ge=0, le=100, description="Percent off each pair of adults")
    child_half_price: bool = False
    adults_only: bool = False
    payment_link: Optional[str] = Field(None, max_length=1024)

    languages: List[str] = Field(default_factory=list)
    speakers: List[str] = Field(default_factory=list)

    max_registrations: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("max_registrations", "max_regs"),
        description="Ticket capacity; empty or 0 means unlimited",
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator('title', 'location')
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

    @field_validator('price', 'couple_discount', 'currency', 'max_registrations', mode='before')
    @classmethod
    def empty_string_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode='after')
    def check_time_and_price(self) -> "EventRecord":
        if self.end_time <= self.start_time:
            raise ValueError('End time must be after start time')
        if self.payment_type is PaymentMode.PAID:
            if self.price is None:
                raise ValueError('Price is required for paid events')
            if not self.currency:
                raise ValueError('Currency is required for paid events')
        return self


class SaveEventRequest(BaseModel):
    """Body of ``POST /save-event``."""

    event_data: EventRecord = Field(..., alias="eventData")
    is_new: bool = Field(False, alias="isNew")

    model_config = ConfigDict(populate_by_name=True)


class EventResponse(BaseModel):
    """Schema for event response."""

    id: UUID
    title: str
    short_description: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    age_category: Optional[str] = None
    bg_image: Optional[str] = None
    date: Optional[dt.date] = None
    start_time: Optional[dt.datetime] = None
    end_time: Optional[dt.datetime] = None
    location: Optional[str] = None
    status: str
    payment_type: str
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    couple_discount: Optional[Decimal] = None
    child_half_price: bool
    adults_only: bool
    payment_link: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    speakers: List[str] = Field(default_factory=list)
    registrations: Optional[Dict[str, Any]] = None
    version: int
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class SaveEventResponse(BaseModel):
    """Successful save-event response."""

    success: bool = True
    data: List[EventResponse]
    message: str
