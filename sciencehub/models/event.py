"""
Event model holding pricing configuration and embedded registrations.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


class Event(Base):
    """A bookable occasion.

    Registrations live inside the row. ``registrations`` holds the structured
    shape; ``registrations_list``, ``max_registrations`` and
    ``current_registration_count`` are the legacy columns still present on
    rows written before the structured shape existed.
    """

    __tablename__ = "events"

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    short_description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    age_category: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    bg_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # Timing
    date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True, index=True)
    start_time: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # draft / active / past
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False, index=True)

    # Pricing
    payment_type: Mapped[str] = mapped_column(String(20), default="free", nullable=False)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    couple_discount: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    child_half_price: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    adults_only: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    payment_link: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    languages: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    speakers: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)

    # Structured registrations shape
    registrations: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    # Legacy registrations shape
    max_registrations: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    current_registration_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    registrations_list: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSONType, nullable=True)

    # Optimistic locking for concurrency control
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    __table_args__ = (
        CheckConstraint("price IS NULL OR price >= 0", name="ck_events_price_non_negative"),
        CheckConstraint(
            "couple_discount IS NULL OR (couple_discount >= 0 AND couple_discount <= 100)",
            name="ck_events_couple_discount_range",
        ),
        CheckConstraint("version > 0", name="ck_events_version_positive"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title='{self.title}', date={self.date}, version={self.version})>"
