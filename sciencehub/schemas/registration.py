"""
Pydantic schemas for event registrations and the structured registrations shape.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegistrationRecord(BaseModel):
    """One booking transaction submitted by the registration form."""

    id: Optional[str] = Field(None, max_length=64, description="Client generated registration id")
    full_name: str = Field(..., min_length=1, max_length=255, description="Registrant name")
    email: str = Field(..., min_length=1, max_length=255, description="Registrant email or other contact")
    phone: Optional[str] = Field(None, max_length=64)
    comment: Optional[str] = Field(None, max_length=2000)
    adult_tickets: int = Field(1, ge=1, description="Number of adult tickets")
    child_tickets: int = Field(0, ge=0, description="Number of child tickets")
    total_amount: float = Field(0, ge=0, description="Total computed by the client; recomputed server side")
    status: bool = Field(True, description="Active (true) or cancelled (false)")
    created_at: Optional[datetime] = None
    payment_link_clicked: bool = False

    model_config = ConfigDict(extra="ignore")

    @field_validator('full_name', 'email')
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v


class RegisterEventRequest(BaseModel):
    """Body of ``POST /register-event``."""

    event_id: UUID = Field(..., alias="eventId")
    registration_data: RegistrationRecord = Field(..., alias="registrationData")

    model_config = ConfigDict(populate_by_name=True)


class RegisterEventResponse(BaseModel):
    """Successful registration response."""

    success: bool = True
    registration_id: str = Field(..., serialization_alias="registrationId")
    total_amount: float = Field(..., serialization_alias="totalAmount")
    message: str = "Registration successful"


class RegistrationStatusUpdate(BaseModel):
    """Body of the cancel/reactivate endpoint."""

    active: bool


def _ticket_count(entry: Dict[str, Any], key: str) -> int:
    try:
        return int(entry.get(key) or 0)
    except (TypeError, ValueError):
        return 0


class EventRegistrations(BaseModel):
    """Structured registrations shape stored on the event row.

    Wire keys are ``max_regs`` and ``reg_list``. Entries in ``reg_list`` are
    kept as plain dicts so that fields written by older clients survive a
    read-modify-write untouched.
    """

    max_regs: Optional[int] = None
    current: int = 0
    current_adults: int = 0
    current_children: int = 0
    reg_list: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_legacy(
        cls,
        registrations_list: Optional[List[Dict[str, Any]]],
        max_registrations: Optional[int],
        current_registration_count: Optional[int],
    ) -> "EventRegistrations":
        """Synthesize the structured shape from the legacy columns.

        ``current`` is taken from the legacy counter as stored; the adult and
        child sub-counts are summed over the active legacy entries.
        """
        reg_list = list(registrations_list) if isinstance(registrations_list, list) else []
        active = [entry for entry in reg_list if entry.get("status")]
        return cls(
            max_regs=max_registrations or None,
            current=current_registration_count or 0,
            current_adults=sum(_ticket_count(entry, "adult_tickets") for entry in active),
            current_children=sum(_ticket_count(entry, "child_tickets") for entry in active),
            reg_list=reg_list,
        )

    @property
    def capacity(self) -> Optional[int]:
        """Maximum ticket count, or None when unbounded (null or 0)."""
        return self.max_regs if self.max_regs and self.max_regs > 0 else None

    def active_registrations(self) -> List[Dict[str, Any]]:
        return [entry for entry in self.reg_list if entry.get("status")]

    def find(self, registration_id: str) -> Optional[Dict[str, Any]]:
        for entry in self.reg_list:
            if str(entry.get("id")) == registration_id:
                return entry
        return None

    def recomputed(self) -> "EventRegistrations":
        """Return a copy whose counters are summed over active registrations."""
        active = self.active_registrations()
        adults = sum(_ticket_count(entry, "adult_tickets") for entry in active)
        children = sum(_ticket_count(entry, "child_tickets") for entry in active)
        return self.model_copy(update={
            "current": adults + children,
            "current_adults": adults,
            "current_children": children,
        })

    def with_registration(self, entry: Dict[str, Any]) -> "EventRegistrations":
        """Append a registration and recompute the counters."""
        return self.model_copy(update={"reg_list": [*self.reg_list, entry]}).recomputed()

    def with_status(self, registration_id: str, active: bool) -> "EventRegistrations":
        """Flip one registration's status flag and recompute the counters."""
        reg_list = [
            {**entry, "status": active} if str(entry.get("id")) == registration_id else entry
            for entry in self.reg_list
        ]
        return self.model_copy(update={"reg_list": reg_list}).recomputed()


class EventRegistrationsResponse(EventRegistrations):
    """Registrations of one event as returned by the admin endpoints."""

    event_id: UUID
    version: int
