"""Persistence collaborators behind the registration recorder."""

from .interfaces import EventRegistrationStore, EventSnapshot
from .sqlalchemy_store import SQLAlchemyEventStore

__all__ = ["EventRegistrationStore", "EventSnapshot", "SQLAlchemyEventStore"]
