"""ScienceHub backend: event registration, event management, availability and analytics."""

__version__ = "1.0.0"
