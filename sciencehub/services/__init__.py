"""Business logic services."""

from .analytics_service import AnalyticsService
from .availability_service import AvailabilityService
from .event_service import EventService
from .notification_service import NotificationDispatcher, TelegramNotifier
from .pricing_service import calculate_price, quote_for_event
from .registration_service import RegistrationService

__all__ = [
    "AnalyticsService",
    "AvailabilityService",
    "EventService",
    "NotificationDispatcher",
    "TelegramNotifier",
    "calculate_price",
    "quote_for_event",
    "RegistrationService",
]
