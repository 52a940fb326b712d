"""
Notification sink: Telegram delivery and best-effort dispatch.
"""

import html
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import BackgroundTasks

from ..config import Settings, get_settings
from ..models.event import Event
from ..utils.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


def _escape(value: Any) -> str:
    if value is None or value == "":
        return "-"
    return html.escape(str(value))


def _time_range(event: Event) -> str:
    if not event.start_time:
        return "-"
    start = event.start_time.strftime("%H:%M")
    if not event.end_time:
        return start
    return f"{start} - {event.end_time.strftime('%H:%M')}"


def format_registration_message(event: Event, registration: Dict[str, Any]) -> str:
    """Build the HTML message announcing a new registration."""
    currency = event.currency or ""
    lines = [
        "<b>New registration</b>",
        "",
        f"<b>Event:</b> {_escape(event.title)}",
        f"<b>Date:</b> {_escape(event.date)}",
        f"<b>Time:</b> {_time_range(event)}",
        "",
        f"<b>Name:</b> {_escape(registration.get('full_name'))}",
        f"<b>Contact:</b> {_escape(registration.get('email'))}",
        f"<b>Phone:</b> {_escape(registration.get('phone'))}",
        f"<b>Adults:</b> {registration.get('adult_tickets', 0)}",
        f"<b>Children:</b> {registration.get('child_tickets', 0)}",
        f"<b>Amount:</b> {registration.get('total_amount', 0)} {_escape(currency)}".rstrip(),
    ]
    if registration.get("comment"):
        lines.append(f"<b>Comment:</b> {_escape(registration['comment'])}")
    lines.append(f"<b>Registration ID:</b> {_escape(registration.get('id'))}")
    return "\n".join(lines)


def format_event_saved_message(event: Event, is_new: bool) -> str:
    """Build the HTML message announcing a created or updated event."""
    if event.payment_type == "cost" and event.price is not None:
        price = f"{event.price} {event.currency or ''}".rstrip()
    elif event.payment_type == "donation":
        price = "donation"
    else:
        price = "free"

    lines = [
        f"<b>{'New event created' if is_new else 'Event updated'}</b>",
        "",
        f"<b>Title:</b> {_escape(event.title)}",
        f"<b>Date:</b> {_escape(event.date)}",
        f"<b>Time:</b> {_time_range(event)}",
        f"<b>Location:</b> {_escape(event.location)}",
        f"<b>Price:</b> {_escape(price)}",
        f"<b>Status:</b> {_escape(event.status)}",
    ]
    return "\n".join(lines)


class TelegramNotifier:
    """Delivers messages through the Telegram Bot API ``sendMessage`` method."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.settings.telegram_api_url}/bot{self.settings.telegram_bot_token}/sendMessage"

    async def send(self, text: str) -> None:
        """
        Send one message.

        Raises:
            NotificationDeliveryError: Missing configuration, network failure
                or a non-2xx response
        """
        if not self.settings.telegram_configured:
            raise NotificationDeliveryError("Telegram bot token or chat id is not configured")

        payload = {
            "chat_id": self.settings.telegram_chat_id,
            "text": text,
            "parse_mode": "HTML",
        }
        async with httpx.AsyncClient(
            timeout=self.settings.notification_timeout_seconds,
            transport=self.transport,
        ) as client:
            try:
                response = await client.post(self.url, json=payload)
            except httpx.HTTPError as e:
                raise NotificationDeliveryError(f"Telegram request failed: {e}") from e

        if response.is_error:
            raise NotificationDeliveryError(
                f"Telegram API returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

    async def notify(self, text: str) -> bool:
        """Send a message and report success; failures are logged, never raised."""
        try:
            await self.send(text)
        except NotificationDeliveryError as e:
            logger.warning(f"Notification not delivered: {e.message}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error delivering notification: {e}", exc_info=True)
            return False

        logger.info("Notification delivered")
        return True


class NotificationDispatcher:
    """Hands messages to the notification sink without making the caller wait.

    Delivery is at-most-once from the caller's point of view: the message is
    either queued for the Celery worker or scheduled to run after the HTTP
    response has been sent.
    """

    def __init__(self, settings: Optional[Settings] = None, notifier: Optional[TelegramNotifier] = None):
        self.settings = settings or get_settings()
        self.notifier = notifier or TelegramNotifier(self.settings)

    def dispatch(self, text: str, background_tasks: Optional[BackgroundTasks] = None) -> None:
        """Schedule delivery of ``text``. Never raises."""
        try:
            if self.settings.notifications_use_queue:
                from ..tasks.notification_tasks import send_notification_task

                send_notification_task.delay(text)
                logger.debug("Notification queued")
            elif background_tasks is not None:
                background_tasks.add_task(self.notifier.notify, text)
            else:
                logger.warning("No background task runner available; notification dropped")
        except Exception as e:
            logger.error(f"Failed to dispatch notification: {e}")
