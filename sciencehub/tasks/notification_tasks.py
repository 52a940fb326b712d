"""
Celery tasks for notification delivery.
"""

import asyncio
import logging

from .celery_app import celery_app
from ..config import get_settings
from ..services.notification_service import TelegramNotifier
from ..utils.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)

_settings = get_settings()


@celery_app.task(
    bind=True,
    name="send_notification_task",
    autoretry_for=(NotificationDeliveryError,),
    retry_backoff=_settings.notification_retry_backoff,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=_settings.notification_max_retries,
)
def send_notification_task(self, text: str):
    """
    Task to deliver one message to the notification sink.

    Delivery failures are retried with exponential backoff; once retries are
    exhausted the message is dropped and the failure logged.

    Args:
        text: Preformatted HTML message
    """
    logger.info(f"Delivering notification (attempt {self.request.retries + 1})")

    settings = get_settings()
    if not settings.telegram_configured:
        logger.warning("Telegram bot token or chat id is not configured; notification dropped")
        return {"status": "skipped"}

    notifier = TelegramNotifier(settings)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        loop.run_until_complete(notifier.send(text))
    except NotificationDeliveryError as e:
        if self.request.retries >= self.max_retries:
            logger.error(f"Giving up on notification after {self.request.retries + 1} attempts: {e.message}")
            return {"status": "failed", "error": e.message}
        raise
    finally:
        loop.close()

    return {"status": "sent"}
