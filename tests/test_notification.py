"""Tests for the notification sink."""

import json
from decimal import Decimal

import httpx
import pytest
from fastapi import BackgroundTasks

from sciencehub.config import Settings
from sciencehub.services.notification_service import (
    NotificationDispatcher,
    TelegramNotifier,
    format_event_saved_message,
    format_registration_message,
)
from sciencehub.utils.exceptions import NotificationDeliveryError

from conftest import make_event


@pytest.fixture
def telegram_settings() -> Settings:
    return Settings(
        _env_file=None,
        telegram_bot_token="123:abc",
        telegram_chat_id="-100500",
        telegram_api_url="https://telegram.test",
    )


def recording_transport(requests: list, status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json={"ok": status_code < 400})
    return httpx.MockTransport(handler)


class TestTelegramNotifier:
    """Tests for Telegram delivery."""

    async def test_sends_html_message_to_chat(self, telegram_settings):
        requests = []
        notifier = TelegramNotifier(telegram_settings, transport=recording_transport(requests))

        await notifier.send("<b>hello</b>")

        assert len(requests) == 1
        assert requests[0].url.host == "telegram.test"
        assert requests[0].url.path == "/bot123:abc/sendMessage"
        body = json.loads(requests[0].content)
        assert body == {"chat_id": "-100500", "text": "<b>hello</b>", "parse_mode": "HTML"}

    async def test_non_success_response_raises_from_send(self, telegram_settings):
        notifier = TelegramNotifier(telegram_settings, transport=recording_transport([], status_code=400))
        with pytest.raises(NotificationDeliveryError) as exc_info:
            await notifier.send("hi")
        assert exc_info.value.status_code == 400

    async def test_notify_swallows_non_success_response(self, telegram_settings):
        notifier = TelegramNotifier(telegram_settings, transport=recording_transport([], status_code=500))
        assert await notifier.notify("hi") is False

    async def test_notify_swallows_network_errors(self, telegram_settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        notifier = TelegramNotifier(telegram_settings, transport=httpx.MockTransport(handler))
        assert await notifier.notify("hi") is False

    async def test_missing_configuration_is_not_an_error_for_notify(self, settings):
        """Without a token and chat id nothing is sent and nothing is raised."""
        requests = []
        notifier = TelegramNotifier(settings, transport=recording_transport(requests))

        assert await notifier.notify("hi") is False
        assert requests == []

    async def test_notify_reports_success(self, telegram_settings):
        notifier = TelegramNotifier(telegram_settings, transport=recording_transport([]))
        assert await notifier.notify("hi") is True


class TestNotificationDispatcher:
    """Tests for best-effort dispatch."""

    async def test_schedules_background_delivery(self, telegram_settings):
        requests = []
        notifier = TelegramNotifier(telegram_settings, transport=recording_transport(requests))
        dispatcher = NotificationDispatcher(telegram_settings, notifier)
        background_tasks = BackgroundTasks()

        dispatcher.dispatch("queued", background_tasks)
        assert requests == []

        await background_tasks()
        assert len(requests) == 1

    def test_enqueues_when_queue_enabled(self, telegram_settings, monkeypatch):
        from sciencehub.tasks import notification_tasks

        sent = []
        monkeypatch.setattr(notification_tasks.send_notification_task, "delay", sent.append)
        queue_settings = telegram_settings.model_copy(update={"notifications_use_queue": True})

        NotificationDispatcher(queue_settings).dispatch("to the worker")

        assert sent == ["to the worker"]

    def test_enqueue_failure_is_not_raised(self, telegram_settings, monkeypatch):
        from sciencehub.tasks import notification_tasks

        def broker_down(text):
            raise ConnectionError("broker unavailable")

        monkeypatch.setattr(notification_tasks.send_notification_task, "delay", broker_down)
        queue_settings = telegram_settings.model_copy(update={"notifications_use_queue": True})

        NotificationDispatcher(queue_settings).dispatch("lost")


class TestMessageFormatting:
    """Tests for the notification texts."""

    def test_registration_message_escapes_user_text(self):
        event = make_event(title="Chemistry <Live>")
        registration = {
            "id": "r-1",
            "full_name": "Bob <script>",
            "email": "bob@example.com",
            "phone": None,
            "comment": "Tom & Jerry",
            "adult_tickets": 2,
            "child_tickets": 1,
            "total_amount": 1500.0,
        }

        message = format_registration_message(event, registration)

        assert "Chemistry &lt;Live&gt;" in message
        assert "Bob &lt;script&gt;" in message
        assert "Tom &amp; Jerry" in message
        assert "1500.0 RUB" in message
        assert "19:00 - 21:00" in message
        assert "r-1" in message

    def test_event_saved_message(self):
        event = make_event(price=Decimal("700"), status="draft")
        message = format_event_saved_message(event, is_new=True)
        assert "New event created" in message
        assert "700 RUB" in message
        assert "Main hall" in message
        assert "draft" in message

    def test_free_event_message(self):
        event = make_event(payment_type="free", price=None)
        message = format_event_saved_message(event, is_new=False)
        assert "Event updated" in message
        assert "free" in message


class TestSendNotificationTask:
    """Tests for the Celery delivery task."""

    def test_missing_configuration_is_skipped_without_sending(self, settings, monkeypatch):
        from sciencehub.tasks import notification_tasks

        def unexpected_send(self, text):
            raise AssertionError("send should not be called")

        monkeypatch.setattr(notification_tasks, "get_settings", lambda: settings)
        monkeypatch.setattr(TelegramNotifier, "send", unexpected_send)

        assert notification_tasks.send_notification_task("hello") == {"status": "skipped"}

    def test_delivers_when_configured(self, telegram_settings, monkeypatch):
        from sciencehub.tasks import notification_tasks

        sent = []

        async def record_send(self, text):
            sent.append(text)

        monkeypatch.setattr(notification_tasks, "get_settings", lambda: telegram_settings)
        monkeypatch.setattr(TelegramNotifier, "send", record_send)

        assert notification_tasks.send_notification_task("hello") == {"status": "sent"}
        assert sent == ["hello"]
