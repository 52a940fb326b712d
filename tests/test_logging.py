"""Tests for log record sanitising."""

import logging
from uuid import uuid4

from sciencehub.utils.logging_config import SensitiveDataFilter


def filtered(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("sciencehub", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    SensitiveDataFilter().filter(record)
    return record


class TestSensitiveDataFilter:
    """Tests for masking secrets while keeping identifiers readable."""

    def test_uuids_survive(self):
        event_id = str(uuid4())
        record = filtered(f"Rejecting 1 tickets for event {event_id}")
        assert event_id in record.msg

    def test_uuids_in_business_event_details_survive(self):
        event_id = str(uuid4())
        record = filtered("Business event: registration_recorded", details={"event_id": event_id})
        assert record.details == {"event_id": event_id}

    def test_bot_token_is_masked(self):
        token = "123456789:AAHdqTcvCH1vGWJxfSeofSAs0K5PALDsaw-_x"
        record = filtered(f"POST https://api.telegram.org/bot{token}/sendMessage")
        assert token not in record.msg
        assert "***MASKED***" in record.msg

    def test_long_opaque_token_is_masked(self):
        record = filtered("key " + "a1" * 20)
        assert record.msg == "key ***MASKED***"

    def test_sensitive_keys_and_emails(self):
        record = filtered("contact ada@example.com", details={"phone": "+7 900", "count": 2})
        assert record.msg == "contact ***EMAIL***"
        assert record.details == {"phone": "***MASKED***", "count": 2}
