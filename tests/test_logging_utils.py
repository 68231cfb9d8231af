"""Tests for logging utilities and sensitive data redaction."""

from __future__ import annotations

import json
import logging

import pytest

from shopbot.logging_utils import JsonFormatter, configure_logging


def _record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="shopbot.test.redaction",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.parametrize("fmt", ["plain", "json"])
def test_sensitive_data_filter_redacts_tokens(fmt):
    secret = "top-secret-token"
    configure_logging("INFO", fmt, [secret])

    handler = logging.getLogger().handlers[0]
    record = _record("Authorization header Bearer %s", secret)

    for filter_ in handler.filters:
        filter_.filter(record)

    formatted = handler.format(record)
    assert secret not in formatted
    assert "[redacted]" in formatted


def test_webhook_tokens_are_masked_without_configuration():
    configure_logging("INFO", "plain", [])

    handler = logging.getLogger().handlers[0]
    record = _record("PATCH https://chat.test/api/webhooks/42/aW50ZXJhY3Rpb24.abc/messages/@original")

    for filter_ in handler.filters:
        filter_.filter(record)

    formatted = handler.format(record)
    assert "aW50ZXJhY3Rpb24" not in formatted
    assert "/webhooks/42/[redacted]/messages/@original" in formatted


def test_json_formatter_includes_interaction_id():
    payload = json.loads(JsonFormatter().format(_record("closed", interaction_id="abc")))

    assert payload["message"] == "closed"
    assert payload["interaction_id"] == "abc"
    assert payload["logger"] == "shopbot.test.redaction"
