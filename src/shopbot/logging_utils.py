"""Logging setup for shopbot: plain or JSON output with token redaction."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Pattern, Sequence, Tuple

REDACTED = "[redacted]"

_TOKEN_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"\b(Bearer|Bot)(\s+)[A-Za-z0-9\-._~+/=]+", re.IGNORECASE), r"\1\2" + REDACTED),
    (re.compile(r"(/webhooks/\d+/)[A-Za-z0-9\-._~]+"), r"\1" + REDACTED),
    (re.compile(r"(api_token=)[^&\s]+", re.IGNORECASE), r"\1" + REDACTED),
)

_CONTEXT_FIELDS = ("interaction_id", "request_id")
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler")


def redact(message: str, secrets: Sequence[str] = ()) -> str:
    """Return ``message`` with configured secrets and known token shapes masked."""

    for secret in secrets:
        message = message.replace(secret, REDACTED)
    for pattern, replacement in _TOKEN_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class SensitiveDataFilter(logging.Filter):
    """Rewrite records so no configured secret or token reaches a handler."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        cleaned = {secret.strip() for secret in secrets if secret and secret.strip()}
        # Longest first, so a secret containing another is masked whole.
        self.secrets = tuple(sorted(cleaned, key=len, reverse=True))

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - standard interface
        rendered = record.getMessage()
        masked = redact(rendered, self.secrets)
        if masked != rendered:
            record.msg, record.args = masked, ()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying interaction and request ids when set."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            {field: value for field in _CONTEXT_FIELDS if (value := getattr(record, field, None))}
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True)


def _formatter(fmt: str) -> logging.Formatter:
    if (fmt or "plain").lower() == "json":
        return JsonFormatter()
    return logging.Formatter(
        "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def configure_logging(level_name: str, fmt: str, secrets: Iterable[str]) -> None:
    """Install one redacting stream handler on the root logger."""

    level = logging.getLevelName((level_name or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    redaction = SensitiveDataFilter(secrets)
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter(fmt))
    handler.addFilter(redaction)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    # httpx logs request URLs, which embed interaction tokens, at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True
        server_logger.setLevel(level)


__all__ = ["REDACTED", "redact", "SensitiveDataFilter", "JsonFormatter", "configure_logging"]
