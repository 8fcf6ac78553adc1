from __future__ import annotations
"""Structured logging utilities."""

import json
import logging
import re
from datetime import datetime, timezone


_STANDARD_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}

_SECRET_KEYS = {"token", "authorization", "password"}

# Credentials can leak into URLs (`?token=...`) or error strings.
_SECRET_IN_TEXT = re.compile(r"(?i)\b(token|access_token)=([^&\s]+)")

REDACTED = "***"


def redact(key: str, value: object) -> object:
    """Hide credential values in structured log fields."""
    if key.lower() in _SECRET_KEYS and value:
        return REDACTED
    if isinstance(value, str):
        return _SECRET_IN_TEXT.sub(lambda match: f"{match.group(1)}={REDACTED}", value)
    return value


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, carrying `extra=` fields alongside the message."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact("message", record.getMessage()),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_KEYS and not key.startswith("_"):
                payload[key] = redact(key, value)

        if record.exc_info:
            payload["exception"] = redact("exception", self.formatException(record.exc_info))

        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logger with JSON structured output on stderr."""
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())
