"""Logging setup: JSON or text output, secret redaction, request correlation."""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any

# Key names whose values never reach the log output
SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"cookie", re.IGNORECASE),
    re.compile(r"authorization", re.IGNORECASE),
    re.compile(r"api[_-]?key", re.IGNORECASE),
    re.compile(r"database[_-]?url", re.IGNORECASE),
]

REDACTED = "***REDACTED***"

_TEXT_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(Authorization:\s*Bearer\s+)\S+", re.IGNORECASE), r"\1" + REDACTED),
    (re.compile(r"(x-internal-api-key[\s=:]+)\S+", re.IGNORECASE), r"\1" + REDACTED),
    (re.compile(r"(session-token[\s=:]+)[^\s;]+", re.IGNORECASE), r"\1" + REDACTED),
    (re.compile(r"(password[\s=:]+)\S+", re.IGNORECASE), r"\1" + REDACTED),
    # user:pass@host in connection strings
    (re.compile(r"(\w+://)[^/@\s]+@"), r"\1" + REDACTED + "@"),
]


def is_sensitive_key(key: str) -> bool:
    """Check if a key name matches any sensitive pattern."""
    return any(p.search(key) for p in SENSITIVE_PATTERNS)


def redact_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively redact sensitive fields from a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if is_sensitive_key(key):
            result[key] = REDACTED
        elif isinstance(value, dict):
            result[key] = redact_dict(value)
        elif isinstance(value, list):
            result[key] = [redact_dict(item) if isinstance(item, dict) else item for item in value]
        else:
            result[key] = value
    return result


def redact_string(text: str) -> str:
    """Redact bearer tokens, API keys, session cookies and DSN credentials."""
    for pattern, replacement in _TEXT_RULES:
        text = pattern.sub(replacement, text)
    return text


_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "correlation_id",
    "user_id",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_string(record.getMessage()),
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_entry["correlation_id"] = correlation_id
        user_id = getattr(record, "user_id", None)
        if user_id:
            log_entry["user_id"] = user_id

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": redact_string(str(record.exc_info[1])),
            }

        extras = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extras:
            log_entry["extra"] = redact_dict(extras)

        return json.dumps(log_entry, default=str)


class RedactingFormatter(logging.Formatter):
    """Human-readable formatter with redaction and the correlation id."""

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(
            fmt=fmt or "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s",
            datefmt=datefmt or "%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id") or record.correlation_id is None:
            record.correlation_id = "-"
        return redact_string(super().format(record))


class CorrelationFilter(logging.Filter):
    """Copy correlation id and acting user from contextvars onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        from supportdesk.core.context import get_correlation_id, get_user_id

        record.correlation_id = get_correlation_id()
        record.user_id = get_user_id()
        return True


def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    """Configure application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for structured JSON output, "text" for human-readable.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(RedactingFormatter())
    handler.addFilter(CorrelationFilter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
