"""Request context management via contextvars — correlation IDs, acting user."""

from __future__ import annotations

from contextvars import ContextVar

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id: ContextVar[str | None] = ContextVar("user_id", default=None)


def set_correlation_id(value: str) -> None:
    """Set the correlation ID for the current request context."""
    _correlation_id.set(value)


def get_correlation_id() -> str | None:
    """Get the correlation ID for the current request context."""
    return _correlation_id.get()


def set_user_id(value: str | None) -> None:
    """Record the authenticated user for log records of this request."""
    _user_id.set(value)


def get_user_id() -> str | None:
    return _user_id.get()
