"""Shared pytest fixtures and test configuration."""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from datetime import datetime
from typing import Any
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

TEST_SESSION_SECRET = "test-session-secret-0123456789abcdef"
TEST_INTERNAL_API_KEY = "test-internal-key"

ADMIN_ID = "a" * 32
AGENT_ID = "b" * 32
CUSTOMER_ID = "c" * 32
STORE_ID = "d" * 32


class MockCursor:
    """Mock Oracle cursor supporting context manager and common operations."""

    def __init__(self) -> None:
        self.description: list[tuple[str, ...]] | None = None
        self._rows: list[tuple[Any, ...]] = []
        self._execute_log: list[tuple[str, dict[str, Any] | None]] = []
        self.rowcount: int = 0

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> None:
        self._execute_log.append((sql, params))

    def fetchall(self) -> list[tuple[Any, ...]]:
        return self._rows

    def fetchone(self) -> tuple[Any, ...] | None:
        return self._rows[0] if self._rows else None

    def __enter__(self) -> MockCursor:
        return self

    def __exit__(self, *args: Any) -> None:
        pass


class MockConnection:
    """Mock Oracle connection supporting context manager."""

    def __init__(self) -> None:
        self._cursor = MockCursor()
        self._committed = False
        self._closed = False

    def cursor(self) -> MockCursor:
        return self._cursor

    def commit(self) -> None:
        self._committed = True

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> MockConnection:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class MockPool:
    """Mock Oracle connection pool."""

    def __init__(self) -> None:
        self._connection = MockConnection()

    def acquire(self) -> MockConnection:
        return self._connection

    def close(self, force: bool = False) -> None:
        pass


@pytest.fixture
def mock_pool() -> MockPool:
    """Provide a mock Oracle connection pool."""
    return MockPool()


@pytest.fixture
def mock_connection(mock_pool: MockPool) -> MockConnection:
    """Provide a mock Oracle connection."""
    return mock_pool._connection


@pytest.fixture
def mock_cursor(mock_connection: MockConnection) -> MockCursor:
    """Provide a mock Oracle cursor."""
    return mock_connection._cursor


@pytest.fixture
def patch_db_pool(mock_pool: MockPool) -> Generator[MockPool, None, None]:
    """Patch the database module to use mock pool."""
    with (
        patch("supportdesk.core.database._pool", mock_pool),
        patch("supportdesk.core.database.get_pool", return_value=mock_pool),
    ):
        yield mock_pool


def make_settings(**overrides: Any):  # type: ignore[no-untyped-def]
    """Test settings, isolated from the developer's .env file."""
    from supportdesk.core.config import Settings

    values: dict[str, Any] = {
        "app_env": "testing",
        "session_secret": TEST_SESSION_SECRET,
        "internal_api_key": TEST_INTERNAL_API_KEY,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():  # type: ignore[no-untyped-def]
    return make_settings()


@pytest.fixture
def app(patch_db_pool: MockPool, settings):  # type: ignore[no-untyped-def]
    """Create the web app with mocked database."""
    from supportdesk.main import create_app

    return create_app(settings=settings)


@pytest.fixture
def client(app):  # type: ignore[no-untyped-def]
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def notification_app(patch_db_pool: MockPool, settings):  # type: ignore[no-untyped-def]
    """Create the notification service app with mocked database."""
    from supportdesk.main import create_notification_app

    return create_notification_app(settings=settings)


@pytest.fixture
def notification_client(notification_app):  # type: ignore[no-untyped-def]
    return TestClient(notification_app)


# ── Helper for setting up mock query results ─────────────────────────

def set_mock_query_result(
    cursor: MockCursor,
    columns: list[str],
    rows: list[tuple[Any, ...]],
) -> None:
    """Configure mock cursor to return specific query results."""
    cursor.description = [(col.upper(),) for col in columns]
    cursor._rows = rows
    cursor.rowcount = len(rows)


# ── Auth helpers for protected route tests ───────────────────────────


def session_headers(user_id: str, role: str, **claims: Any) -> dict[str, str]:
    """Authorization header carrying a session token signed with the test secret."""
    from supportdesk.core.security import create_session_token

    token = create_session_token(
        subject=user_id,
        secret=TEST_SESSION_SECRET,
        role=role,
        **claims,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Session headers for an administrator."""
    return session_headers(ADMIN_ID, "ADMIN", email="admin@example.com", name="Ada Admin")


@pytest.fixture
def agent_headers() -> dict[str, str]:
    return session_headers(AGENT_ID, "AGENT", email="agent@example.com", name="Alex Agent")


@pytest.fixture
def customer_headers() -> dict[str, str]:
    return session_headers(CUSTOMER_ID, "CUSTOMER", email="cust@example.com")


@pytest.fixture
def internal_headers() -> dict[str, str]:
    return {"x-internal-api-key": TEST_INTERNAL_API_KEY}


# ── In-memory notification store ─────────────────────────────────────


class InMemoryNotificationRepo:
    """Applies the same scope rules as the notification SQL, over a list of dicts.

    ``now`` stands in for the database clock; when unset every row counts as
    already created.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]],
        ticket_stores: dict[str, str] | None = None,
        now: datetime | None = None,
    ) -> None:
        self.rows = rows
        self.ticket_stores = ticket_stores or {}
        self.now = now

    def _in_scope(self, row: dict[str, Any], scope: Any) -> bool:
        if row["user_id"] != scope.user_id:
            return False
        if scope.created_since is not None and row["created_at"] < scope.created_since:
            return False
        if scope.store_id and row["ticket_id"] is not None:
            return self.ticket_stores.get(row["ticket_id"]) == scope.store_id
        return True

    def count_unread(self, scope: Any) -> int:
        return sum(1 for r in self.rows if self._in_scope(r, scope) and r["is_read"] == 0)

    def mark_all_read(self, scope: Any) -> int:
        changed = 0
        for r in self.rows:
            if not self._in_scope(r, scope) or r["is_read"] != 0:
                continue
            if self.now is not None and r["created_at"] > self.now:
                continue
            r["is_read"] = 1
            r["read_at"] = self.now
            changed += 1
        return changed
