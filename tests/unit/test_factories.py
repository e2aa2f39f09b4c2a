"""Unit tests for data factories — ensure factories produce valid data."""

from __future__ import annotations

from supportdesk.core.constants import NOTIFICATION_TYPES, TICKET_STATUSES, USER_ROLES
from tests.factories.data_factories import (
    build_call_log,
    build_notification,
    build_preference,
    build_store,
    build_ticket,
    build_user,
    build_user_batch,
)


class TestFactories:
    def test_build_user(self) -> None:
        user = build_user()
        assert len(user["user_id"]) == 32
        assert "@" in user["email"]
        assert user["role"] in USER_ROLES

    def test_build_user_override(self) -> None:
        user = build_user(email="custom@example.com", role="ADMIN")
        assert user["email"] == "custom@example.com"
        assert user["role"] == "ADMIN"

    def test_build_user_batch_unique_emails(self) -> None:
        users = build_user_batch(5)
        assert len({u["email"] for u in users}) == 5

    def test_build_ticket(self) -> None:
        ticket = build_ticket(customer_id="c1", store_id="s1")
        assert ticket["status"] in TICKET_STATUSES
        assert ticket["customer_id"] == "c1"
        if ticket["status"] in ("RESOLVED", "CLOSED"):
            assert ticket["resolved_at"] > ticket["created_at"]
        else:
            assert ticket["resolved_at"] is None

    def test_build_notification_unread(self) -> None:
        n = build_notification(user_id="u1")
        assert n["is_read"] == 0
        assert n["notification_type"] in NOTIFICATION_TYPES

    def test_build_store_and_call_log(self) -> None:
        store = build_store(tenant_id="t1")
        assert store["tenant_id"] == "t1"
        assert build_call_log()["direction"] in ("INBOUND", "OUTBOUND")

    def test_build_preference(self) -> None:
        pref = build_preference(user_id="u1", notification_type="TICKET_REPLY")
        assert pref["email_digest"] == "REALTIME"
