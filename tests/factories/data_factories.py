"""Synthetic data factories for testing — generates realistic fake data."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta
from typing import Any

from faker import Faker

from supportdesk.core.constants import (
    NOTIFICATION_TYPES,
    ROLE_CUSTOMER,
    TICKET_PRIORITIES,
    TICKET_STATUSES,
)

fake = Faker()
Faker.seed(42)
random.seed(42)


def _uuid() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    # Naive local time, matching TIMESTAMP columns filled from SYSTIMESTAMP
    return datetime.now()


# ── Tenancy ─────────────────────────────────────────────────────────

def build_store(tenant_id: str | None = None, **overrides: Any) -> dict[str, Any]:
    """Generate a synthetic store dict."""
    data: dict[str, Any] = {
        "store_id": _uuid(),
        "tenant_id": tenant_id or _uuid(),
        "name": f"{fake.city()} Store",
        "created_at": _now() - timedelta(days=random.randint(30, 720)),
    }
    data.update(overrides)
    return data


# ── User Factory ────────────────────────────────────────────────────

def build_user(**overrides: Any) -> dict[str, Any]:
    """Generate a synthetic user dict."""
    data: dict[str, Any] = {
        "user_id": _uuid(),
        "tenant_id": _uuid(),
        "store_id": None,
        "name": fake.name(),
        "email": fake.unique.email(),
        "phone": fake.numerify("+1##########"),
        "avatar": None,
        "role": ROLE_CUSTOMER,
        "password_hash": fake.sha256(),
        "created_at": _now() - timedelta(days=random.randint(1, 365)),
    }
    data.update(overrides)
    return data


def build_user_batch(count: int = 10, **overrides: Any) -> list[dict[str, Any]]:
    """Generate multiple synthetic users."""
    return [build_user(**overrides) for _ in range(count)]


# ── Ticket Factory ──────────────────────────────────────────────────

def build_ticket(
    customer_id: str | None = None,
    store_id: str | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Generate a synthetic ticket dict; resolved tickets get ``resolved_at``."""
    status = random.choice(TICKET_STATUSES)
    created = _now() - timedelta(days=random.randint(0, 60), hours=random.randint(0, 23))
    data: dict[str, Any] = {
        "ticket_id": _uuid(),
        "ticket_number": f"TKT-{random.randint(10000, 99999)}",
        "tenant_id": _uuid(),
        "store_id": store_id,
        "customer_id": customer_id or _uuid(),
        "assigned_agent_id": None,
        "subject": fake.sentence(nb_words=6).rstrip("."),
        "status": status,
        "priority": random.choice(TICKET_PRIORITIES),
        "created_at": created,
        "resolved_at": (
            created + timedelta(hours=random.randint(1, 96))
            if status in ("RESOLVED", "CLOSED")
            else None
        ),
    }
    data.update(overrides)
    return data


# ── Call Log Factory ────────────────────────────────────────────────

def build_call_log(customer_id: str | None = None, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "call_log_id": _uuid(),
        "customer_id": customer_id,
        "agent_id": None,
        "caller_number": fake.numerify("+1##########"),
        "direction": random.choice(["INBOUND", "OUTBOUND"]),
        "status": random.choice(["COMPLETED", "MISSED", "BUSY"]),
        "duration_seconds": random.randint(0, 1800),
        "created_at": _now() - timedelta(days=random.randint(0, 30)),
    }
    data.update(overrides)
    return data


# ── Notification Factory ────────────────────────────────────────────

def build_notification(
    user_id: str | None = None,
    ticket_id: str | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Generate a synthetic notification dict (unread by default)."""
    data: dict[str, Any] = {
        "notification_id": _uuid(),
        "user_id": user_id or _uuid(),
        "ticket_id": ticket_id,
        "actor_id": None,
        "notification_type": random.choice(NOTIFICATION_TYPES),
        "title": fake.sentence(nb_words=4).rstrip("."),
        "message": fake.sentence(nb_words=12),
        "metadata": None,
        "is_read": 0,
        "read_at": None,
        "email_sent": 0,
        "created_at": _now() - timedelta(minutes=random.randint(1, 10_000)),
    }
    data.update(overrides)
    return data


def build_preference(
    user_id: str | None = None,
    notification_type: str | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "preference_id": _uuid(),
        "user_id": user_id or _uuid(),
        "notification_type": notification_type or random.choice(NOTIFICATION_TYPES),
        "in_app_enabled": 1,
        "email_enabled": 1,
        "push_enabled": 0,
        "email_digest": "REALTIME",
        "quiet_hours_enabled": 0,
        "quiet_hours_start": None,
        "quiet_hours_end": None,
    }
    data.update(overrides)
    return data
