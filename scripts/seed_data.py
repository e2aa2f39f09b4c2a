"""Seed the database with synthetic demo data.

Usage:
    python -m scripts.seed_data
"""

from __future__ import annotations

import json
import logging
import os
import random
import sys
from typing import Any

# Add src to path so supportdesk imports work
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import oracledb

from supportdesk.core.config import Settings
from supportdesk.core.constants import ROLE_ADMIN, ROLE_AGENT, ROLE_CUSTOMER
from supportdesk.core.security import hash_password

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# Re-use factories
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from tests.factories.data_factories import (
    build_call_log,
    build_notification,
    build_store,
    build_ticket,
    build_user,
    build_user_batch,
)

DEMO_PASSWORD = "SupportDesk123!"


def _connect() -> oracledb.Connection:
    """Connect to Oracle using the application settings."""
    params = Settings().oracle_connect_params
    return oracledb.connect(user=params["user"], password=params["password"], dsn=params["dsn"])


def _insert_row(cur: oracledb.Cursor, table: str, data: dict[str, Any]) -> None:
    """Insert a single row, binding hex ids as RAW and dicts as JSON."""
    clean: dict[str, Any] = {}
    for k, v in data.items():
        if isinstance(v, (dict, list)):
            clean[k] = json.dumps(v)
        elif k.endswith("_id") and isinstance(v, str) and len(v) == 32:
            clean[k] = bytes.fromhex(v)
        else:
            clean[k] = v

    columns = ", ".join(clean.keys())
    placeholders = ", ".join(f":{k}" for k in clean)
    sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
    try:
        cur.execute(sql, clean)
    except oracledb.Error as e:
        logger.warning("Insert into %s failed: %s", table, e)


def seed_database() -> None:
    """Generate and insert synthetic data."""
    conn = _connect()
    cur = conn.cursor()
    logger.info("Connected to database, starting seed...")
    password_hash = hash_password(DEMO_PASSWORD)

    # ── 1. Stores ──
    tenant_id = build_store()["tenant_id"]
    stores = [build_store(tenant_id=tenant_id) for _ in range(3)]
    for s in stores:
        _insert_row(cur, "stores", s)
    logger.info("Seeded %d stores", len(stores))

    # ── 2. Users ──
    users = [
        build_user(
            email="admin@supportdesk.dev",
            role=ROLE_ADMIN,
            tenant_id=tenant_id,
            password_hash=password_hash,
        )
    ]
    users.extend(
        build_user_batch(
            4, role=ROLE_AGENT, tenant_id=tenant_id, password_hash=password_hash
        )
    )
    customers = build_user_batch(
        20, role=ROLE_CUSTOMER, tenant_id=tenant_id, password_hash=password_hash
    )
    users.extend(customers)
    for u in users:
        _insert_row(cur, "users", u)
    logger.info("Seeded %d users (password: %s)", len(users), DEMO_PASSWORD)

    # ── 3. Tickets (2 per customer) ──
    agents = [u for u in users if u["role"] == ROLE_AGENT]
    tickets = []
    for c in customers:
        for _ in range(2):
            t = build_ticket(
                customer_id=c["user_id"],
                store_id=random.choice(stores)["store_id"],
                tenant_id=tenant_id,
                assigned_agent_id=random.choice(agents)["user_id"],
            )
            tickets.append(t)
            _insert_row(cur, "tickets", t)
    logger.info("Seeded %d tickets", len(tickets))

    # ── 4. Call logs ──
    call_logs = [build_call_log(customer_id=c["user_id"]) for c in customers[:10]]
    for log in call_logs:
        _insert_row(cur, "call_logs", log)
    logger.info("Seeded %d call logs", len(call_logs))

    # ── 5. Notifications for staff (one per ticket, some without a ticket) ──
    notifications = []
    for t in tickets:
        n = build_notification(
            user_id=t["assigned_agent_id"],
            ticket_id=t["ticket_id"],
            created_at=t["created_at"],
        )
        notifications.append(n)
    for staff in users[:5]:
        notifications.append(
            build_notification(user_id=staff["user_id"], created_at=staff["created_at"])
        )
    for n in notifications:
        _insert_row(cur, "notifications", n)
    logger.info("Seeded %d notifications", len(notifications))

    conn.commit()
    cur.close()
    conn.close()
    logger.info("Seed complete!")


if __name__ == "__main__":
    seed_database()
