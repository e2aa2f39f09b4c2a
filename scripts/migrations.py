"""Database migration scripts for SupportDesk.

Run all migrations in order to set up the schema.
"""

from __future__ import annotations

import logging

import oracledb

logger = logging.getLogger(__name__)


MIGRATION_001_USERS = """
CREATE TABLE users (
    user_id             RAW(16) DEFAULT SYS_GUID() PRIMARY KEY,
    tenant_id           RAW(16),
    store_id            RAW(16),
    name                VARCHAR2(255),
    email               VARCHAR2(255) NOT NULL UNIQUE,
    phone               VARCHAR2(30),
    avatar              VARCHAR2(500),
    role                VARCHAR2(20) DEFAULT 'CUSTOMER'
                        CHECK (role IN ('ADMIN','AGENT','CUSTOMER')),
    password_hash       VARCHAR2(255),
    created_at          TIMESTAMP DEFAULT SYSTIMESTAMP
)
"""

MIGRATION_001_STORES = """
CREATE TABLE stores (
    store_id            RAW(16) DEFAULT SYS_GUID() PRIMARY KEY,
    tenant_id           RAW(16),
    name                VARCHAR2(255) NOT NULL,
    created_at          TIMESTAMP DEFAULT SYSTIMESTAMP
)
"""

MIGRATION_002_TICKETS = """
CREATE TABLE tickets (
    ticket_id           RAW(16) DEFAULT SYS_GUID() PRIMARY KEY,
    ticket_number       VARCHAR2(30) NOT NULL UNIQUE,
    tenant_id           RAW(16),
    store_id            RAW(16) REFERENCES stores(store_id),
    customer_id         RAW(16) REFERENCES users(user_id),
    assigned_agent_id   RAW(16) REFERENCES users(user_id),
    subject             VARCHAR2(500) NOT NULL,
    status              VARCHAR2(20) DEFAULT 'NEW'
                        CHECK (status IN ('NEW','OPEN','IN_PROGRESS','PENDING','RESOLVED','CLOSED')),
    priority            VARCHAR2(10) DEFAULT 'NORMAL'
                        CHECK (priority IN ('LOW','NORMAL','HIGH','URGENT')),
    created_at          TIMESTAMP DEFAULT SYSTIMESTAMP,
    resolved_at         TIMESTAMP
)
"""

MIGRATION_002_CALL_LOGS = """
CREATE TABLE call_logs (
    call_log_id         RAW(16) DEFAULT SYS_GUID() PRIMARY KEY,
    customer_id         RAW(16) REFERENCES users(user_id),
    agent_id            RAW(16) REFERENCES users(user_id),
    caller_number       VARCHAR2(30),
    direction           VARCHAR2(10) CHECK (direction IN ('INBOUND','OUTBOUND')),
    status              VARCHAR2(20),
    duration_seconds    NUMBER(6) DEFAULT 0,
    created_at          TIMESTAMP DEFAULT SYSTIMESTAMP
)
"""

MIGRATION_003_NOTIFICATIONS = """
CREATE TABLE notifications (
    notification_id     RAW(16) DEFAULT SYS_GUID() PRIMARY KEY,
    user_id             RAW(16) NOT NULL REFERENCES users(user_id),
    ticket_id           RAW(16) REFERENCES tickets(ticket_id),
    actor_id            RAW(16) REFERENCES users(user_id),
    notification_type   VARCHAR2(40) NOT NULL,
    title               VARCHAR2(255) NOT NULL,
    message             VARCHAR2(4000) NOT NULL,
    metadata            CLOB CHECK (metadata IS JSON),
    is_read             NUMBER(1) DEFAULT 0,
    read_at             TIMESTAMP,
    email_sent          NUMBER(1) DEFAULT 0,
    created_at          TIMESTAMP DEFAULT SYSTIMESTAMP
)
"""

MIGRATION_003_PREFERENCES = """
CREATE TABLE notification_preferences (
    preference_id       RAW(16) DEFAULT SYS_GUID() PRIMARY KEY,
    user_id             RAW(16) NOT NULL REFERENCES users(user_id),
    notification_type   VARCHAR2(40) NOT NULL,
    in_app_enabled      NUMBER(1) DEFAULT 1,
    email_enabled       NUMBER(1) DEFAULT 1,
    push_enabled        NUMBER(1) DEFAULT 0,
    email_digest        VARCHAR2(10) DEFAULT 'REALTIME'
                        CHECK (email_digest IN ('REALTIME','HOURLY','DAILY','WEEKLY')),
    quiet_hours_enabled NUMBER(1) DEFAULT 0,
    quiet_hours_start   VARCHAR2(5),
    quiet_hours_end     VARCHAR2(5),
    CONSTRAINT uk_pref_user_type UNIQUE (user_id, notification_type)
)
"""

# Tables in creation order (parents first)
ALL_TABLE_DDLS = [
    ("users", MIGRATION_001_USERS),
    ("stores", MIGRATION_001_STORES),
    ("tickets", MIGRATION_002_TICKETS),
    ("call_logs", MIGRATION_002_CALL_LOGS),
    ("notifications", MIGRATION_003_NOTIFICATIONS),
    ("notification_preferences", MIGRATION_003_PREFERENCES),
]

MIGRATION_004_INDEXES = [
    "CREATE INDEX idx_users_role ON users(role)",
    "CREATE INDEX idx_tickets_store ON tickets(store_id)",
    "CREATE INDEX idx_tickets_status ON tickets(status)",
    "CREATE INDEX idx_tickets_created ON tickets(created_at)",
    "CREATE INDEX idx_notif_user_read ON notifications(user_id, is_read, created_at)",
    "CREATE INDEX idx_notif_ticket ON notifications(ticket_id)",
]

# Tables in reverse order for dropping (children first)
DROP_ORDER = [name for name, _ in reversed(ALL_TABLE_DDLS)]

# ORA-00955: name already used; ORA-01408: column list already indexed
_INDEX_EXISTS_CODES = (955, 1408)


def table_exists(conn: oracledb.Connection, table_name: str) -> bool:
    """Check if a table exists in the current schema."""
    with conn.cursor() as cur:
        cur.execute(
            "SELECT COUNT(*) FROM user_tables WHERE table_name = :name",
            {"name": table_name.upper()},
        )
        row = cur.fetchone()
        return bool(row and row[0] > 0)


def run_migrations(conn: oracledb.Connection) -> list[str]:
    """Run all pending migrations. Returns list of actions taken."""
    actions: list[str] = []

    for table_name, ddl in ALL_TABLE_DDLS:
        if not table_exists(conn, table_name):
            with conn.cursor() as cur:
                cur.execute(ddl)
            actions.append(f"Created table: {table_name}")
            logger.info("Created table: %s", table_name)

    for idx_sql in MIGRATION_004_INDEXES:
        try:
            with conn.cursor() as cur:
                cur.execute(idx_sql)
            idx_name = idx_sql.split("INDEX ")[1].split(" ON")[0]
            actions.append(f"Created index: {idx_name}")
        except oracledb.DatabaseError as e:
            error_obj = e.args[0]
            if not (hasattr(error_obj, "code") and error_obj.code in _INDEX_EXISTS_CODES):
                raise

    conn.commit()
    return actions


def drop_all_tables(conn: oracledb.Connection) -> list[str]:
    """Drop all tables (for reset). Returns list of actions taken."""
    actions: list[str] = []
    for table_name in DROP_ORDER:
        if table_exists(conn, table_name):
            with conn.cursor() as cur:
                cur.execute(f"DROP TABLE {table_name} CASCADE CONSTRAINTS PURGE")
            actions.append(f"Dropped table: {table_name}")
            logger.info("Dropped table: %s", table_name)
    conn.commit()
    return actions
