"""Block until Oracle answers queries, then bring the schema up to date.

Usage:
    python -m scripts.wait_for_db [--timeout 300] [--interval 5] [--skip-migrations]

Exits 0 once the database is ready and 1 if it never answered in time.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

import oracledb

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from supportdesk.core.config import Settings
from supportdesk.core.logging import setup_logging

logger = logging.getLogger(__name__)


def try_connect(settings: Settings) -> oracledb.Connection | None:
    """Open a connection and make one round trip; ``None`` while Oracle is still starting."""
    params = settings.oracle_connect_params
    try:
        conn = oracledb.connect(**params)
    except oracledb.Error as exc:
        logger.info("Oracle at %s not reachable yet: %s", params["dsn"], exc)
        return None

    try:
        with conn.cursor() as cur:
            cur.execute("SELECT 1 FROM DUAL")
            cur.fetchone()
    except oracledb.Error as exc:
        logger.info("Oracle at %s not accepting queries yet: %s", params["dsn"], exc)
        conn.close()
        return None
    return conn


def wait_for_database(
    settings: Settings,
    timeout: float = 300,
    interval: float = 5,
) -> oracledb.Connection | None:
    """Retry :func:`try_connect` every *interval* seconds for up to *timeout* seconds."""
    deadline = time.monotonic() + timeout
    attempts = 0
    while True:
        attempts += 1
        conn = try_connect(settings)
        if conn is not None:
            logger.info("Oracle ready after %d attempt(s)", attempts)
            return conn
        if time.monotonic() + interval > deadline:
            logger.error("Oracle did not answer within %ss (%d attempts)", timeout, attempts)
            return None
        time.sleep(interval)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Wait for the SupportDesk database, then run migrations",
        prog="python -m scripts.wait_for_db",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=float(os.getenv("DB_WAIT_TIMEOUT", "300")),
        help="Seconds to keep retrying (default: DB_WAIT_TIMEOUT or 300)",
    )
    parser.add_argument("--interval", type=float, default=5.0, help="Seconds between attempts")
    parser.add_argument(
        "--skip-migrations",
        action="store_true",
        help="Only wait; leave the schema alone",
    )
    args = parser.parse_args(argv)

    settings = Settings()
    setup_logging(level=settings.log_level.upper(), log_format=settings.log_format)

    conn = wait_for_database(settings, timeout=args.timeout, interval=args.interval)
    if conn is None:
        return 1

    try:
        if not args.skip_migrations:
            from scripts.migrations import run_migrations

            actions = run_migrations(conn)
            logger.info("Migrations: %s", ", ".join(actions) if actions else "none pending")
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
