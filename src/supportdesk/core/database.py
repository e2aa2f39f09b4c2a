"""Oracle database connection pool management."""

from __future__ import annotations

import logging

import oracledb

from supportdesk.core.config import Settings

logger = logging.getLogger(__name__)

# Module-level pool reference
_pool: oracledb.ConnectionPool | None = None


async def init_pool(settings: Settings) -> oracledb.ConnectionPool:
    """Create and return the Oracle connection pool."""
    global _pool
    if _pool is not None:
        return _pool

    params = settings.oracle_connect_params
    logger.info("Creating Oracle connection pool: %s", params["dsn"])
    _pool = oracledb.create_pool(
        user=params["user"],
        password=params["password"],
        dsn=params["dsn"],
        min=settings.oracle_pool_min,
        max=settings.oracle_pool_max,
        increment=settings.oracle_pool_increment,
    )
    logger.info(
        "Oracle connection pool created (min=%d, max=%d)",
        settings.oracle_pool_min,
        settings.oracle_pool_max,
    )
    return _pool


async def close_pool() -> None:
    """Close the Oracle connection pool."""
    global _pool
    if _pool is not None:
        _pool.close(force=True)
        _pool = None
        logger.info("Oracle connection pool closed")


def get_pool() -> oracledb.ConnectionPool:
    """Get the current connection pool. Raises if not initialized."""
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _pool
