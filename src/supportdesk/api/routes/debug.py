"""Debug routes — database connectivity check. Hidden in production."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from supportdesk.api.deps import get_app_settings
from supportdesk.core.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/debug", tags=["debug"])

# Error fragments oracledb uses when no listener answers
UNREACHABLE_MARKERS: tuple[str, ...] = (
    "DPY-6005",
    "ORA-12541",
    "ORA-12170",
    "cannot connect",
    "Connection refused",
    "not initialized",
)

UNREACHABLE_HINT = (
    "The database server is not reachable. Check if: 1) Server is running, "
    "2) Firewall allows port 1521, 3) the listener accepts remote connections"
)
CREDENTIALS_HINT = "Check your database credentials and connection settings"


def _get_repositories():  # type: ignore[no-untyped-def]
    from supportdesk.core.database import get_pool
    from supportdesk.repositories.call_log_repository import CallLogRepository
    from supportdesk.repositories.user_repository import UserRepository

    pool = get_pool()
    return UserRepository(pool=pool), CallLogRepository(pool=pool)


def connection_hint(message: str) -> str:
    if any(marker in message for marker in UNREACHABLE_MARKERS):
        return UNREACHABLE_HINT
    return CREDENTIALS_HINT


@router.get("/db-test")
def db_test(settings: Settings = Depends(get_app_settings)) -> Any:
    """Count users and call logs and report how long it took."""
    try:
        start = time.perf_counter()
        user_repo, call_log_repo = _get_repositories()
        user_count = user_repo.count()
        call_log_count = call_log_repo.count()
        elapsed_ms = int((time.perf_counter() - start) * 1000)
    except Exception as exc:
        logger.exception("Database connection test failed")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Database connection failed",
                "error": str(exc),
                "hint": connection_hint(str(exc)),
            },
        )

    return {
        "success": True,
        "message": "Database connection successful",
        "stats": {
            "userCount": user_count,
            "callLogCount": call_log_count,
            "responseTimeMs": elapsed_ms,
        },
        "databaseUrl": settings.database_host or "Not configured (using DB_* vars)",
    }
