"""Health check routes — liveness, readiness, and general health."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(request: Request) -> dict[str, Any]:
    """Application health check endpoint."""
    settings = getattr(request.app.state, "settings", None)
    db_pool = getattr(request.app.state, "db_pool", None)

    return {
        "status": "ok",
        "service": getattr(request.app.state, "service_name", "supportdesk"),
        "environment": settings.app_env if settings else "unknown",
        "database": "connected" if db_pool is not None else "disconnected",
    }


@router.get("/health/live")
def liveness_probe() -> dict[str, Any]:
    """Liveness probe: the process is up and answering requests."""
    return {"status": "alive"}


@router.get("/health/ready")
def readiness_probe(request: Request) -> Any:
    """Readiness probe: the database answers ``SELECT 1``.

    A missing pool only makes the service unready in production.
    """
    checks: dict[str, Any] = {}
    ready = True

    db_pool = getattr(request.app.state, "db_pool", None)
    if db_pool is not None:
        start = time.perf_counter()
        try:
            conn = db_pool.acquire()
            try:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1 FROM DUAL")
                    cur.fetchone()
            finally:
                conn.close()
            checks["database"] = {
                "status": "ok",
                "response_time_ms": round((time.perf_counter() - start) * 1000, 1),
            }
        except Exception as exc:
            logger.warning("Readiness check failed: %s", exc)
            checks["database"] = {"status": "error", "detail": str(exc)}
            ready = False
    else:
        checks["database"] = {"status": "not_configured"}
        settings = getattr(request.app.state, "settings", None)
        if settings and settings.is_production:
            ready = False

    body = {"status": "ready" if ready else "not_ready", "checks": checks}
    if not ready:
        return JSONResponse(content=body, status_code=503)
    return body
