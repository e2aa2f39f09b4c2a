"""API middleware: CORS, compression, security headers, request logging."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from supportdesk.api.errors import error_response
from supportdesk.core.context import set_correlation_id, set_user_id

logger = logging.getLogger(__name__)

# Paths that only exist outside production
DEBUG_PREFIXES: tuple[str, ...] = ("/api/debug",)

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

HSTS_HEADER = "max-age=31536000; includeSubDomains"


def setup_middleware(app: FastAPI) -> None:
    """Attach all middleware to the FastAPI app."""
    settings = getattr(app.state, "settings", None)
    is_prod = settings.is_production if settings else False

    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_and_logging(  # type: ignore[no-untyped-def]
        request: Request, call_next
    ):
        correlation_id = request.headers.get("x-correlation-id", uuid.uuid4().hex[:12])
        set_correlation_id(correlation_id)
        set_user_id(None)

        if is_prod and request.url.path.startswith(DEBUG_PREFIXES):
            return error_response(404, "Not found")

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{elapsed:.1f}ms"
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        if is_prod:
            response.headers["Strict-Transport-Security"] = HSTS_HEADER

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response


def _get_cors_origins(settings: Any) -> list[str]:
    """Resolve CORS origins from settings."""
    if settings is None:
        return ["*"]
    return list(settings.cors_origin_list)
