"""FastAPI application factories.

``create_app`` builds the web application; ``create_notification_app``
builds the companion notification service. Both share settings, logging,
middleware, error handling and the Oracle pool lifecycle.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from supportdesk.api.errors import register_exception_handlers
from supportdesk.api.middleware import setup_middleware
from supportdesk.core.config import Settings
from supportdesk.core.database import close_pool, init_pool
from supportdesk.core.logging import setup_logging

logger = logging.getLogger(__name__)


def _build_app(
    settings: Settings | None,
    *,
    service_name: str,
    title: str,
    description: str,
    register_routes: Callable[[FastAPI], None],
) -> FastAPI:
    if settings is None:
        settings = Settings()

    # Configure structured logging
    if not settings.is_testing:
        setup_logging(level=settings.log_level, log_format=settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting %s (env=%s)", title, settings.app_env)
        for name in settings.missing_required():
            logger.warning("%s is not configured", name)
        if not settings.is_testing:
            try:
                app.state.db_pool = await init_pool(settings)
                logger.info("Database pool ready")
            except Exception:
                logger.warning(
                    "Could not connect to Oracle; %s will start without a database. "
                    "Run scripts/wait_for_db.py and scripts/migrations.py once it is up.",
                    title,
                )
                app.state.db_pool = None
        yield
        logger.info("Shutting down %s", title)
        if not settings.is_testing:
            await close_pool()

    application = FastAPI(
        title=title,
        description=description,
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    # Store settings on app state
    application.state.settings = settings
    application.state.service_name = service_name
    application.state.db_pool = None

    setup_middleware(application)
    register_exception_handlers(application)
    register_routes(application)
    return application


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the web application."""
    return _build_app(
        settings,
        service_name="supportdesk-web",
        title="SupportDesk",
        description="Multi-tenant customer support and ticketing",
        register_routes=_register_web_routes,
    )


def create_notification_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the notification service."""
    return _build_app(
        settings,
        service_name="supportdesk-notifications",
        title="SupportDesk Notifications",
        description="Unread counters, read tracking and delivery of notifications",
        register_routes=_register_notification_routes,
    )


def _register_web_routes(app: FastAPI) -> None:
    """Register the web application's route modules."""
    from supportdesk.api.routes.alerts import router as alerts_router
    from supportdesk.api.routes.auth import router as auth_router
    from supportdesk.api.routes.debug import router as debug_router
    from supportdesk.api.routes.health import router as health_router
    from supportdesk.api.routes.internal import router as internal_router
    from supportdesk.api.routes.notifications import web_router as notifications_router
    from supportdesk.api.routes.pages import router as pages_router

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(notifications_router)
    app.include_router(alerts_router)
    app.include_router(internal_router)
    app.include_router(debug_router)
    app.include_router(pages_router)


def _register_notification_routes(app: FastAPI) -> None:
    """Register the notification service's route modules."""
    from supportdesk.api.routes.health import router as health_router
    from supportdesk.api.routes.internal import notification_router as internal_router
    from supportdesk.api.routes.notifications import router as notifications_router

    app.include_router(health_router, tags=["health"])
    app.include_router(notifications_router)
    app.include_router(internal_router)


# Module-level instances for uvicorn:
#   uvicorn supportdesk.main:app --port 3000
#   uvicorn supportdesk.main:notification_app --port 4004
app = create_app()
notification_app = create_notification_app()
