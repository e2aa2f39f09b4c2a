"""Session-guarded pages.

Every page checks the session before touching the database. Anything but
an authorized caller is sent to the sign-in page.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from supportdesk.api.auth_context import AuthContext, Authorized, guard
from supportdesk.api.deps import get_auth_context
from supportdesk.core.constants import ROLE_ADMIN, SIGNIN_PATH

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


def _signin_redirect() -> RedirectResponse:
    return RedirectResponse(url=SIGNIN_PATH, status_code=307)


def _get_user_repo():  # type: ignore[no-untyped-def]
    from supportdesk.core.database import get_pool
    from supportdesk.repositories.user_repository import UserRepository

    return UserRepository(pool=get_pool())


def _get_dashboard_service():  # type: ignore[no-untyped-def]
    from supportdesk.core.database import get_pool
    from supportdesk.repositories.ticket_repository import TicketRepository
    from supportdesk.repositories.user_repository import UserRepository
    from supportdesk.services.dashboard import DashboardService

    pool = get_pool()
    return DashboardService(
        ticket_repo=TicketRepository(pool=pool),
        user_repo=UserRepository(pool=pool),
    )


@router.get("/settings/profile")
def profile_page(ctx: AuthContext | None = Depends(get_auth_context)) -> Any:
    """Profile settings of the signed-in user."""
    result = guard(ctx)
    if not isinstance(result, Authorized):
        return _signin_redirect()

    user = _get_user_repo().find_profile(result.context.user_id)
    if not user:
        logger.warning("Session user %s has no user record", result.context.user_id)
        return _signin_redirect()
    return {"page": "settings/profile", "user": user}


@router.get("/admin")
def admin_dashboard_page(ctx: AuthContext | None = Depends(get_auth_context)) -> Any:
    """Admin dashboard: ticket and user counters plus recent tickets."""
    result = guard(ctx, roles=[ROLE_ADMIN])
    if not isinstance(result, Authorized):
        return _signin_redirect()
    return {"page": "admin", **_get_dashboard_service().get_overview()}


@router.get("/admin/users")
def admin_users_page(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    ctx: AuthContext | None = Depends(get_auth_context),
) -> Any:
    result = guard(ctx, roles=[ROLE_ADMIN])
    if not isinstance(result, Authorized):
        return _signin_redirect()

    users = _get_user_repo().list_users(limit=limit, offset=(page - 1) * limit)
    return {"page": "admin/users", "users": users, "pagination": {"page": page, "limit": limit}}
