"""Session routes — /api/auth (sign in, current session, sign out)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from supportdesk.api.auth_context import AuthContext
from supportdesk.api.deps import get_app_settings, get_auth_context
from supportdesk.api.schemas.auth import SessionUser, SignInRequest
from supportdesk.core.config import Settings
from supportdesk.core.security import SECURE_SESSION_COOKIE_NAME, SESSION_COOKIE_NAME
from supportdesk.services.auth import AuthError, AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _get_auth_service(settings: Settings) -> AuthService:
    """Build an AuthService with live repositories."""
    from supportdesk.core.database import get_pool
    from supportdesk.repositories.user_repository import UserRepository

    return AuthService(
        user_repo=UserRepository(pool=get_pool()),
        secret=settings.session_secret,
        max_age_days=settings.session_max_age_days,
        algorithm=settings.session_algorithm,
    )


def _handle_auth_error(err: AuthError) -> None:
    """Convert AuthError to HTTPException."""
    raise HTTPException(status_code=err.status_code, detail=err.detail)


def _cookie_name(settings: Settings) -> str:
    return SECURE_SESSION_COOKIE_NAME if settings.is_production else SESSION_COOKIE_NAME


@router.post("/signin")
def sign_in(
    body: SignInRequest,
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Sign in with email and password; the session travels in a cookie."""
    svc = _get_auth_service(settings)
    try:
        result = svc.sign_in(email=body.email, password=body.password)
    except AuthError as e:
        _handle_auth_error(e)

    response.set_cookie(
        key=_cookie_name(settings),
        value=result["session_token"],
        max_age=result["max_age_seconds"],
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    return {"user": result["user"]}


@router.get("/session")
def get_session(ctx: AuthContext | None = Depends(get_auth_context)) -> dict[str, Any]:
    """Current session user, or an empty object when signed out."""
    if ctx is None:
        return {}
    user = SessionUser(
        id=ctx.user_id,
        name=ctx.name,
        email=ctx.email,
        role=ctx.role,
        tenant_id=ctx.tenant_id,
        store_id=ctx.store_id,
    )
    return {"user": user.model_dump(by_alias=True)}


@router.post("/signout")
def sign_out(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    response.delete_cookie(key=_cookie_name(settings), path="/")
    return {"success": True}
