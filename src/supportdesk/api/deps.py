"""Dependency injection for FastAPI routes."""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from fastapi import Depends, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from supportdesk.api.auth_context import (
    AuthContext,
    Authorized,
    Forbidden,
    guard,
    resolve_auth_context,
)
from supportdesk.core.config import Settings
from supportdesk.core.constants import ROLE_ADMIN
from supportdesk.core.context import set_user_id

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_app_settings(request: Request) -> Settings:
    """Settings resolved once by the app factory."""
    settings: Settings = request.app.state.settings
    return settings


# ── Auth Dependencies ───────────────────────────────────────────────


def get_auth_context(
    request: Request,
    store_id: str | None = Query(default=None, alias="storeId"),
    settings: Settings = Depends(get_app_settings),
) -> AuthContext | None:
    """Resolve the caller's session; ``None`` when there is none."""
    ctx = resolve_auth_context(request, settings, store_id=store_id)
    if ctx is not None:
        set_user_id(ctx.user_id)
    return ctx


def require_session(
    ctx: AuthContext | None = Depends(get_auth_context),
) -> AuthContext:
    """Require a signed-in user (401 otherwise)."""
    result = guard(ctx)
    if not isinstance(result, Authorized):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return result.context


def require_admin(
    ctx: AuthContext | None = Depends(get_auth_context),
) -> AuthContext:
    """Require a signed-in administrator (401 / 403 otherwise)."""
    result = guard(ctx, roles=[ROLE_ADMIN])
    if isinstance(result, Forbidden):
        raise HTTPException(status_code=403, detail="Admin access required")
    if not isinstance(result, Authorized):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return result.context


def require_internal_api_key(
    x_internal_api_key: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Gate service-to-service routes on the shared ``INTERNAL_API_KEY``.

    An unset key fails closed with a configuration error.
    """
    expected = settings.internal_api_key
    if not expected:
        logger.error("INTERNAL_API_KEY not configured")
        raise HTTPException(status_code=500, detail="Server configuration error")
    if not x_internal_api_key or x_internal_api_key != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")


# ── Request Bodies ──────────────────────────────────────────────────
# Routes behind a guard read their body through these dependencies,
# declared after the guard, so an unauthenticated caller is rejected
# before the body is decoded.


async def read_raw_body(request: Request) -> bytes:
    return await request.body()


def parse_json(raw: bytes) -> Any:
    """Decode a JSON body; ``None`` when empty, 400 when malformed."""
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from e


def read_json_body(raw: bytes = Depends(read_raw_body)) -> Any:
    return parse_json(raw)


def validate_body(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a decoded body against *model*; an empty body counts as ``{}``."""
    try:
        return model.model_validate({} if payload is None else payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e
