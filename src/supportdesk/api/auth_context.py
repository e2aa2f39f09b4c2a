"""Request identity: resolve the session into an ``AuthContext`` and guard on it.

Handlers never read cookies or headers themselves. They receive the
tagged result of :func:`guard` and either proceed with the context or turn
the failure into a 401/403 (API) or a sign-in redirect (pages).
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from supportdesk.core.config import Settings
from supportdesk.core.security import (
    SECURE_SESSION_COOKIE_NAME,
    SESSION_COOKIE_NAME,
    decode_session_token_safe,
)


@dataclass(frozen=True)
class AuthContext:
    """Who is calling, and which store (if any) they are looking at."""

    user_id: str
    role: str
    tenant_id: str | None = None
    store_id: str | None = None
    email: str | None = None
    name: str | None = None

    @classmethod
    def from_session(cls, payload: dict[str, Any], store_id: str | None = None) -> AuthContext:
        return cls(
            user_id=str(payload["sub"]),
            role=str(payload.get("role") or ""),
            tenant_id=payload.get("tenant_id"),
            store_id=store_id,
            email=payload.get("email"),
            name=payload.get("name"),
        )


@dataclass(frozen=True)
class Authorized:
    context: AuthContext


@dataclass(frozen=True)
class Unauthenticated:
    reason: str = "Unauthorized"


@dataclass(frozen=True)
class Forbidden:
    reason: str = "Forbidden"


AuthResult = Authorized | Unauthenticated | Forbidden


def extract_session_token(request: Request) -> str | None:
    """Session token from the session cookie, falling back to a Bearer header."""
    token = request.cookies.get(SESSION_COOKIE_NAME) or request.cookies.get(
        SECURE_SESSION_COOKIE_NAME
    )
    if token:
        return token
    authorization = request.headers.get("authorization", "")
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
        return parts[1].strip()
    return None


def resolve_auth_context(
    request: Request,
    settings: Settings,
    store_id: str | None = None,
) -> AuthContext | None:
    """Decode the request's session into an ``AuthContext``; ``None`` if absent or invalid."""
    token = extract_session_token(request)
    if not token:
        return None
    payload = decode_session_token_safe(token, settings.session_secret, settings.session_algorithm)
    if not payload or not payload.get("sub") or not isinstance(payload["sub"], str):
        return None
    return AuthContext.from_session(payload, store_id=store_id or None)


def guard(ctx: AuthContext | None, roles: Collection[str] | None = None) -> AuthResult:
    """Decide whether *ctx* may proceed, optionally requiring one of *roles*."""
    if ctx is None:
        return Unauthenticated()
    if roles and ctx.role not in roles:
        return Forbidden(f"Requires role: {', '.join(roles)}")
    return Authorized(ctx)
