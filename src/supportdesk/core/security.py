"""Security utilities: password hashing (Argon2id) and signed session tokens."""

from __future__ import annotations

import logging
import time
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# ── Password Hashing ────────────────────────────────────────────────

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__memory_cost=65536,  # 64 MiB
    argon2__time_cost=3,
    argon2__parallelism=4,
)


def hash_password(plain: str) -> str:
    """Hash a plain-text password with Argon2id."""
    return str(pwd_context.hash(plain))


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against an Argon2id hash."""
    try:
        return bool(pwd_context.verify(plain, hashed))
    except (ValueError, TypeError):
        return False


def password_needs_rehash(hashed: str) -> bool:
    """Check whether a hash should be upgraded to current parameters."""
    return bool(pwd_context.needs_update(hashed))


# ── Session Tokens ──────────────────────────────────────────────────

SESSION_COOKIE_NAME = "supportdesk.session-token"
SECURE_SESSION_COOKIE_NAME = "__Secure-supportdesk.session-token"
SESSION_TOKEN_TYPE = "session"


def create_session_token(
    subject: str,
    secret: str,
    *,
    role: str,
    tenant_id: str | None = None,
    store_id: str | None = None,
    email: str | None = None,
    name: str | None = None,
    max_age_days: int = 30,
    algorithm: str = "HS256",
) -> str:
    """Create a signed session token for a signed-in user."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "tenant_id": tenant_id,
        "store_id": store_id,
        "email": email,
        "name": name,
        "type": SESSION_TOKEN_TYPE,
        "iat": now,
        "exp": now + (max_age_days * 86400),
    }
    return str(jwt.encode(payload, secret, algorithm=algorithm))


def decode_session_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """Decode and verify a session token. Raises JWTError on failure."""
    payload: dict[str, Any] = jwt.decode(token, secret, algorithms=[algorithm])
    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise JWTError("Invalid token type")
    return payload


def decode_session_token_safe(
    token: str, secret: str, algorithm: str = "HS256"
) -> dict[str, Any] | None:
    """Decode a session token, returning None when it is invalid or expired."""
    try:
        return decode_session_token(token, secret, algorithm)
    except JWTError as exc:
        logger.debug("Session token rejected: %s", exc)
        return None
