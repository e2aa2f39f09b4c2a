"""Authentication service — credential sign-in and session issuing."""

from __future__ import annotations

import logging
from typing import Any

from supportdesk.core.security import (
    create_session_token,
    hash_password,
    password_needs_rehash,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Authentication / authorisation error with HTTP status hint."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class AuthService:
    """Verifies credentials and issues signed session tokens."""

    def __init__(
        self,
        user_repo: Any,
        secret: str,
        *,
        max_age_days: int = 30,
        algorithm: str = "HS256",
    ) -> None:
        self.user_repo = user_repo
        self.secret = secret
        self.max_age_days = max_age_days
        self.algorithm = algorithm

    def sign_in(self, email: str, password: str) -> dict[str, Any]:
        """Check email + password and return the session user and token."""
        user = self.user_repo.find_by_email(email)
        if not user or not verify_password(password, user.get("password_hash") or ""):
            logger.info("Failed sign-in for %s", email)
            raise AuthError("Invalid email or password", status_code=401)

        if password_needs_rehash(user["password_hash"]):
            self.user_repo.update(user["user_id"], {"password_hash": hash_password(password)})

        token = create_session_token(
            subject=user["user_id"],
            secret=self.secret,
            role=user.get("role", ""),
            tenant_id=user.get("tenant_id"),
            store_id=user.get("store_id"),
            email=user.get("email"),
            name=user.get("name"),
            max_age_days=self.max_age_days,
            algorithm=self.algorithm,
        )
        logger.info("User signed in: user_id=%s", user["user_id"])
        return {
            "user": {
                "id": user["user_id"],
                "name": user.get("name"),
                "email": user.get("email"),
                "role": user.get("role"),
                "tenantId": user.get("tenant_id"),
                "storeId": user.get("store_id"),
            },
            "session_token": token,
            "max_age_seconds": self.max_age_days * 86400,
        }
