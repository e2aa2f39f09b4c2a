"""User repository — data access for the ``users`` table."""

from __future__ import annotations

from typing import Any

from supportdesk.repositories.base import BaseRepository

# Columns safe to hand to pages and session payloads
PROFILE_COLUMNS: tuple[str, ...] = (
    "user_id",
    "name",
    "email",
    "phone",
    "avatar",
    "role",
    "created_at",
)


class UserRepository(BaseRepository):
    """CRUD + domain queries for users."""

    def __init__(self, pool: Any) -> None:
        super().__init__(pool=pool, table_name="users", id_column="user_id")

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        """Find a user by email address."""
        results = self.find_by_field("email", email)
        return results[0] if results else None

    def find_profile(self, user_id: str) -> dict[str, Any] | None:
        """Return the public profile columns of one user, or ``None``."""
        sql = f"SELECT {', '.join(PROFILE_COLUMNS)} FROM users WHERE user_id = :id"
        return self._fetch_one(sql, {"id": self._to_raw_id(user_id)})

    def count_by_role(self, role: str) -> int:
        return self.count(filters={"role": role})

    def list_users(self, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        """Return a page of users (profile columns only), newest first."""
        sql = (
            f"SELECT {', '.join(PROFILE_COLUMNS)} FROM users "
            "ORDER BY created_at DESC OFFSET :off ROWS FETCH NEXT :lim ROWS ONLY"
        )
        return self._fetch_all(sql, {"off": offset, "lim": limit})
