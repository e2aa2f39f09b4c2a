"""Notification repository — data access for the ``notifications`` table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from supportdesk.repositories.base import DB_NOW, BaseRepository


@dataclass(frozen=True)
class NotificationScope:
    """The (user, optional store) pair a notification query is limited to.

    ``store_id`` keeps notifications tied to a ticket of that store plus
    notifications with no ticket at all. ``created_since`` hides anything
    older than the user account.
    """

    user_id: str
    store_id: str | None = None
    created_since: datetime | None = None

    def where_clause(self, alias: str = "n") -> tuple[str, dict[str, Any]]:
        """Return ``(sql, params)`` for the scope, without the WHERE keyword."""
        clauses = [f"{alias}.user_id = :scope_user_id"]
        params: dict[str, Any] = {"scope_user_id": BaseRepository._to_raw_id(self.user_id)}
        if self.created_since is not None:
            clauses.append(f"{alias}.created_at >= :scope_created_since")
            params["scope_created_since"] = self.created_since
        if self.store_id:
            clauses.append(
                f"({alias}.ticket_id IS NULL OR {alias}.ticket_id IN "
                "(SELECT t.ticket_id FROM tickets t WHERE t.store_id = :scope_store_id))"
            )
            params["scope_store_id"] = BaseRepository._to_raw_id(self.store_id)
        return " AND ".join(clauses), params


class NotificationRepository(BaseRepository):
    """CRUD + scoped read/unread queries for notifications."""

    def __init__(self, pool: Any) -> None:
        super().__init__(
            pool=pool,
            table_name="notifications",
            id_column="notification_id",
        )

    def count_unread(self, scope: NotificationScope) -> int:
        """Count unread notifications within *scope*."""
        where, params = scope.where_clause()
        sql = f"SELECT COUNT(*) AS cnt FROM notifications n WHERE {where} AND n.is_read = 0"
        value = self._fetch_scalar(sql, params)
        return int(value) if value is not None else 0

    def mark_all_read(self, scope: NotificationScope) -> int:
        """Flag every unread notification in *scope* as read.

        Runs as one UPDATE so the whole batch commits or none of it does.
        The cutoff and ``read_at`` both come from the database clock, evaluated
        once for the statement. Returns rows changed.
        """
        where, params = scope.where_clause()
        sql = (
            f"UPDATE notifications n SET n.is_read = 1, n.read_at = {DB_NOW} "
            f"WHERE {where} AND n.is_read = 0 AND n.created_at <= {DB_NOW}"
        )
        return self._execute(sql, params)

    def mark_read(self, notification_id: str) -> int:
        """Flag one notification as read; 0 when it already was."""
        sql = (
            f"UPDATE notifications SET is_read = 1, read_at = {DB_NOW} "
            "WHERE notification_id = :id AND is_read = 0"
        )
        return self._execute(sql, {"id": self._to_raw_id(notification_id)})

    def find_in_scope(
        self,
        scope: NotificationScope,
        *,
        is_read: bool | None = None,
        notification_type: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return a page of notifications in *scope*, newest first."""
        where, params = self._filtered_where(scope, is_read, notification_type)
        sql = (
            "SELECT n.*, t.ticket_number, t.subject AS ticket_subject "
            "FROM notifications n LEFT JOIN tickets t ON t.ticket_id = n.ticket_id "
            f"WHERE {where} ORDER BY n.created_at DESC "
            "OFFSET :off ROWS FETCH NEXT :lim ROWS ONLY"
        )
        params["off"] = offset
        params["lim"] = limit
        return self._fetch_all(sql, params)

    def count_in_scope(
        self,
        scope: NotificationScope,
        *,
        is_read: bool | None = None,
        notification_type: str | None = None,
    ) -> int:
        where, params = self._filtered_where(scope, is_read, notification_type)
        sql = f"SELECT COUNT(*) AS cnt FROM notifications n WHERE {where}"
        value = self._fetch_scalar(sql, params)
        return int(value) if value is not None else 0

    @staticmethod
    def _filtered_where(
        scope: NotificationScope,
        is_read: bool | None,
        notification_type: str | None,
    ) -> tuple[str, dict[str, Any]]:
        where, params = scope.where_clause()
        if is_read is not None:
            where += " AND n.is_read = :is_read"
            params["is_read"] = 1 if is_read else 0
        if notification_type:
            where += " AND n.notification_type = :notification_type"
            params["notification_type"] = notification_type
        return where, params


class NotificationPreferenceRepository(BaseRepository):
    """Per-user, per-type delivery preferences."""

    def __init__(self, pool: Any) -> None:
        super().__init__(
            pool=pool,
            table_name="notification_preferences",
            id_column="preference_id",
        )

    def find_by_user(self, user_id: str) -> list[dict[str, Any]]:
        return self.find_by_field("user_id", self._to_raw_id(user_id))

    def find_one(self, user_id: str, notification_type: str) -> dict[str, Any] | None:
        """Return the preference row for (user, type), or ``None``."""
        sql = (
            "SELECT * FROM notification_preferences "
            "WHERE user_id = :user_id AND notification_type = :notification_type"
        )
        return self._fetch_one(
            sql,
            {"user_id": self._to_raw_id(user_id), "notification_type": notification_type},
        )
