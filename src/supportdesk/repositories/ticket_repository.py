"""Ticket repository — data access for the ``tickets`` table."""

from __future__ import annotations

from typing import Any

from supportdesk.repositories.base import DB_NOW, BaseRepository


class TicketRepository(BaseRepository):
    """CRUD + dashboard queries for tickets."""

    def __init__(self, pool: Any) -> None:
        super().__init__(pool=pool, table_name="tickets", id_column="ticket_id")

    def find_with_customer(self, ticket_id: str) -> dict[str, Any] | None:
        """Return a ticket joined with its customer's name and email."""
        sql = (
            "SELECT t.*, u.name AS customer_name, u.email AS customer_email "
            "FROM tickets t LEFT JOIN users u ON u.user_id = t.customer_id "
            "WHERE t.ticket_id = :id"
        )
        return self._fetch_one(sql, {"id": self._to_raw_id(ticket_id)})

    def count_by_statuses(self, statuses: list[str]) -> int:
        """Count tickets whose status is any of *statuses*."""
        if not statuses:
            return 0
        binds = {f"st_{i}": status for i, status in enumerate(statuses)}
        placeholders = ", ".join(f":{name}" for name in binds)
        sql = f"SELECT COUNT(*) AS cnt FROM tickets WHERE status IN ({placeholders})"
        value = self._fetch_scalar(sql, binds)
        return int(value) if value is not None else 0

    def find_resolved_within(self, days: int) -> list[dict[str, Any]]:
        """Return ``created_at``/``resolved_at`` of tickets resolved and opened in the last *days*."""
        sql = (
            "SELECT created_at, resolved_at FROM tickets "
            "WHERE resolved_at IS NOT NULL "
            f"AND created_at >= {DB_NOW} - NUMTODSINTERVAL(:days, 'DAY')"
        )
        return self._fetch_all(sql, {"days": days})

    def find_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        """Most recent tickets with customer and agent names."""
        sql = (
            "SELECT t.ticket_id, t.ticket_number, t.subject, t.status, t.priority, "
            "t.created_at, c.name AS customer_name, c.email AS customer_email, "
            "a.name AS agent_name "
            "FROM tickets t "
            "LEFT JOIN users c ON c.user_id = t.customer_id "
            "LEFT JOIN users a ON a.user_id = t.assigned_agent_id "
            "ORDER BY t.created_at DESC FETCH FIRST :lim ROWS ONLY"
        )
        return self._fetch_all(sql, {"lim": limit})
