"""Admin dashboard aggregates."""

from __future__ import annotations

from typing import Any

from supportdesk.core.constants import (
    OPEN_TICKET_STATUSES,
    RECENT_TICKETS_LIMIT,
    RESOLUTION_WINDOW_DAYS,
    ROLE_AGENT,
    ROLE_CUSTOMER,
)


def average_resolution_hours(tickets: list[dict[str, Any]]) -> float:
    """Mean hours from creation to resolution; 0 for an empty list."""
    durations = [
        (t["resolved_at"] - t["created_at"]).total_seconds()
        for t in tickets
        if t.get("resolved_at") and t.get("created_at")
    ]
    if not durations:
        return 0.0
    return round(sum(durations) / len(durations) / 3600, 2)


class DashboardService:
    def __init__(self, ticket_repo: Any, user_repo: Any) -> None:
        self.ticket_repo = ticket_repo
        self.user_repo = user_repo

    def get_overview(self) -> dict[str, Any]:
        """Counters, resolution time over the last 30 days, and recent tickets."""
        stats = {
            "totalTickets": self.ticket_repo.count(),
            "openTickets": self.ticket_repo.count_by_statuses(OPEN_TICKET_STATUSES),
            "resolvedTickets": self.ticket_repo.count(filters={"status": "RESOLVED"}),
            "totalUsers": self.user_repo.count(),
            "totalAgents": self.user_repo.count_by_role(ROLE_AGENT),
            "totalCustomers": self.user_repo.count_by_role(ROLE_CUSTOMER),
            "averageResolutionTime": average_resolution_hours(
                self.ticket_repo.find_resolved_within(RESOLUTION_WINDOW_DAYS)
            ),
        }
        return {
            "stats": stats,
            "recentTickets": self.ticket_repo.find_recent(limit=RECENT_TICKETS_LIMIT),
        }
