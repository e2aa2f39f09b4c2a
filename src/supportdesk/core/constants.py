"""Domain constants for SupportDesk."""

from __future__ import annotations

# ── User Roles ──────────────────────────────────────────────────────
ROLE_ADMIN = "ADMIN"
ROLE_AGENT = "AGENT"
ROLE_CUSTOMER = "CUSTOMER"
USER_ROLES: list[str] = [ROLE_ADMIN, ROLE_AGENT, ROLE_CUSTOMER]

# ── Tickets ─────────────────────────────────────────────────────────
TICKET_STATUSES: list[str] = ["NEW", "OPEN", "IN_PROGRESS", "PENDING", "RESOLVED", "CLOSED"]
OPEN_TICKET_STATUSES: list[str] = ["NEW", "OPEN", "IN_PROGRESS"]
TICKET_PRIORITIES: list[str] = ["LOW", "NORMAL", "HIGH", "URGENT"]

RESOLUTION_WINDOW_DAYS = 30
RECENT_TICKETS_LIMIT = 10

# ── Notification Types ──────────────────────────────────────────────
NOTIFICATION_TYPES: list[str] = [
    "TICKET_ASSIGNED",
    "TICKET_UPDATED",
    "TICKET_REPLY",
    "TICKET_STATUS_CHANGED",
    "TICKET_MENTION",
    "SLA_BREACH",
    "PRIORITY_ESCALATION",
    "FACEBOOK_MESSAGE",
    "FACEBOOK_COMMENT",
    "FACEBOOK_POST",
]

# Types that go out by email when the user has no stored preference
DEFAULT_EMAIL_TYPES: frozenset[str] = frozenset(
    {"TICKET_ASSIGNED", "TICKET_REPLY", "TICKET_STATUS_CHANGED"}
)

# Types delivered on every channel even during quiet hours
URGENT_NOTIFICATION_TYPES: frozenset[str] = frozenset({"SLA_BREACH", "PRIORITY_ESCALATION"})

# ── Delivery ────────────────────────────────────────────────────────
CHANNEL_IN_APP = "IN_APP"
CHANNEL_EMAIL = "EMAIL"
CHANNEL_PUSH = "PUSH"
DELIVERY_CHANNELS: list[str] = [CHANNEL_IN_APP, CHANNEL_EMAIL, CHANNEL_PUSH]

EMAIL_DIGESTS: list[str] = ["REALTIME", "HOURLY", "DAILY", "WEEKLY"]

# ── Pages ───────────────────────────────────────────────────────────
SIGNIN_PATH = "/auth/signin"

# ── Alerts ──────────────────────────────────────────────────────────
ALERT_SEVERITIES: list[str] = ["critical", "warning", "info"]
