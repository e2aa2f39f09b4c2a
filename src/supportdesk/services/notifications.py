"""Notification service — unread counts, read tracking, creation and delivery.

All read/unread queries are limited to a :class:`NotificationScope`:
the user, optionally narrowed to one store. Store narrowing is ignored for
customers, who only ever see their own tickets anyway.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from supportdesk.core.constants import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_PUSH,
    DEFAULT_EMAIL_TYPES,
    DELIVERY_CHANNELS,
    EMAIL_DIGESTS,
    NOTIFICATION_TYPES,
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    URGENT_NOTIFICATION_TYPES,
)
from supportdesk.repositories.notification_repository import NotificationScope
from supportdesk.services.email import EmailError

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised on notification operation failures."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


# Preference columns a client may change
PREFERENCE_FIELDS: dict[str, str] = {
    "inAppEnabled": "in_app_enabled",
    "emailEnabled": "email_enabled",
    "pushEnabled": "push_enabled",
    "emailDigest": "email_digest",
    "quietHoursEnabled": "quiet_hours_enabled",
    "quietHoursStart": "quiet_hours_start",
    "quietHoursEnd": "quiet_hours_end",
}

_BOOLEAN_PREFERENCES = frozenset(
    {"in_app_enabled", "email_enabled", "push_enabled", "quiet_hours_enabled"}
)


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":", 1)
    return int(hours) * 60 + int(minutes)


def is_quiet_hours(start: str | None, end: str | None, now: datetime) -> bool:
    """Return True when *now* falls inside the ``HH:MM`` window [start, end].

    A window whose start is later than its end wraps past midnight.
    """
    if not start or not end:
        return False
    current = now.hour * 60 + now.minute
    start_min = _minutes(start)
    end_min = _minutes(end)
    if start_min <= end_min:
        return start_min <= current <= end_min
    return current >= start_min or current <= end_min


class NotificationService:
    """Service for notification counters, read state, and delivery."""

    def __init__(
        self,
        notification_repo: Any,
        user_repo: Any,
        preference_repo: Any | None = None,
        email_service: Any | None = None,
        dev_mode: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.notification_repo = notification_repo
        self.user_repo = user_repo
        self.preference_repo = preference_repo
        self.email_service = email_service
        self.dev_mode = dev_mode
        # Server-local time, used for quiet hours only
        self._clock = clock or (lambda: datetime.now().astimezone())

    # ── Scope ────────────────────────────────────────────────────

    def resolve_scope(self, user_id: str, store_id: str | None = None) -> NotificationScope:
        """Build the query scope for *user_id*, narrowed to *store_id* if allowed."""
        if not user_id or not isinstance(user_id, str):
            raise NotificationError("Invalid user session", 401)

        user = self.user_repo.find_by_id(user_id)
        created_since = user.get("created_at") if user else None
        role = user.get("role") if user else None

        effective_store = store_id if store_id and role != ROLE_CUSTOMER else None
        return NotificationScope(
            user_id=user_id,
            store_id=effective_store,
            created_since=created_since,
        )

    # ── Counters ─────────────────────────────────────────────────

    def get_unread_count(self, user_id: str, store_id: str | None = None) -> int:
        """Count unread notifications for a user, optionally per store."""
        scope = self.resolve_scope(user_id, store_id)
        return max(0, int(self.notification_repo.count_unread(scope) or 0))

    def mark_all_as_read(self, user_id: str, store_id: str | None = None) -> int:
        """Mark every unread notification in scope as read; return how many changed.

        Notifications created after this call starts are left unread.
        """
        scope = self.resolve_scope(user_id, store_id)
        changed = max(0, int(self.notification_repo.mark_all_read(scope) or 0))
        logger.info(
            "Marked %d notification(s) read for user %s (store=%s)",
            changed,
            user_id,
            scope.store_id or "*",
        )
        return changed

    # ── Listing ──────────────────────────────────────────────────

    def get_user_notifications(
        self,
        user_id: str,
        *,
        is_read: bool | None = None,
        notification_type: str | None = None,
        store_id: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict[str, Any]:
        """Get paginated notifications for a user."""
        if notification_type and notification_type not in NOTIFICATION_TYPES:
            raise NotificationError(f"Invalid type: {notification_type}", 400)

        scope = self.resolve_scope(user_id, store_id)
        offset = (page - 1) * limit
        items = self.notification_repo.find_in_scope(
            scope,
            is_read=is_read,
            notification_type=notification_type,
            limit=limit,
            offset=offset,
        )
        total = self.notification_repo.count_in_scope(
            scope, is_read=is_read, notification_type=notification_type
        )
        unread = self.notification_repo.count_unread(scope)
        total_pages = max(1, (total + limit - 1) // limit)

        return {
            "items": [self._decode_metadata(item) for item in items],
            "pagination": {
                "page": page,
                "limit": limit,
                "total_items": total,
                "total_pages": total_pages,
            },
            "unread_count": max(0, int(unread or 0)),
        }

    # ── Single / batch read ──────────────────────────────────────

    def mark_as_read(self, notification_id: str, user_id: str) -> dict[str, Any]:
        """Mark one notification as read."""
        notification = self.notification_repo.find_by_id(notification_id)
        if not notification:
            raise NotificationError("Notification not found", 404)

        if notification.get("user_id") != user_id:
            raise NotificationError("Not authorized to access this notification", 403)

        if notification.get("is_read") == 1:
            return {"notification_id": notification_id, "is_read": True, "already_read": True}

        if not self.notification_repo.mark_read(notification_id):
            return {"notification_id": notification_id, "is_read": True, "already_read": True}
        return {"notification_id": notification_id, "is_read": True}

    def mark_many_as_read(self, notification_ids: list[str], user_id: str) -> int:
        """Mark each listed notification as read; stops at the first failure."""
        changed = 0
        for notification_id in notification_ids:
            result = self.mark_as_read(notification_id, user_id)
            if not result.get("already_read"):
                changed += 1
        return changed

    def delete_notification(self, notification_id: str, user_id: str, role: str) -> None:
        """Delete a notification. Administrators only, and only their own."""
        if role != ROLE_ADMIN:
            raise NotificationError("Only administrators can delete notifications", 403)

        notification = self.notification_repo.find_by_id(notification_id)
        if not notification or notification.get("user_id") != user_id:
            raise NotificationError("Notification not found or unauthorized", 404)

        self.notification_repo.delete(notification_id)
        logger.info("Deleted notification %s", notification_id)

    # ── Creation & delivery ──────────────────────────────────────

    def create_notification(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        *,
        ticket_id: str | None = None,
        actor_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        channels: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create an in-app notification and deliver it on the chosen channels.

        When *channels* is not given they are derived from the user's stored
        preferences for this notification type.
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise NotificationError(
                f"Invalid type: {notification_type}. Valid: {NOTIFICATION_TYPES}",
                400,
            )
        if channels is not None:
            unknown = [c for c in channels if c not in DELIVERY_CHANNELS]
            if unknown:
                raise NotificationError(f"Unknown channel(s): {', '.join(unknown)}", 400)

        notification_id = uuid.uuid4().hex
        data: dict[str, Any] = {
            "user_id": user_id,
            "ticket_id": ticket_id,
            "actor_id": actor_id,
            "notification_type": notification_type,
            "title": title,
            "message": message,
            "metadata": json.dumps(metadata) if metadata else None,
            "is_read": 0,
            "email_sent": 0,
        }
        self.notification_repo.create(data=data, new_id=notification_id)

        selected = channels or self.determine_channels(user_id, notification_type)
        result: dict[str, Any] = {
            "notification_id": notification_id,
            **data,
            "metadata": metadata or {},
            "channels": selected,
        }

        if CHANNEL_EMAIL in selected and self._deliver_email(user_id, title, message):
            self.notification_repo.update(notification_id, data={"email_sent": 1})
            result["email_sent"] = 1

        logger.info(
            "Created notification %s for user %s via %s: %s",
            notification_id,
            user_id,
            ",".join(selected),
            title,
        )
        return result

    def determine_channels(
        self,
        user_id: str,
        notification_type: str,
        now: datetime | None = None,
    ) -> list[str]:
        """Pick delivery channels for one notification from stored preferences."""
        channels = [CHANNEL_IN_APP]
        preference = (
            self.preference_repo.find_one(user_id, notification_type)
            if self.preference_repo is not None
            else None
        )

        if not preference:
            if notification_type in DEFAULT_EMAIL_TYPES:
                channels.append(CHANNEL_EMAIL)
            return channels

        if preference.get("quiet_hours_enabled") and is_quiet_hours(
            preference.get("quiet_hours_start"),
            preference.get("quiet_hours_end"),
            now or self._clock(),
        ):
            if notification_type not in URGENT_NOTIFICATION_TYPES:
                return [CHANNEL_IN_APP]

        if preference.get("email_enabled"):
            if preference.get("email_digest", "REALTIME") == "REALTIME":
                channels.append(CHANNEL_EMAIL)
            else:
                logger.info(
                    "Deferring %s for user %s to %s digest",
                    notification_type,
                    user_id,
                    preference.get("email_digest"),
                )

        if preference.get("push_enabled"):
            channels.append(CHANNEL_PUSH)

        return channels

    def _deliver_email(self, user_id: str, subject: str, body: str) -> bool:
        """Send the notification email. Returns True when it went out."""
        user = self.user_repo.find_by_id(user_id)
        email = user.get("email") if user else None
        if not email:
            logger.warning("User %s has no email address; skipping email", user_id)
            return False

        if self.email_service:
            try:
                self.email_service.send_notification(to=email, subject=subject, body=body)
            except EmailError:
                logger.exception("Email delivery to user %s failed", user_id)
                return False
            return True
        if self.dev_mode:
            logger.info("[DEV EMAIL] To: %s | Subject: %s | Body: %s", email, subject, body[:200])
            return True
        return False

    # ── Preferences ──────────────────────────────────────────────

    def get_preferences(self, user_id: str) -> list[dict[str, Any]]:
        """Return the stored preferences of a user, one per notification type."""
        if self.preference_repo is None:
            return []
        return [
            {
                "notificationType": p.get("notification_type"),
                "inAppEnabled": bool(p.get("in_app_enabled")),
                "emailEnabled": bool(p.get("email_enabled")),
                "pushEnabled": bool(p.get("push_enabled")),
                "emailDigest": p.get("email_digest"),
                "quietHoursEnabled": bool(p.get("quiet_hours_enabled")),
                "quietHoursStart": p.get("quiet_hours_start") or None,
                "quietHoursEnd": p.get("quiet_hours_end") or None,
            }
            for p in self.preference_repo.find_by_user(user_id)
        ]

    def update_preference(
        self,
        user_id: str,
        notification_type: str,
        updates: dict[str, Any],
    ) -> dict[str, Any]:
        """Create or update the preference row for (user, type)."""
        if self.preference_repo is None:
            raise NotificationError("Preferences are not available", 503)
        if notification_type not in NOTIFICATION_TYPES:
            raise NotificationError(f"Invalid type: {notification_type}", 400)

        data: dict[str, Any] = {}
        for key, value in updates.items():
            column = PREFERENCE_FIELDS.get(key)
            if column is None:
                raise NotificationError(f"Unknown preference field: {key}", 400)
            if column in _BOOLEAN_PREFERENCES:
                value = 1 if value else 0
            data[column] = value

        digest = data.get("email_digest")
        if digest is not None and digest not in EMAIL_DIGESTS:
            raise NotificationError(f"Invalid email digest: {digest}", 400)

        existing = self.preference_repo.find_one(user_id, notification_type)
        if existing:
            if data:
                self.preference_repo.update(existing["preference_id"], data=data)
            return {**existing, **data}

        row = {"user_id": user_id, "notification_type": notification_type, **data}
        preference_id = self.preference_repo.create(data=row)
        return {"preference_id": preference_id, **row}

    @staticmethod
    def _decode_metadata(item: dict[str, Any]) -> dict[str, Any]:
        raw = item.get("metadata")
        if isinstance(raw, str) and raw:
            try:
                return {**item, "metadata": json.loads(raw)}
            except json.JSONDecodeError:
                logger.warning("Unreadable metadata on notification %s", item.get("notification_id"))
        return {**item, "metadata": raw or {}}
