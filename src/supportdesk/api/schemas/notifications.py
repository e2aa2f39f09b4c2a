"""Notification request/response schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from supportdesk.api.schemas.common import PaginationMeta


class UnreadCountResponse(BaseModel):
    count: int = Field(ge=0)


class MarkAllReadResponse(BaseModel):
    success: bool = True
    count: int = Field(ge=0)


class NotificationListResponse(BaseModel):
    """Page of notifications plus the unread counter for the same scope."""

    items: list[dict[str, Any]]
    pagination: PaginationMeta
    unread_count: int = Field(ge=0)


class BatchReadRequest(BaseModel):
    """Mark several notifications as read in one call."""

    model_config = ConfigDict(populate_by_name=True)

    notification_ids: list[str] | None = Field(default=None, alias="notificationIds")
    read: bool = True


class PreferenceUpdate(BaseModel):
    """Partial update of one (user, type) preference row."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    notification_type: str | None = Field(default=None, alias="notificationType")
    in_app_enabled: bool | None = Field(default=None, alias="inAppEnabled")
    email_enabled: bool | None = Field(default=None, alias="emailEnabled")
    push_enabled: bool | None = Field(default=None, alias="pushEnabled")
    email_digest: str | None = Field(default=None, alias="emailDigest")
    quiet_hours_enabled: bool | None = Field(default=None, alias="quietHoursEnabled")
    quiet_hours_start: str | None = Field(
        default=None, alias="quietHoursStart", pattern=r"^([01]\d|2[0-3]):[0-5]\d$"
    )
    quiet_hours_end: str | None = Field(
        default=None, alias="quietHoursEnd", pattern=r"^([01]\d|2[0-3]):[0-5]\d$"
    )

    def updates(self) -> dict[str, Any]:
        """Changed fields keyed by their wire (camelCase) names."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data.pop("notificationType", None)
        return data


class NotificationCreate(BaseModel):
    """Body of ``POST /internal/create-notification``."""

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    title: str | None = None
    message: str | None = None
    user_id: str | None = Field(default=None, alias="userId")
    ticket_id: str | None = Field(default=None, alias="ticketId")
    actor_id: str | None = Field(default=None, alias="actorId")
    metadata: dict[str, Any] | None = None
    channels: list[str] | None = None

    def missing_required(self) -> bool:
        return not (self.type and self.title and self.message and self.user_id)
