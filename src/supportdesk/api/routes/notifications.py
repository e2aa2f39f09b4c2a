"""Notification routes — counters, read state, listing and preferences.

The notification service mounts everything under ``/notifications``; the
web app exposes the two counters it needs under ``/api/notifications``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from supportdesk.api.auth_context import AuthContext
from supportdesk.api.deps import get_app_settings, read_json_body, require_session, validate_body
from supportdesk.api.errors import internal_error_response
from supportdesk.api.schemas.notifications import (
    BatchReadRequest,
    MarkAllReadResponse,
    NotificationListResponse,
    PreferenceUpdate,
    UnreadCountResponse,
)
from supportdesk.core.config import Settings
from supportdesk.services.notifications import NotificationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])
web_router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _get_service(settings: Settings):  # type: ignore[no-untyped-def]
    """Build NotificationService with real repositories."""
    from supportdesk.core.database import get_pool
    from supportdesk.repositories.notification_repository import (
        NotificationPreferenceRepository,
        NotificationRepository,
    )
    from supportdesk.repositories.user_repository import UserRepository
    from supportdesk.services.email import EmailService
    from supportdesk.services.notifications import NotificationService

    pool = get_pool()
    return NotificationService(
        notification_repo=NotificationRepository(pool=pool),
        user_repo=UserRepository(pool=pool),
        preference_repo=NotificationPreferenceRepository(pool=pool),
        email_service=EmailService.from_settings(settings),
        dev_mode=not settings.is_production,
    )


# ── Counters ─────────────────────────────────────────────────────────


@router.get("/unread-count")
def get_unread_count(
    request: Request,
    ctx: AuthContext = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """Number of unread notifications, optionally for one store (``?storeId=``)."""
    try:
        count = _get_service(settings).get_unread_count(ctx.user_id, ctx.store_id)
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    except Exception as exc:
        logger.exception("Error fetching unread count for user %s", ctx.user_id)
        return internal_error_response(request, exc, "Failed to fetch unread count")
    return UnreadCountResponse(count=count)


@router.patch("/mark-all-read")
def mark_all_read(
    request: Request,
    ctx: AuthContext = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """Mark every unread notification in scope as read."""
    try:
        count = _get_service(settings).mark_all_as_read(ctx.user_id, ctx.store_id)
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    except Exception as exc:
        logger.exception("Error marking all as read for user %s", ctx.user_id)
        return internal_error_response(request, exc, "Failed to mark all as read")
    return MarkAllReadResponse(count=count)


web_router.add_api_route("/unread-count", get_unread_count, methods=["GET"])
web_router.add_api_route("/mark-all-read", mark_all_read, methods=["PATCH"])


# ── Listing & batch ──────────────────────────────────────────────────


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    read: bool | None = None,
    notification_type: str | None = Query(default=None, alias="type"),
    ctx: AuthContext = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Get the caller's notifications with optional read/type filters."""
    try:
        return _get_service(settings).get_user_notifications(
            ctx.user_id,
            is_read=read,
            notification_type=notification_type,
            store_id=ctx.store_id,
            page=page,
            limit=limit,
        )
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e


@router.patch("")
def mark_many_read(
    ctx: AuthContext = Depends(require_session),
    payload: Any = Depends(read_json_body),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Mark the listed notifications as read.

    ``"read": false`` is accepted and changes nothing; notifications are never
    marked unread.
    """
    body = validate_body(BatchReadRequest, payload)
    if body.notification_ids is None:
        raise HTTPException(status_code=400, detail="notificationIds array is required")
    if not body.read:
        return {"success": True, "count": 0}

    try:
        count = _get_service(settings).mark_many_as_read(body.notification_ids, ctx.user_id)
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    return {"success": True, "count": count}


# ── Preferences ──────────────────────────────────────────────────────


@router.get("/preferences")
def get_preferences(
    ctx: AuthContext = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    return {"preferences": _get_service(settings).get_preferences(ctx.user_id)}


@router.patch("/preferences")
def update_preferences(
    ctx: AuthContext = Depends(require_session),
    payload: Any = Depends(read_json_body),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Create or update the caller's preference for one notification type."""
    body = validate_body(PreferenceUpdate, payload)
    if not body.notification_type:
        raise HTTPException(status_code=400, detail="notificationType is required")

    try:
        preference = _get_service(settings).update_preference(
            ctx.user_id, body.notification_type, body.updates()
        )
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    return {"success": True, "preference": preference}


# ── Single notification ──────────────────────────────────────────────


@router.patch("/{notification_id}")
def mark_as_read(
    notification_id: str,
    ctx: AuthContext = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Mark a notification as read."""
    try:
        return _get_service(settings).mark_as_read(notification_id, ctx.user_id)
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    ctx: AuthContext = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Delete one of the caller's notifications (administrators only)."""
    try:
        _get_service(settings).delete_notification(notification_id, ctx.user_id, ctx.role)
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    return {"success": True}
