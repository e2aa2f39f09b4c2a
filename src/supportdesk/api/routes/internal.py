"""Internal routes — service-to-service calls gated on ``x-internal-api-key``."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from supportdesk.api.deps import (
    get_app_settings,
    read_json_body,
    read_raw_body,
    require_internal_api_key,
    validate_body,
)
from supportdesk.api.errors import internal_error_response
from supportdesk.api.schemas.auth import AcknowledgmentRequest
from supportdesk.api.schemas.notifications import NotificationCreate
from supportdesk.core.config import Settings
from supportdesk.services.notifications import NotificationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/internal", tags=["internal"])
notification_router = APIRouter(prefix="/internal", tags=["internal"])


def _get_automation_service(settings: Settings):  # type: ignore[no-untyped-def]
    from supportdesk.core.database import get_pool
    from supportdesk.repositories.ticket_repository import TicketRepository
    from supportdesk.services.automation import AutomationService
    from supportdesk.services.email import EmailService

    return AutomationService(
        ticket_repo=TicketRepository(pool=get_pool()),
        email_service=EmailService.from_settings(settings),
        app_url=settings.app_url,
    )


def _get_notification_service(settings: Settings):  # type: ignore[no-untyped-def]
    from supportdesk.api.routes.notifications import _get_service

    return _get_service(settings)


def _in_reply_to(raw_body: bytes) -> str | None:
    """``inReplyTo`` from the optional body; an unreadable body counts as empty."""
    try:
        payload = json.loads(raw_body) if raw_body.strip() else {}
        return AcknowledgmentRequest.model_validate(payload).in_reply_to
    except ValueError:
        logger.warning("Ignoring unreadable send-acknowledgment body")
        return None


@router.post("/tickets/{ticket_id}/send-acknowledgment")
def send_acknowledgment(
    ticket_id: str,
    request: Request,
    _key: None = Depends(require_internal_api_key),
    raw_body: bytes = Depends(read_raw_body),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """Email the ticket's customer a receipt for their request."""
    in_reply_to = _in_reply_to(raw_body)
    try:
        _get_automation_service(settings).send_ticket_acknowledgment(ticket_id, in_reply_to)
    except Exception as exc:
        logger.exception("Error sending acknowledgment for ticket %s", ticket_id)
        return internal_error_response(request, exc, "Failed to send acknowledgment")
    return {"success": True}


@notification_router.post("/create-notification", status_code=201)
def create_notification(
    _key: None = Depends(require_internal_api_key),
    payload: Any = Depends(read_json_body),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Create a notification on behalf of another service and deliver it."""
    body = validate_body(NotificationCreate, payload)
    if body.missing_required():
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: type, title, message, userId",
        )

    try:
        notification = _get_notification_service(settings).create_notification(
            body.user_id,
            body.type,
            body.title,
            body.message,
            ticket_id=body.ticket_id,
            actor_id=body.actor_id,
            metadata=body.metadata,
            channels=body.channels,
        )
    except NotificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    return {"success": True, "notification": notification}
