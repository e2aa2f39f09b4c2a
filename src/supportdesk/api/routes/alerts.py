"""Alert routes — summary counters for the header bell."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from supportdesk.api.auth_context import AuthContext
from supportdesk.api.deps import require_session
from supportdesk.core.constants import ALERT_SEVERITIES

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("/summary")
def alerts_summary(ctx: AuthContext = Depends(require_session)) -> dict[str, Any]:
    """No alert source is wired up yet, so every counter is zero."""
    summary: dict[str, int] = {"total": 0, "unread": 0}
    summary.update({severity: 0 for severity in ALERT_SEVERITIES})
    return {"summary": summary, "alerts": []}
