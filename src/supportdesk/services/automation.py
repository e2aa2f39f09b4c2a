"""Ticket automation triggered by internal service calls."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class AutomationService:
    """Side effects run on behalf of other services (acknowledgments, etc.)."""

    def __init__(self, ticket_repo: Any, email_service: Any, app_url: str) -> None:
        self.ticket_repo = ticket_repo
        self.email_service = email_service
        self.app_url = app_url.rstrip("/")

    def send_ticket_acknowledgment(self, ticket_id: str, in_reply_to: str | None = None) -> bool:
        """Email the customer that their ticket was created.

        Returns False without sending when the ticket does not exist or its
        customer has no email address.
        """
        ticket = self.ticket_repo.find_with_customer(ticket_id)
        if not ticket or not ticket.get("customer_email"):
            logger.info("No acknowledgment sent for ticket %s (ticket or email missing)", ticket_id)
            return False

        self.email_service.send_ticket_acknowledgment(
            to=ticket["customer_email"],
            ticket_number=ticket.get("ticket_number") or ticket_id,
            subject=ticket.get("subject") or "",
            ticket_url=f"{self.app_url}/tickets/{ticket_id}",
            in_reply_to=in_reply_to,
        )
        logger.info("Acknowledgment sent for ticket %s", ticket_id)
        return True
