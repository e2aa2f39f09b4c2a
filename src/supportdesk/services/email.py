"""Email service: console output in development, SMTP everywhere else."""

from __future__ import annotations

import logging
import smtplib
from email.mime.text import MIMEText
from typing import Any

from supportdesk.core.config import Settings

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when an email cannot be handed to the SMTP server."""


class EmailService:
    """Sends notification and acknowledgment emails.

    In dev mode messages are only logged. Otherwise they go out through the
    SMTP server configured by the ``SMTP_*`` settings.
    """

    def __init__(self, dev_mode: bool = True, settings: Settings | None = None) -> None:
        self.dev_mode = dev_mode
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailService:
        return cls(dev_mode=settings.is_development or settings.is_testing, settings=settings)

    def send_notification(self, to: str, subject: str, body: str) -> None:
        """Send a notification email."""
        self._send(to=to, subject=subject, body=body, metadata={"type": "notification"})

    def send_ticket_acknowledgment(
        self,
        to: str,
        ticket_number: str,
        subject: str,
        ticket_url: str,
        in_reply_to: str | None = None,
    ) -> None:
        """Confirm to a customer that their request became a ticket."""
        headers: dict[str, str] = {}
        if in_reply_to:
            headers = {"In-Reply-To": in_reply_to, "References": in_reply_to}
        self._send(
            to=to,
            subject=f"Thank you for contacting us - Ticket {ticket_number}",
            body=(
                "Thank you for contacting us!\n\n"
                f"We've received your support request and created ticket {ticket_number}.\n"
                f"Subject: {subject}\n\n"
                "Our support team will review your request and get back to you soon.\n"
                f"Track your ticket: {ticket_url}"
            ),
            metadata={"type": "ticket_acknowledgment", "headers": headers},
        )

    def _send(
        self,
        to: str,
        subject: str,
        body: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if self.dev_mode:
            logger.info(
                "[DEV EMAIL] To: %s | Subject: %s | Body: %s",
                to,
                subject,
                body[:200],
            )
            return
        self._send_smtp(to, subject, body, (metadata or {}).get("headers") or {})

    def _send_smtp(self, to: str, subject: str, body: str, headers: dict[str, str]) -> None:
        settings = self.settings
        if settings is None or not settings.smtp_host:
            raise EmailError("SMTP not configured")

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = settings.smtp_from
        msg["To"] = to
        for name, value in headers.items():
            msg[name] = value

        try:
            with smtplib.SMTP(
                settings.smtp_host,
                settings.smtp_port,
                timeout=settings.smtp_timeout_seconds,
            ) as server:
                if settings.smtp_use_tls:
                    server.starttls()
                if settings.smtp_user:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailError(f"Failed to send email to {to}: {e}") from e
        logger.info("Email sent to %s: %s", to, subject)
