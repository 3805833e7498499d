from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    from_email: str | None = None
    reply_to: str | None = None


@dataclass(frozen=True)
class MailResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


class Mailer:
    """Hand-off point for outgoing email.

    Delivery providers live outside this service; they implement ``send``
    and report failures through ``MailResult`` instead of raising.
    """

    def send(self, message: EmailMessage) -> MailResult:
        raise NotImplementedError


class DryRunMailer(Mailer):
    """Keeps messages in an in-memory outbox instead of delivering them."""

    def __init__(self, default_from: str = "") -> None:
        self.default_from = default_from
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> MailResult:
        if not message.to:
            return MailResult(success=False, error="Recipient is required")
        if message.from_email is None and self.default_from:
            message = EmailMessage(
                to=message.to,
                subject=message.subject,
                html=message.html,
                from_email=self.default_from,
                reply_to=message.reply_to or self.default_from,
            )
        self.outbox.append(message)
        message_id = f"dryrun-{uuid.uuid4().hex[:12]}"
        logger.info("Dry-run email %s to %s: %s", message_id, message.to, message.subject)
        return MailResult(success=True, message_id=message_id)
