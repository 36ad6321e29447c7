"""Per-recipient delivery attempt: one email to one address.

State Machine:
    PENDING → SENT
    PENDING → FAILED    (adapter rejected the message or raised)
    PENDING → SKIPPED   (no adapter configured)

There is no retry inside a run; every outcome is written to DeliveryLog.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

import structlog
from notifications.channel.email_port import EmailPort
from notifications.projections.delivery_log import DeliveryLog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


class AttemptStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"
    SKIPPED = "Skipped"


_VALID_TRANSITIONS = {
    AttemptStatus.PENDING: {AttemptStatus.SENT, AttemptStatus.FAILED, AttemptStatus.SKIPPED},
    AttemptStatus.SENT: set(),  # Terminal
    AttemptStatus.FAILED: set(),  # Terminal
    AttemptStatus.SKIPPED: set(),  # Terminal
}


class DeliveryAttempt:
    channel = "email"

    def __init__(self, recipient: str, subject: str | None = None, notification_id=None):
        self.attempt_id = str(uuid4())
        self.recipient = recipient
        self.subject = subject
        self.notification_id = str(notification_id) if notification_id else None
        self.status = AttemptStatus.PENDING
        self.failure_reason: str | None = None
        self.provider_message_id: str | None = None
        self.attempted_at = datetime.now(UTC)
        self.completed_at: datetime | None = None

    def _transition_to(self, new_status: AttemptStatus):
        if new_status not in _VALID_TRANSITIONS[self.status]:
            raise ValidationError(
                {"status": [f"Cannot transition delivery attempt from {self.status.value} to {new_status.value}"]}
            )
        self.status = new_status
        self.completed_at = datetime.now(UTC)

    def mark_sent(self, provider_message_id=None):
        self._transition_to(AttemptStatus.SENT)
        self.provider_message_id = provider_message_id

    def mark_failed(self, reason: str):
        self._transition_to(AttemptStatus.FAILED)
        self.failure_reason = reason[:500]

    def mark_skipped(self, reason: str):
        self._transition_to(AttemptStatus.SKIPPED)
        self.failure_reason = reason

    @property
    def succeeded(self) -> bool:
        return self.status == AttemptStatus.SENT

    def send(self, adapter: EmailPort | None, body: str, html_body: str | None = None) -> AttemptStatus:
        """Run the attempt through ``adapter`` and record its outcome."""
        if adapter is None:
            self.mark_skipped("Email provider not configured")
            logger.info(
                "Email skipped, no provider configured",
                notification_id=self.notification_id,
                recipient=self.recipient,
            )
        else:
            try:
                result = adapter.send(to=self.recipient, subject=self.subject or "", body=body, html_body=html_body)
            except Exception as exc:
                self.mark_failed(str(exc) or exc.__class__.__name__)
            else:
                if result.get("status") == "sent":
                    self.mark_sent(result.get("message_id"))
                else:
                    self.mark_failed(result.get("error") or "Unknown delivery error")

            if self.status == AttemptStatus.FAILED:
                logger.warning(
                    "Email delivery failed",
                    notification_id=self.notification_id,
                    recipient=self.recipient,
                    error=self.failure_reason,
                )

        self._record()
        return self.status

    def _record(self):
        current_domain.repository_for(DeliveryLog).add(
            DeliveryLog(
                attempt_id=self.attempt_id,
                notification_id=self.notification_id,
                channel=self.channel,
                recipient=self.recipient,
                subject=self.subject,
                status=self.status.value,
                provider_message_id=self.provider_message_id,
                failure_reason=self.failure_reason,
                attempted_at=self.attempted_at,
                completed_at=self.completed_at,
            )
        )
