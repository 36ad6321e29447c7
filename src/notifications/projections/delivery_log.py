"""DeliveryLog: one row per per-recipient channel attempt.

Rows are written by ``notifications.channel.attempt.DeliveryAttempt`` as the
attempt moves from Pending to its outcome, so a failed or skipped email can be
traced back to its notification and recipient.
"""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, String


@notifications.projection
class DeliveryLog:
    attempt_id: Identifier(identifier=True, required=True)
    notification_id: Identifier()
    channel: String(required=True, max_length=20)
    recipient: String(required=True, max_length=254)
    subject: String(max_length=500)
    status: String(required=True, max_length=20)
    provider_message_id: String(max_length=255)
    failure_reason: String(max_length=500)
    attempted_at: DateTime(required=True)
    completed_at: DateTime()
