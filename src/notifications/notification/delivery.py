"""Email fan-out for a notification record.

Shared by the scheduler and the immediate dispatcher: resolve the
recipients (segment for broadcasts, the owner for personal records), render
the record's template per recipient and run one DeliveryAttempt each.
"""

from dataclasses import dataclass

import structlog
from notifications.audience.segments import RecipientContact, SegmentResolver
from notifications.channel import get_email_channel
from notifications.channel.attempt import AttemptStatus, DeliveryAttempt
from notifications.notification.notification import Notification
from notifications.preference.preference import email_allowed, topic_for
from notifications.templates import template_for

logger = structlog.get_logger(__name__)

OPTED_OUT = "Recipient opted out"


@dataclass
class FanOutResult:
    sent: int = 0
    failed: int = 0
    skipped: int = 0

    def count(self, status: AttemptStatus):
        if status == AttemptStatus.SENT:
            self.sent += 1
        elif status == AttemptStatus.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


def recipients_for(notification: Notification, resolver: SegmentResolver | None = None) -> list[RecipientContact]:
    """Raises SegmentResolutionError when a broadcast audience can't be resolved."""
    resolver = resolver or SegmentResolver()
    if notification.is_global:
        return resolver.resolve(notification.target_segment, notification.criteria)

    contact = resolver.resolve_user(notification.user_id)
    return [contact] if contact else []


def send_email(recipient: str, rendered: dict, notification_id=None) -> DeliveryAttempt:
    """Send one rendered email to one address through the configured adapter."""
    attempt = DeliveryAttempt(recipient=recipient, subject=rendered.get("subject"), notification_id=notification_id)
    attempt.send(get_email_channel(), body=rendered["body"], html_body=rendered.get("html_body"))
    return attempt


def skip_email(recipient: str, subject: str | None, reason: str, notification_id=None) -> DeliveryAttempt:
    """Log a recipient that was not emailed without calling the adapter."""
    attempt = DeliveryAttempt(recipient=recipient, subject=subject, notification_id=notification_id)
    attempt.mark_skipped(reason)
    attempt._record()
    return attempt


def fan_out_email(notification: Notification, recipients: list[RecipientContact]) -> FanOutResult:
    """One email per recipient; a failed recipient never stops the rest.

    Customers who switched off email, or this notification's topic, are
    logged as skipped.
    """
    result = FanOutResult()
    template_cls = template_for(notification)
    topic = topic_for(notification.notification_type, notification.source)

    for recipient in recipients:
        if not email_allowed(recipient.user_id, topic):
            attempt = skip_email(recipient.email, notification.title, OPTED_OUT, notification_id=notification.id)
            result.count(attempt.status)
            continue

        rendered = template_cls.render(
            {
                "title": notification.title,
                "message": notification.message,
                "link": notification.link,
                "image_url": notification.image_url,
                "recipient_name": recipient.display_name,
                "customer_name": recipient.display_name,
            }
        )
        attempt = send_email(recipient.email, rendered, notification_id=notification.id)
        result.count(attempt.status)

    logger.info(
        "Email fan-out complete",
        notification_id=str(notification.id),
        recipients=len(recipients),
        sent=result.sent,
        failed=result.failed,
        skipped=result.skipped,
    )
    return result
