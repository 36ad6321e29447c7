"""Internal dispatch handler — emails notifications that are sent on creation.

Scheduled notifications are emailed by the scheduler when they fall due;
this handler covers the rest: records created with ``is_sent`` already set
and ``send_email`` requested.
"""

import structlog
from notifications.audience.segments import SegmentResolutionError
from notifications.domain import notifications
from notifications.notification.delivery import fan_out_email, recipients_for
from notifications.notification.events import NotificationCreated
from notifications.notification.notification import Notification
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.event_handler(part_of=Notification)
class NotificationDispatcher:
    """Fans out email for notifications sent immediately on creation."""

    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        if not event.is_sent:
            logger.info(
                "Notification is scheduled, skipping immediate dispatch",
                notification_id=str(event.notification_id),
                scheduled_at=str(event.scheduled_at),
            )
            return

        if not event.send_email:
            return

        repo = current_domain.repository_for(Notification)

        try:
            notification = repo.get(event.notification_id)
        except ObjectNotFoundError:
            logger.error(
                "Failed to load notification for dispatch",
                notification_id=str(event.notification_id),
            )
            return

        try:
            recipients = recipients_for(notification)
        except SegmentResolutionError as exc:
            logger.error(
                "Segment resolution failed, email skipped",
                notification_id=str(notification.id),
                segment=notification.target_segment,
                error=str(exc),
            )
            return

        result = fan_out_email(notification, recipients)
        notification.record_delivery(result.sent, failed=result.failed, skipped=result.skipped)
        repo.add(notification)
