"""ProcessScheduledNotifications command + handler — release due notifications.

Invoked by cron (``manage.py process-scheduled``) or the maintenance
endpoint. Each run claims at most ``MAX_BATCH`` due notifications, oldest
first. A notification is claimed by setting ``is_sent`` before any email is
attempted, so a later run never sends the same batch again.
"""

from datetime import UTC, datetime

import structlog
from notifications.audience.segments import SegmentResolutionError, SegmentResolver
from notifications.domain import notifications
from notifications.notification.delivery import FanOutResult, fan_out_email, recipients_for
from notifications.notification.notification import Notification, as_naive_utc
from notifications.utils.query import iterate_all
from protean.fields import DateTime
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)

MAX_BATCH = 100


@notifications.command(part_of="Notification")
class ProcessScheduledNotifications:
    """Request to process all due scheduled notifications."""

    as_of: DateTime()  # Optional: process as of this time (defaults to now)


def due_notifications(as_of: datetime, limit: int = MAX_BATCH) -> list[Notification]:
    """Unsent notifications whose ``scheduled_at`` has elapsed, oldest first."""
    query = current_domain.repository_for(Notification)._dao.query.filter(is_sent=False)
    due = [n for n in iterate_all(query) if n.is_due(as_of)]
    due.sort(key=lambda n: (as_naive_utc(n.scheduled_at), as_naive_utc(n.created_at)))
    return due[:limit]


@notifications.command_handler(part_of=Notification)
class ProcessScheduledNotificationsHandler:
    @handle(ProcessScheduledNotifications)
    def process_scheduled(self, command: ProcessScheduledNotifications):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(Notification)
        resolver = SegmentResolver()

        processed_ids = []
        emails_sent = 0

        for notification in due_notifications(as_of):
            try:
                # Claim first: once is_sent is persisted the record is never picked again
                notification.mark_sent()
                repo.add(notification)
                processed_ids.append(str(notification.id))

                if not notification.send_email:
                    continue

                try:
                    recipients = recipients_for(notification, resolver)
                except SegmentResolutionError as exc:
                    logger.error(
                        "Segment resolution failed, email skipped",
                        notification_id=str(notification.id),
                        segment=notification.target_segment,
                        error=str(exc),
                    )
                    continue

                result: FanOutResult = fan_out_email(notification, recipients)
                notification.record_delivery(result.sent, failed=result.failed, skipped=result.skipped)
                repo.add(notification)
                emails_sent += result.sent
            except Exception as e:
                logger.error(
                    "Scheduled notification dispatch failed",
                    notification_id=str(notification.id),
                    error=str(e),
                )

        logger.info(
            "Scheduled notifications processed",
            count=len(processed_ids),
            emails_sent=emails_sent,
            as_of=str(as_of),
        )

        return {"count": len(processed_ids), "emailsSent": emails_sent, "ids": processed_ids}
