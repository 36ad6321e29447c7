"""PurgeNotification command + handler — admin hard delete.

Purging an A/B parent removes its variant B as well; a variant B can only go
together with its parent.
"""

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification
from notifications.utils.query import iterate_all
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.command(part_of="Notification")
class PurgeNotification:
    notification_id: Identifier(required=True)


def variants_of(parent: Notification) -> list[Notification]:
    query = current_domain.repository_for(Notification)._dao.query.filter(parent_id=str(parent.id))
    return list(iterate_all(query))


def delete_notifications(records: list[Notification], reason: str = "admin") -> int:
    """Hard-delete ``records``, children before parents."""
    repo = current_domain.repository_for(Notification)
    ordered = sorted(records, key=lambda n: n.parent_id is None)
    for notification in ordered:
        notification.purge(reason=reason)
        repo.add(notification)  # publishes NotificationPurged
        repo._dao.delete(notification)
    return len(ordered)


def purge_with_variants(notification: Notification, reason: str = "admin") -> int:
    if notification.is_ab_test and notification.parent_id:
        raise ValidationError(
            {"notification_id": ["A/B variant B cannot be deleted on its own; delete the test (variant A) instead"]}
        )

    records = [notification]
    if notification.is_ab_parent:
        records = variants_of(notification) + records

    deleted = delete_notifications(records, reason=reason)
    logger.info("Notification purged", notification_id=str(notification.id), deleted=deleted, reason=reason)
    return deleted


@notifications.command_handler(part_of=Notification)
class PurgeNotificationHandler:
    @handle(PurgeNotification)
    def purge_notification(self, command: PurgeNotification):
        notification = current_domain.repository_for(Notification).get(command.notification_id)
        return purge_with_variants(notification)
