"""Engagement commands + handlers — opens, clicks and read markers.

Opens and clicks feed the A/B metrics. Read markers are server-side and only
written for an authenticated recipient; anonymous read state stays on the
client.
"""

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification
from notifications.notification.purge import delete_notifications
from notifications.utils.query import iterate_all
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, List, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.command(part_of="Notification")
class RecordNotificationOpened:
    notification_id: Identifier(required=True)


@notifications.command(part_of="Notification")
class RecordNotificationClicked:
    notification_id: Identifier(required=True)


@notifications.command(part_of="Notification")
class MarkNotificationRead:
    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)


@notifications.command(part_of="Notification")
class MarkAllNotificationsRead:
    """Mark the recipient's currently-loaded unread notifications read."""

    user_id: Identifier(required=True)
    notification_ids: List(content_type=String)


@notifications.command(part_of="Notification")
class ClearGlobalNotifications:
    """Clear-all from the notification center: deletes every global record."""

    user_id: Identifier(required=True)


def _visible_notification(notification_id, user_id) -> Notification:
    notification = current_domain.repository_for(Notification).get(notification_id)
    if not notification.is_visible_to(user_id):
        raise ValidationError({"notification_id": ["Notification does not belong to this user"]})
    return notification


@notifications.command_handler(part_of=Notification)
class EngagementHandler:
    @handle(RecordNotificationOpened)
    def record_opened(self, command: RecordNotificationOpened):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        notification.record_open()
        repo.add(notification)
        return notification.opened_count

    @handle(RecordNotificationClicked)
    def record_clicked(self, command: RecordNotificationClicked):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        notification.record_click()
        repo.add(notification)
        return notification.clicked_count

    @handle(MarkNotificationRead)
    def mark_read(self, command: MarkNotificationRead):
        notification = _visible_notification(command.notification_id, command.user_id)
        notification.mark_read(read_by=command.user_id)
        current_domain.repository_for(Notification).add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command: MarkAllNotificationsRead):
        repo = current_domain.repository_for(Notification)
        marked = 0
        for notification_id in command.notification_ids or []:
            try:
                notification = _visible_notification(notification_id, command.user_id)
            except (ObjectNotFoundError, ValidationError):
                logger.info(
                    "Skipping notification in mark-all-read",
                    notification_id=str(notification_id),
                    user_id=str(command.user_id),
                )
                continue
            if notification.is_read:
                continue
            notification.mark_read(read_by=command.user_id)
            repo.add(notification)
            marked += 1
        return marked

    @handle(ClearGlobalNotifications)
    def clear_global(self, command: ClearGlobalNotifications):
        query = current_domain.repository_for(Notification)._dao.query.filter(is_global=True)
        deleted = delete_notifications(list(iterate_all(query)), reason=f"clear-all:{command.user_id}")
        logger.info("Global notifications cleared", user_id=str(command.user_id), deleted=deleted)
        return deleted
