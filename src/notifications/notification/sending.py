"""SendNotification command + handler — the admin composer's "send"."""

from notifications.domain import notifications
from notifications.notification.notification import (
    Notification,
    NotificationSource,
    NotificationType,
    TargetSegment,
)
from protean.fields import Boolean, DateTime, Dict, Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="Notification")
class SendNotification:
    """Send a notification now, or schedule it when ``scheduled_at`` is given."""

    title: String(required=True, max_length=255)
    message: Text(required=True)
    notification_type: String(choices=NotificationType, default=NotificationType.INFO.value)
    link: String(max_length=500)
    image_url: String(max_length=1000)
    is_global: Boolean(default=True)
    user_id: Identifier()
    target_segment: String(choices=TargetSegment, default=TargetSegment.ALL.value)
    target_criteria: Dict()
    scheduled_at: DateTime()
    send_email: Boolean(default=False)


@notifications.command_handler(part_of=Notification)
class SendNotificationHandler:
    @handle(SendNotification)
    def send_notification(self, command: SendNotification):
        notification = Notification.create(
            title=command.title,
            message=command.message,
            notification_type=command.notification_type,
            is_global=command.is_global,
            user_id=command.user_id,
            link=command.link,
            image_url=command.image_url,
            scheduled_at=command.scheduled_at,
            send_email=command.send_email,
            target_segment=command.target_segment,
            target_criteria=command.target_criteria,
            source=NotificationSource.ADMIN.value,
        )
        current_domain.repository_for(Notification).add(notification)
        return str(notification.id)
