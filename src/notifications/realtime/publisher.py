"""Realtime publisher: pushes released notifications to open centers."""

import structlog
from notifications.domain import notifications
from notifications.notification.events import NotificationCreated, NotificationSent
from notifications.notification.notification import Notification
from notifications.realtime.hub import InboxItem, get_hub
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.event_handler(part_of=Notification)
class RealtimePublisher:
    """Publishes a notification once it is visible: on creation if sent, else when the scheduler releases it."""

    def _publish(self, notification_id):
        try:
            notification = current_domain.repository_for(Notification).get(notification_id)
        except ObjectNotFoundError:
            logger.warning("Released notification not found", notification_id=str(notification_id))
            return
        get_hub().publish(InboxItem.from_notification(notification))

    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        if event.is_sent:
            self._publish(event.notification_id)

    @handle(NotificationSent)
    def on_notification_sent(self, event: NotificationSent) -> None:
        self._publish(event.notification_id)
