"""EngagementStats: daily sent/opened/clicked counts by notification type."""

from notifications.domain import notifications
from notifications.notification.events import (
    NotificationClicked,
    NotificationCreated,
    NotificationOpened,
    NotificationSent,
)
from notifications.notification.notification import Notification
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Integer, String
from protean.utils.globals import current_domain


@notifications.projection
class EngagementStats:
    stat_key: String(identifier=True, required=True)  # "YYYY-MM-DD:type"
    date: String(required=True, max_length=10)
    notification_type: String(required=True)
    sent: Integer(default=0)
    opened: Integer(default=0)
    clicked: Integer(default=0)
    updated_at: DateTime()


@notifications.projector(projector_for=EngagementStats, aggregates=[Notification])
class EngagementStatsProjector:
    def _bump(self, occurred_at, notification_type, counter):
        repo = current_domain.repository_for(EngagementStats)

        date_str = occurred_at.strftime("%Y-%m-%d")
        stat_key = f"{date_str}:{notification_type}"

        try:
            stat = repo.get(stat_key)
        except ObjectNotFoundError:
            stat = EngagementStats(stat_key=stat_key, date=date_str, notification_type=notification_type)

        setattr(stat, counter, (getattr(stat, counter) or 0) + 1)
        stat.updated_at = occurred_at
        repo.add(stat)

    @on(NotificationCreated)
    def on_notification_created(self, event):
        if event.is_sent:
            self._bump(event.created_at, event.notification_type, "sent")

    @on(NotificationSent)
    def on_notification_sent(self, event):
        try:
            notification_type = current_domain.repository_for(Notification).get(event.notification_id).notification_type
        except ObjectNotFoundError:
            return
        self._bump(event.sent_at, notification_type, "sent")

    @on(NotificationOpened)
    def on_notification_opened(self, event):
        self._bump(event.opened_at, event.notification_type, "opened")

    @on(NotificationClicked)
    def on_notification_clicked(self, event):
        self._bump(event.clicked_at, event.notification_type, "clicked")
