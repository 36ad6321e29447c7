"""Server access for the notification center."""

from abc import ABC, abstractmethod

from notifications.notification.engagement import (
    ClearGlobalNotifications,
    MarkAllNotificationsRead,
    MarkNotificationRead,
    RecordNotificationClicked,
    RecordNotificationOpened,
)
from notifications.notification.feed import recent_feed
from notifications.realtime.hub import InboxItem
from protean.utils.globals import current_domain


class NotificationBackend(ABC):
    @abstractmethod
    def fetch_recent(self, user_id: str | None, limit: int, audience_key: str | None = None) -> list[InboxItem]: ...

    @abstractmethod
    def mark_read(self, notification_id: str, user_id: str) -> None: ...

    @abstractmethod
    def mark_all_read(self, user_id: str, notification_ids: list[str]) -> None: ...

    @abstractmethod
    def clear_global(self, user_id: str) -> None: ...

    @abstractmethod
    def record_open(self, notification_id: str) -> None: ...

    @abstractmethod
    def record_click(self, notification_id: str) -> None: ...


class DomainNotificationBackend(NotificationBackend):
    """Talks to the notifications domain in-process through its commands."""

    def fetch_recent(self, user_id, limit, audience_key=None):
        return [InboxItem.from_notification(n) for n in recent_feed(user_id, limit=limit, audience_key=audience_key)]

    def mark_read(self, notification_id, user_id):
        current_domain.process(MarkNotificationRead(notification_id=notification_id, user_id=user_id), asynchronous=False)

    def mark_all_read(self, user_id, notification_ids):
        current_domain.process(
            MarkAllNotificationsRead(user_id=user_id, notification_ids=list(notification_ids)),
            asynchronous=False,
        )

    def clear_global(self, user_id):
        current_domain.process(ClearGlobalNotifications(user_id=user_id), asynchronous=False)

    def record_open(self, notification_id):
        current_domain.process(RecordNotificationOpened(notification_id=notification_id), asynchronous=False)

    def record_click(self, notification_id):
        current_domain.process(RecordNotificationClicked(notification_id=notification_id), asynchronous=False)
