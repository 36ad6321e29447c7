"""In-process realtime feed of newly released notifications.

Each open notification center holds a ``Subscription``: an explicit queue it
drains on its own schedule. Closing the subscription unsubscribes it.
Personal notifications are only queued for their owner.

The hub does not cross processes. With async event processing the publisher
runs in the Engine, so centers served by the API process only pick those
notifications up on their next feed fetch.
"""

import queue
import threading
from dataclasses import dataclass
from datetime import datetime

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InboxItem:
    """A notification as the notification center sees it."""

    id: str
    title: str
    message: str
    notification_type: str
    created_at: datetime
    link: str | None = None
    image_url: str | None = None
    is_global: bool = True
    user_id: str | None = None
    is_read: bool = False
    is_ab_test: bool = False
    variant_id: str | None = None
    parent_id: str | None = None

    @classmethod
    def from_notification(cls, notification) -> "InboxItem":
        return cls(
            id=str(notification.id),
            title=notification.title,
            message=notification.message or "",
            notification_type=notification.notification_type,
            created_at=notification.created_at,
            link=notification.link,
            image_url=notification.image_url,
            is_global=bool(notification.is_global),
            user_id=str(notification.user_id) if notification.user_id else None,
            is_read=bool(notification.is_read),
            is_ab_test=bool(notification.is_ab_test),
            variant_id=notification.variant_id,
            parent_id=str(notification.parent_id) if notification.parent_id else None,
        )

    @property
    def test_id(self) -> str | None:
        """The A/B test this item belongs to (variant A's id)."""
        if not self.is_ab_test:
            return None
        return self.parent_id or self.id


class Subscription:
    def __init__(self, hub: "RealtimeHub", user_id: str | None = None):
        self._hub = hub
        self.user_id = user_id
        self._queue: queue.Queue[InboxItem] = queue.Queue()
        self.closed = False

    def wants(self, item: InboxItem) -> bool:
        return item.is_global or (self.user_id is not None and item.user_id == self.user_id)

    def put(self, item: InboxItem):
        self._queue.put(item)

    def drain(self) -> list[InboxItem]:
        """Everything received since the last drain, oldest first."""
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    def get(self, timeout: float | None = None) -> InboxItem | None:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self):
        if not self.closed:
            self.closed = True
            self._hub.unsubscribe(self)


class RealtimeHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self, user_id: str | None = None) -> Subscription:
        subscription = Subscription(self, str(user_id) if user_id else None)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription):
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, item: InboxItem) -> int:
        with self._lock:
            targets = [s for s in self._subscriptions if s.wants(item)]
        for subscription in targets:
            subscription.put(item)
        logger.debug("Realtime notification published", notification_id=item.id, subscribers=len(targets))
        return len(targets)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def reset(self):
        with self._lock:
            self._subscriptions.clear()


_hub = RealtimeHub()


def get_hub() -> RealtimeHub:
    return _hub
