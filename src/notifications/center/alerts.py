"""Device alerts raised by the notification center: sound and local push."""

from abc import ABC, abstractmethod

import structlog
from notifications.realtime.hub import InboxItem

logger = structlog.get_logger(__name__)


class Alerts(ABC):
    @abstractmethod
    def play_sound(self, item: InboxItem) -> None: ...

    @abstractmethod
    def show_push(self, item: InboxItem) -> None: ...


class LoggingAlerts(Alerts):
    """Headless default: alerts are logged, nothing is played."""

    def play_sound(self, item: InboxItem) -> None:
        logger.debug("Notification sound", notification_id=item.id)

    def show_push(self, item: InboxItem) -> None:
        logger.debug("Local push shown", notification_id=item.id, title=item.title)


class RecordingAlerts(Alerts):
    """Records alerts for test assertions."""

    def __init__(self):
        self.sounds: list[InboxItem] = []
        self.pushes: list[InboxItem] = []

    def play_sound(self, item: InboxItem) -> None:
        self.sounds.append(item)

    def show_push(self, item: InboxItem) -> None:
        self.pushes.append(item)

    def reset(self):
        self.sounds.clear()
        self.pushes.clear()
