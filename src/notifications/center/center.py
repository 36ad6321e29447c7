"""NotificationCenter: the storefront's notification bell, headless.

Holds the recent notifications for one recipient (signed in or anonymous),
merges server and local read state, applies the device's per-type
preferences, and consumes the realtime feed through an explicit
subscription.

Read state: an item is read if the server says so or its id is in the local
read set. Marking read always writes the local set and writes the server
only when a user is signed in.

Clear-all empties the visible list and the local read set, and for a signed
in user deletes every *global* server notification; personal notifications
disappear from view but stay on the server.
"""

import structlog
from notifications.center.alerts import Alerts, LoggingAlerts
from notifications.center.backend import NotificationBackend
from notifications.center.store import LocalStore, NotificationPreferences
from notifications.experiment.ab_test import assign_variant
from notifications.realtime.hub import InboxItem, RealtimeHub, Subscription
from protean.exceptions import ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)

FETCH_LIMIT = 20
PUSH_GRANTED = "granted"


class NotificationCenter:
    def __init__(
        self,
        backend: NotificationBackend,
        store: LocalStore,
        hub: RealtimeHub,
        user_id: str | None = None,
        alerts: Alerts | None = None,
        push_permission: str = "default",
    ):
        self.backend = backend
        self.store = store
        self.hub = hub
        self.user_id = str(user_id) if user_id else None
        self.alerts = alerts or LoggingAlerts()
        self.push_permission = push_permission
        self.items: list[InboxItem] = []
        self._subscription: Subscription | None = None

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    @property
    def audience_key(self) -> str:
        return self.user_id or self.store.get_device_id()

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def mount(self):
        self.items = [
            item
            for item in self.backend.fetch_recent(self.user_id, FETCH_LIMIT, audience_key=self.audience_key)
            if self._shows_variant(item)
        ]
        self._subscription = self.hub.subscribe(self.user_id)
        logger.debug("Notification center mounted", user_id=self.user_id, loaded=len(self.items))

    def unmount(self):
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def pump(self) -> list[InboxItem]:
        """Consume pending realtime notifications; returns the ones accepted."""
        if self._subscription is None:
            return []

        accepted = []
        preferences = self.preferences
        for item in self._subscription.drain():
            if not self._shows_variant(item) or any(existing.id == item.id for existing in self.items):
                continue

            self.items.insert(0, item)
            accepted.append(item)

            if not preferences.is_enabled(item.notification_type):
                continue
            if preferences.sound_enabled:
                self.alerts.play_sound(item)
            if self.push_permission == PUSH_GRANTED and preferences.push_enabled:
                self.alerts.show_push(item)

        return accepted

    def _shows_variant(self, item: InboxItem) -> bool:
        if not item.is_ab_test:
            return True
        return assign_variant(item.test_id, self.audience_key) == item.variant_id

    # -------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------
    @property
    def preferences(self) -> NotificationPreferences:
        return self.store.get_preferences()

    @property
    def visible_items(self) -> list[InboxItem]:
        preferences = self.preferences
        return [item for item in self.items if preferences.is_enabled(item.notification_type)]

    def is_read(self, item: InboxItem, read_ids: set[str] | None = None) -> bool:
        read_ids = self.store.get_read_ids() if read_ids is None else read_ids
        return item.is_read or item.id in read_ids

    @property
    def unread_count(self) -> int:
        read_ids = self.store.get_read_ids()
        return sum(1 for item in self.visible_items if not self.is_read(item, read_ids))

    def mark_read(self, notification_id: str):
        read_ids = self.store.get_read_ids()
        read_ids.add(notification_id)
        self.store.set_read_ids(read_ids)

        if self.user_id:
            self._sync("mark_read", self.backend.mark_read, notification_id, self.user_id)

    def mark_all_read(self):
        read_ids = self.store.get_read_ids()
        unread = [item.id for item in self.items if not self.is_read(item, read_ids)]
        self.store.set_read_ids(read_ids | set(unread))

        if self.user_id and unread:
            self._sync("mark_all_read", self.backend.mark_all_read, self.user_id, unread)

    def clear_all(self):
        self.items = []
        self.store.set_read_ids(set())

        if self.user_id:
            self._sync("clear_global", self.backend.clear_global, self.user_id)

    # -------------------------------------------------------------------
    # Engagement
    # -------------------------------------------------------------------
    def open(self, notification_id: str):
        self.mark_read(notification_id)
        self._sync("record_open", self.backend.record_open, notification_id)

    def follow_link(self, notification_id: str) -> str | None:
        """Record a click and return the link to navigate to."""
        item = next((i for i in self.items if i.id == notification_id), None)
        self._sync("record_click", self.backend.record_click, notification_id)
        return item.link if item else None

    def _sync(self, action, call, *args):
        """Run a server write; a rejection is logged and local state stands."""
        try:
            call(*args)
        except (ObjectNotFoundError, ValidationError) as exc:
            logger.warning("Notification center sync failed", action=action, user_id=self.user_id, error=str(exc))

    # -------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------
    def set_type_enabled(self, notification_type: str, enabled: bool):
        self._update_preferences(**{notification_type: enabled})

    def set_sound_enabled(self, enabled: bool):
        self._update_preferences(sound_enabled=enabled)

    def set_push_enabled(self, enabled: bool):
        self._update_preferences(push_enabled=enabled)

    def _update_preferences(self, **changes):
        data = self.preferences.to_dict()
        data.update(changes)
        self.store.set_preferences(NotificationPreferences.from_dict(data))
