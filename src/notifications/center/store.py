"""Client-local state for the notification center.

The read-ID set and the display preferences live on the device, behind a
narrow store interface so the center never touches ambient storage.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from uuid import uuid4

NOTIFICATION_TYPES = ("info", "product", "order", "promo")


@dataclass
class NotificationPreferences:
    info: bool = True
    product: bool = True
    order: bool = True
    promo: bool = True
    sound_enabled: bool = True
    push_enabled: bool = True

    def is_enabled(self, notification_type: str) -> bool:
        # Types the device doesn't know about are shown
        return getattr(self, notification_type, True) if notification_type in NOTIFICATION_TYPES else True

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> "NotificationPreferences":
        known = {f.name for f in fields(cls)}
        return cls(**{k: bool(v) for k, v in (data or {}).items() if k in known})


class LocalStore(ABC):
    @abstractmethod
    def get_read_ids(self) -> set[str]: ...

    @abstractmethod
    def set_read_ids(self, read_ids: set[str]) -> None: ...

    @abstractmethod
    def get_preferences(self) -> NotificationPreferences: ...

    @abstractmethod
    def set_preferences(self, preferences: NotificationPreferences) -> None: ...

    @abstractmethod
    def get_device_id(self) -> str:
        """A stable anonymous id for this device, created on first use."""


class InMemoryLocalStore(LocalStore):
    def __init__(self, read_ids=None, preferences: NotificationPreferences | None = None, device_id: str | None = None):
        self._read_ids = set(read_ids or ())
        self._preferences = preferences or NotificationPreferences()
        self._device_id = device_id or uuid4().hex

    def get_read_ids(self) -> set[str]:
        return set(self._read_ids)

    def set_read_ids(self, read_ids: set[str]) -> None:
        self._read_ids = set(read_ids)

    def get_preferences(self) -> NotificationPreferences:
        return NotificationPreferences.from_dict(self._preferences.to_dict())

    def set_preferences(self, preferences: NotificationPreferences) -> None:
        self._preferences = NotificationPreferences.from_dict(preferences.to_dict())

    def get_device_id(self) -> str:
        return self._device_id


class JsonFileLocalStore(LocalStore):
    """Persists local state as one JSON document on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}

    def _save(self, **changes) -> None:
        data = self._load()
        data.update(changes)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get_read_ids(self) -> set[str]:
        return set(self._load().get("read_ids", []))

    def set_read_ids(self, read_ids: set[str]) -> None:
        self._save(read_ids=sorted(read_ids))

    def get_preferences(self) -> NotificationPreferences:
        return NotificationPreferences.from_dict(self._load().get("preferences"))

    def set_preferences(self, preferences: NotificationPreferences) -> None:
        self._save(preferences=preferences.to_dict())

    def get_device_id(self) -> str:
        device_id = self._load().get("device_id")
        if not device_id:
            device_id = uuid4().hex
            self._save(device_id=device_id)
        return device_id
