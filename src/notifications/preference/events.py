"""Domain events for the NotificationPreference aggregate."""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, String


@notifications.event(part_of="NotificationPreference")
class PreferencesCreated:
    """Default preferences were created for a customer."""

    __version__ = 1

    preference_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    created_at: DateTime(required=True)


@notifications.event(part_of="NotificationPreference")
class PreferencesUpdated:
    """A customer switched one or more channels or topics on or off."""

    __version__ = 1

    preference_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    changed_fields: String()  # comma-separated field names
    updated_at: DateTime(required=True)
