"""Domain events for the TriggerConfig aggregate."""

from notifications.domain import notifications
from protean.fields import Boolean, DateTime, Identifier, Integer, String


@notifications.event(part_of="TriggerConfig")
class TriggerConfigured:
    """An automated trigger was configured."""

    __version__ = 1

    trigger_id: Identifier(required=True)
    trigger_type: String(required=True)
    is_active: Boolean(required=True)
    delay_minutes: Integer(required=True)
    send_email: Boolean(default=False)
    configured_at: DateTime(required=True)


@notifications.event(part_of="TriggerConfig")
class TriggerUpdated:
    """A trigger's templates, delay or channel flags changed."""

    __version__ = 1

    trigger_id: Identifier(required=True)
    trigger_type: String(required=True)
    changed_fields: String()  # comma-separated field names
    updated_at: DateTime(required=True)


@notifications.event(part_of="TriggerConfig")
class TriggerActivated:
    __version__ = 1

    trigger_id: Identifier(required=True)
    trigger_type: String(required=True)
    activated_at: DateTime(required=True)


@notifications.event(part_of="TriggerConfig")
class TriggerDeactivated:
    __version__ = 1

    trigger_id: Identifier(required=True)
    trigger_type: String(required=True)
    deactivated_at: DateTime(required=True)
