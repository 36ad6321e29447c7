"""Domain events for the Notification aggregate."""

from notifications.domain import notifications
from protean.fields import Boolean, DateTime, Identifier, Integer, String


@notifications.event(part_of="Notification")
class NotificationCreated:
    """A notification was created, either sent immediately or scheduled."""

    __version__ = 1

    notification_id: Identifier(required=True)
    title: String(required=True)
    notification_type: String(required=True)
    is_global: Boolean(required=True)
    user_id: Identifier()
    target_segment: String()
    scheduled_at: DateTime()
    is_sent: Boolean(required=True)
    send_email: Boolean(default=False)
    source: String()
    is_ab_test: Boolean(default=False)
    variant_id: String()
    parent_id: Identifier()
    created_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationSent:
    """A scheduled notification was claimed by the scheduler and released."""

    __version__ = 1

    notification_id: Identifier(required=True)
    is_global: Boolean(required=True)
    user_id: Identifier()
    sent_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationDelivered:
    """Per-recipient channel fan-out for a notification completed."""

    __version__ = 1

    notification_id: Identifier(required=True)
    delivered: Integer(required=True)
    failed: Integer(default=0)
    skipped: Integer(default=0)
    delivered_count: Integer(required=True)
    recorded_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationOpened:
    """A recipient opened the notification."""

    __version__ = 1

    notification_id: Identifier(required=True)
    notification_type: String(required=True)
    variant_id: String()
    opened_count: Integer(required=True)
    opened_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationClicked:
    """A recipient followed the notification's link."""

    __version__ = 1

    notification_id: Identifier(required=True)
    notification_type: String(required=True)
    variant_id: String()
    clicked_count: Integer(required=True)
    clicked_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationRead:
    """The server-side read marker was set."""

    __version__ = 1

    notification_id: Identifier(required=True)
    read_by: Identifier()
    read_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationPurged:
    """An admin hard-deleted the notification."""

    __version__ = 1

    notification_id: Identifier(required=True)
    is_ab_test: Boolean(default=False)
    parent_id: Identifier()
    reason: String()
    purged_at: DateTime(required=True)
