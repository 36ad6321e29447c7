"""Domain events for the AbandonedCart and RestockAlert aggregates."""

from notifications.domain import notifications
from protean.fields import DateTime, Float, Identifier, Integer, String


@notifications.event(part_of="AbandonedCart")
class AbandonedCartTracked:
    """A cart went idle (or idle again) and is eligible for reminders."""

    __version__ = 1

    cart_id: Identifier(required=True)
    user_id: Identifier()
    total_value: Float()
    item_count: Integer()
    tracked_at: DateTime(required=True)


@notifications.event(part_of="AbandonedCart")
class CartReminderSent:
    __version__ = 1

    cart_id: Identifier(required=True)
    user_id: Identifier()
    reminder_count: Integer(required=True)
    reminded_at: DateTime(required=True)


@notifications.event(part_of="AbandonedCart")
class AbandonedCartRecovered:
    __version__ = 1

    cart_id: Identifier(required=True)
    recovered_at: DateTime(required=True)


@notifications.event(part_of="RestockAlert")
class RestockAlertRequested:
    __version__ = 1

    alert_id: Identifier(required=True)
    product_id: Identifier(required=True)
    user_id: Identifier()
    email: String()
    requested_at: DateTime(required=True)


@notifications.event(part_of="RestockAlert")
class RestockAlertNotified:
    __version__ = 1

    alert_id: Identifier(required=True)
    product_id: Identifier(required=True)
    notified_at: DateTime(required=True)
