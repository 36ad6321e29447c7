"""Shared BDD fixtures and step definitions for the Notifications domain."""

from datetime import UTC, datetime, timedelta

import pytest
from notifications.notification.events import (
    NotificationClicked,
    NotificationCreated,
    NotificationOpened,
    NotificationRead,
    NotificationSent,
)
from notifications.notification.notification import Notification
from notifications.recovery.abandoned_cart import AbandonedCart
from notifications.recovery.events import AbandonedCartRecovered, CartReminderSent
from notifications.trigger.events import TriggerActivated, TriggerDeactivated, TriggerUpdated
from notifications.trigger.trigger import TriggerConfig
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

_EVENT_CLASSES = {
    "NotificationCreated": NotificationCreated,
    "NotificationSent": NotificationSent,
    "NotificationOpened": NotificationOpened,
    "NotificationClicked": NotificationClicked,
    "NotificationRead": NotificationRead,
    "CartReminderSent": CartReminderSent,
    "AbandonedCartRecovered": AbandonedCartRecovered,
    "TriggerUpdated": TriggerUpdated,
    "TriggerActivated": TriggerActivated,
    "TriggerDeactivated": TriggerDeactivated,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def capture(error):
    """Run an action, storing any ValidationError in ``error``."""

    def _capture(action):
        try:
            action()
        except ValidationError as exc:
            error["exc"] = exc

    return _capture


# ---------------------------------------------------------------------------
# Given steps: notifications
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a global notification titled "{title}"'), target_fixture="notification")
def global_notification(title):
    n = Notification.create(title=title, message="Storewide update")
    n._events.clear()
    return n


@given(
    parsers.cfparse('a personal notification for customer "{customer_id}"'),
    target_fixture="notification",
)
def personal_notification(customer_id):
    n = Notification.create(title="Your order shipped", message="On its way", is_global=False, user_id=customer_id)
    n._events.clear()
    return n


@given(
    parsers.cfparse("a notification scheduled {minutes:d} minutes from now"),
    target_fixture="notification",
)
def scheduled_notification(minutes):
    n = Notification.create(
        title="Flash sale",
        message="Starts soon",
        scheduled_at=datetime.now(UTC) + timedelta(minutes=minutes),
    )
    n._events.clear()
    return n


# ---------------------------------------------------------------------------
# Given steps: carts and triggers
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('an abandoned cart "{cart_id}" with {count:d} items'),
    target_fixture="cart",
)
def abandoned_cart(cart_id, count):
    cart = AbandonedCart.track(
        cart_id=cart_id,
        items=[{"name": f"Item {i}", "price": 500.0, "quantity": 1} for i in range(count)],
        total_value=500.0 * count,
        email="shopper@example.com",
    )
    cart._events.clear()
    return cart


@given(parsers.cfparse('an active "{trigger_type}" trigger'), target_fixture="trigger")
def active_trigger(trigger_type):
    templates = {
        "abandoned_cart": ("{{customer_name}}, you left {{item_count}} items", "Total {{cart_total}}"),
        "restock": ("{{product_name}} is back", "Grab it before it is gone"),
        "order_status": ("Order {{order_number}}", "Now {{status}}"),
        "welcome": ("Welcome, {{customer_name}}", "Glad you are here"),
    }
    title, message = templates[trigger_type]
    trigger = TriggerConfig.configure(trigger_type=trigger_type, title_template=title, message_template=message)
    trigger._events.clear()
    return trigger


# ---------------------------------------------------------------------------
# Then steps: events and errors
# ---------------------------------------------------------------------------
def _raised(aggregate, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    return any(isinstance(e, event_cls) for e in aggregate._events)


@then(parsers.cfparse("a {event_type} event is raised on the notification"))
def notification_event_raised(notification, event_type):
    assert _raised(notification, event_type), (
        f"No {event_type} event found. Events: {[type(e).__name__ for e in notification._events]}"
    )


@then(parsers.cfparse("a {event_type} event is raised on the cart"))
def cart_event_raised(cart, event_type):
    assert _raised(cart, event_type)


@then(parsers.cfparse("a {event_type} event is raised on the trigger"))
def trigger_event_raised(trigger, event_type):
    assert _raised(trigger, event_type)


@then("no events are raised on the trigger")
def no_trigger_events(trigger):
    assert trigger._events == []


@then(parsers.cfparse('the action fails with a message containing "{text}"'))
def action_fails(error, text):
    assert error["exc"] is not None
    assert text in str(error["exc"].messages)
