"""Application tests for the event-driven welcome and order status triggers."""

from datetime import UTC, datetime, timedelta

from notifications.audience.identity_events import IdentityEventsHandler
from notifications.audience.ordering_events import OrderingEventsHandler
from notifications.notification.notification import Notification, NotificationSource
from notifications.notification.scheduler import ProcessScheduledNotifications
from notifications.trigger.trigger import TriggerConfig, TriggerType
from protean import current_domain
from shared.events.identity import CustomerRegistered
from shared.events.ordering import OrderCreated, OrderStatusChanged


def _configure(trigger_type, title, message, **overrides):
    trigger = TriggerConfig.configure(
        trigger_type=trigger_type, title_template=title, message_template=message, **overrides
    )
    current_domain.repository_for(TriggerConfig).add(trigger)
    return trigger


def _register(customer_id="cust-1", email="nadia@example.com", first_name="Nadia", last_name="Islam"):
    IdentityEventsHandler().on_customer_registered(
        CustomerRegistered(
            customer_id=customer_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            registered_at=datetime.now(UTC),
        )
    )


def _personal(user_id):
    return current_domain.repository_for(Notification)._dao.query.filter(user_id=user_id).all().items


class TestWelcomeTrigger:
    def test_no_config_no_notification(self):
        _register()
        assert _personal("cust-1") == []

    def test_welcome_notification(self):
        _configure(TriggerType.WELCOME.value, "Welcome, {{customer_name}}!", "Enjoy 10% off your first order")
        _register()

        records = _personal("cust-1")
        assert len(records) == 1
        assert records[0].title == "Welcome, Nadia Islam!"
        assert records[0].is_sent is True
        assert records[0].source == NotificationSource.TRIGGER_WELCOME.value

    def test_welcome_email_uses_welcome_template(self, email):
        _configure(
            TriggerType.WELCOME.value,
            "Welcome, {{customer_name}}!",
            "Enjoy 10% off your first order",
            send_email=True,
        )
        _register()

        sent = email.sent_to("nadia@example.com")
        assert len(sent) == 1
        assert sent[0]["subject"] == "Welcome, Nadia Islam!"
        assert "Enjoy 10% off" in sent[0]["body"]

    def test_inactive_welcome(self):
        _configure(TriggerType.WELCOME.value, "Welcome!", "Hello", is_active=False)
        _register()
        assert _personal("cust-1") == []

    def test_duplicate_registration_is_ignored(self):
        _configure(TriggerType.WELCOME.value, "Welcome!", "Hello")
        _register()
        _register()
        assert len(_personal("cust-1")) == 1


class TestOrderStatusTrigger:
    def _order(self, order_id="ord-1", customer_id="cust-1"):
        OrderingEventsHandler().on_order_created(
            OrderCreated(
                order_id=order_id,
                customer_id=customer_id,
                order_number="ORD-1001",
                grand_total=3500.0,
                created_at=datetime.now(UTC),
            )
        )

    def _status(self, new_status="shipped", order_id="ord-1", **overrides):
        OrderingEventsHandler().on_order_status_changed(
            OrderStatusChanged(
                order_id=order_id,
                new_status=new_status,
                changed_at=datetime.now(UTC),
                **overrides,
            )
        )

    def test_status_change_notifies_customer(self):
        _configure(TriggerType.ORDER_STATUS.value, "Order {{order_number}}", "Your order is now {{status}}")
        self._order()
        self._status("shipped")

        records = _personal("cust-1")
        assert len(records) == 1
        assert records[0].title == "Order ORD-1001"
        assert records[0].message == "Your order is now shipped"
        assert records[0].notification_type == "order"
        assert records[0].link == "/account/orders"

    def test_unknown_order_uses_event_customer(self):
        _configure(TriggerType.ORDER_STATUS.value, "Order {{order_number}}", "Now {{status}}")
        self._status("delivered", order_id="ord-x", customer_id="cust-9", order_number="ORD-2002")
        assert _personal("cust-9")[0].title == "Order ORD-2002"

    def test_no_customer_no_notification(self):
        _configure(TriggerType.ORDER_STATUS.value, "Order {{order_number}}", "Now {{status}}")
        self._status("delivered", order_id="ord-x")
        assert current_domain.repository_for(Notification)._dao.query.all().items == []

    def test_delay_schedules_the_notification(self, email, seed_customer):
        seed_customer("cust-1", email="rahim@example.com", full_name="Rahim")
        _configure(
            TriggerType.ORDER_STATUS.value,
            "Order {{order_number}}",
            "Hi {{customer_name}}, your order is {{status}}",
            delay_minutes=30,
            send_email=True,
        )
        self._order()
        self._status("processing")

        record = _personal("cust-1")[0]
        assert record.is_sent is False
        assert record.scheduled_at is not None
        assert email.sent_emails == []

        current_domain.process(
            ProcessScheduledNotifications(as_of=datetime.now(UTC) + timedelta(minutes=31)),
            asynchronous=False,
        )

        sent = email.sent_to("rahim@example.com")
        assert len(sent) == 1
        assert sent[0]["subject"] == "Order ORD-1001"
        assert "Track your order" in sent[0]["body"]

    def test_oldest_active_config_wins(self):
        _configure(TriggerType.ORDER_STATUS.value, "First {{status}}", "first")
        _configure(TriggerType.ORDER_STATUS.value, "Second {{status}}", "second")
        self._order()
        self._status("shipped")
        assert _personal("cust-1")[0].title == "First shipped"
