"""Domain tests for the TriggerConfig aggregate."""

import pytest
from notifications.trigger.events import (
    TriggerActivated,
    TriggerConfigured,
    TriggerDeactivated,
    TriggerUpdated,
)
from notifications.trigger.trigger import TriggerConfig, TriggerType
from protean.exceptions import ValidationError


def _cart_trigger(**overrides):
    defaults = {
        "trigger_type": TriggerType.ABANDONED_CART.value,
        "title_template": "{{customer_name}}, your cart is waiting",
        "message_template": "You left {{item_count}} items worth {{cart_total}}",
        "delay_minutes": 60,
        "send_email": True,
    }
    defaults.update(overrides)
    return TriggerConfig.configure(**defaults)


class TestConfigure:
    def test_configure(self):
        trigger = _cart_trigger()
        assert trigger.is_active is True
        assert trigger.delay_minutes == 60
        assert trigger.send_email is True
        assert any(isinstance(e, TriggerConfigured) for e in trigger._events)

    def test_unknown_placeholder_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _cart_trigger(title_template="{{product_name}} is waiting")
        assert "title_template" in exc.value.messages

    def test_unknown_trigger_type_rejected(self):
        with pytest.raises(ValidationError):
            _cart_trigger(trigger_type="birthday")

    def test_negative_delay_rejected(self):
        with pytest.raises(ValidationError):
            _cart_trigger(delay_minutes=-5)

    def test_inactive_on_creation(self):
        assert _cart_trigger(is_active=False).is_active is False


class TestUpdate:
    def test_update_changes_fields(self):
        trigger = _cart_trigger()
        trigger._events.clear()
        trigger.update(delay_minutes=120, send_email=False)
        assert trigger.delay_minutes == 120
        assert trigger.send_email is False
        event = next(e for e in trigger._events if isinstance(e, TriggerUpdated))
        assert event.changed_fields == "delay_minutes,send_email"

    def test_none_values_are_ignored(self):
        trigger = _cart_trigger()
        trigger._events.clear()
        trigger.update(title_template=None)
        assert trigger.title_template == "{{customer_name}}, your cart is waiting"
        assert trigger._events == []

    def test_update_revalidates_templates(self):
        trigger = _cart_trigger()
        with pytest.raises(ValidationError):
            trigger.update(message_template="{{order_number}}")

    def test_trigger_type_is_not_editable(self):
        trigger = _cart_trigger()
        trigger.update(trigger_type=TriggerType.RESTOCK.value)
        assert trigger.trigger_type == TriggerType.ABANDONED_CART.value


class TestActivation:
    def test_deactivate_and_activate(self):
        trigger = _cart_trigger()
        trigger.deactivate()
        assert trigger.is_active is False
        trigger.activate()
        assert trigger.is_active is True
        assert any(isinstance(e, TriggerDeactivated) for e in trigger._events)
        assert any(isinstance(e, TriggerActivated) for e in trigger._events)

    def test_activate_active_is_noop(self):
        trigger = _cart_trigger()
        trigger._events.clear()
        trigger.activate()
        assert trigger._events == []


class TestRender:
    def test_render_title_and_message(self):
        title, message = _cart_trigger().render({"customer_name": "Rahim", "item_count": 2, "cart_total": "৳1,500"})
        assert title == "Rahim, your cart is waiting"
        assert message == "You left 2 items worth ৳1,500"
