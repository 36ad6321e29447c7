"""Application tests for trigger configuration commands."""

import pytest
from notifications.trigger.management import (
    ActivateTrigger,
    ConfigureTrigger,
    DeactivateTrigger,
    UpdateTrigger,
)
from notifications.trigger.trigger import TriggerConfig, active_trigger_for
from protean import current_domain
from protean.exceptions import ValidationError


def _configure(**overrides):
    defaults = {
        "trigger_type": "restock",
        "title_template": "{{product_name}} is back",
        "message_template": "Grab {{product_name}} now",
    }
    defaults.update(overrides)
    return current_domain.process(ConfigureTrigger(**defaults), asynchronous=False)


def _get(trigger_id):
    return current_domain.repository_for(TriggerConfig).get(trigger_id)


class TestConfigureTrigger:
    def test_configure(self):
        trigger_id = _configure(delay_minutes=15, send_email=True)
        trigger = _get(trigger_id)
        assert trigger.trigger_type == "restock"
        assert trigger.delay_minutes == 15
        assert trigger.send_email is True
        assert trigger.is_active is True

    def test_invalid_placeholder(self):
        with pytest.raises(ValidationError):
            _configure(message_template="{{cart_total}}")


class TestUpdateTrigger:
    def test_partial_update(self):
        trigger_id = _configure()
        current_domain.process(UpdateTrigger(trigger_id=trigger_id, delay_minutes=45), asynchronous=False)
        trigger = _get(trigger_id)
        assert trigger.delay_minutes == 45
        assert trigger.title_template == "{{product_name}} is back"

    def test_update_can_deactivate(self):
        trigger_id = _configure()
        current_domain.process(UpdateTrigger(trigger_id=trigger_id, is_active=False), asynchronous=False)
        assert _get(trigger_id).is_active is False

    def test_invalid_template_leaves_trigger_unchanged(self):
        trigger_id = _configure()
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateTrigger(trigger_id=trigger_id, title_template="{{order_number}}"),
                asynchronous=False,
            )
        assert _get(trigger_id).title_template == "{{product_name}} is back"


class TestActivation:
    def test_deactivate_and_activate(self):
        trigger_id = _configure()
        current_domain.process(DeactivateTrigger(trigger_id=trigger_id), asynchronous=False)
        assert active_trigger_for("restock") is None

        current_domain.process(ActivateTrigger(trigger_id=trigger_id), asynchronous=False)
        assert str(active_trigger_for("restock").id) == trigger_id

    def test_oldest_active_wins(self):
        oldest = _configure()
        _configure(title_template="Back: {{product_name}}")
        assert str(active_trigger_for("restock").id) == oldest
