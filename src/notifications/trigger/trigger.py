"""TriggerConfig aggregate — admin configuration for one automated trigger.

A trigger turns a storefront condition (an idle cart, a restock, an order
status change, a sign-up) into a notification. Its title and message are
templates over the variables that trigger type can supply.
"""

from datetime import UTC, datetime
from enum import Enum

import structlog
from notifications.domain import notifications
from notifications.notification.notification import as_naive_utc
from notifications.templates.renderer import TemplateRenderer
from notifications.trigger.events import (
    TriggerActivated,
    TriggerConfigured,
    TriggerDeactivated,
    TriggerUpdated,
)
from notifications.utils.query import iterate_all
from protean.fields import Boolean, DateTime, Integer, String, Text
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


class TriggerType(Enum):
    ABANDONED_CART = "abandoned_cart"
    ORDER_STATUS = "order_status"
    RESTOCK = "restock"
    WELCOME = "welcome"


_EDITABLE_FIELDS = ("title_template", "message_template", "delay_minutes", "send_email", "send_push")


@notifications.aggregate
class TriggerConfig:
    trigger_type: String(choices=TriggerType, required=True)
    is_active: Boolean(default=True)
    delay_minutes: Integer(default=0, min_value=0)
    title_template: String(required=True, max_length=255)
    message_template: Text(required=True)
    send_email: Boolean(default=False)
    send_push: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def configure(
        cls,
        trigger_type,
        title_template,
        message_template,
        delay_minutes=0,
        send_email=False,
        send_push=False,
        is_active=True,
    ):
        renderer = TemplateRenderer(trigger_type)
        renderer.validate(title_template, "title_template")
        renderer.validate(message_template, "message_template")

        now = datetime.now(UTC)
        trigger = cls(
            trigger_type=trigger_type,
            is_active=is_active,
            delay_minutes=delay_minutes or 0,
            title_template=title_template,
            message_template=message_template,
            send_email=send_email,
            send_push=send_push,
            created_at=now,
            updated_at=now,
        )
        trigger.raise_(
            TriggerConfigured(
                trigger_id=str(trigger.id),
                trigger_type=trigger_type,
                is_active=trigger.is_active,
                delay_minutes=trigger.delay_minutes,
                send_email=bool(send_email),
                configured_at=now,
            )
        )
        return trigger

    def update(self, **changes):
        """Apply the non-None changes; templates are re-validated."""
        changes = {k: v for k, v in changes.items() if k in _EDITABLE_FIELDS and v is not None}
        if not changes:
            return

        renderer = TemplateRenderer(self.trigger_type)
        for field in ("title_template", "message_template"):
            if field in changes:
                renderer.validate(changes[field], field)

        for field, value in changes.items():
            setattr(self, field, value)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            TriggerUpdated(
                trigger_id=str(self.id),
                trigger_type=self.trigger_type,
                changed_fields=",".join(sorted(changes)),
                updated_at=now,
            )
        )

    def activate(self):
        if self.is_active:
            return
        now = datetime.now(UTC)
        self.is_active = True
        self.updated_at = now
        self.raise_(TriggerActivated(trigger_id=str(self.id), trigger_type=self.trigger_type, activated_at=now))

    def deactivate(self):
        if not self.is_active:
            return
        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(TriggerDeactivated(trigger_id=str(self.id), trigger_type=self.trigger_type, deactivated_at=now))

    def render(self, context: dict) -> tuple[str, str]:
        """Render (title, message) for this trigger from ``context``."""
        renderer = TemplateRenderer(self.trigger_type)
        return renderer.render(self.title_template, context), renderer.render(self.message_template, context)


def active_trigger_for(trigger_type: str) -> TriggerConfig | None:
    """Return the single active config consulted for ``trigger_type``.

    The oldest-created active config wins; newer active duplicates are ignored.
    """
    query = current_domain.repository_for(TriggerConfig)._dao.query.filter(trigger_type=trigger_type, is_active=True)
    active = sorted(iterate_all(query), key=lambda t: (as_naive_utc(t.created_at), str(t.id)))
    if not active:
        return None

    if len(active) > 1:
        logger.warning(
            "Multiple active trigger configs, using the oldest",
            trigger_type=trigger_type,
            used=str(active[0].id),
            ignored=[str(t.id) for t in active[1:]],
        )
    return active[0]
