"""Event-driven triggers: order status changes and customer sign-ups.

Unlike the batch triggers, these react to a single inbound event and produce
one personal notification. A configured delay becomes ``scheduled_at`` so
the scheduler releases it; email, when enabled, goes out at dispatch time
with the trigger's own email template.
"""

from datetime import UTC, datetime, timedelta

import structlog
from notifications.notification.notification import Notification, NotificationType
from notifications.preference.preference import email_allowed, topic_for
from notifications.trigger.trigger import TriggerType, active_trigger_for
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)

_NOTIFICATION_TYPES = {
    TriggerType.ORDER_STATUS.value: NotificationType.ORDER.value,
    TriggerType.WELCOME.value: NotificationType.INFO.value,
}

_LINKS = {
    TriggerType.ORDER_STATUS.value: "/account/orders",
    TriggerType.WELCOME.value: "/",
}


def fire_personal_trigger(trigger_type: str, user_id, context: dict, now: datetime | None = None) -> str | None:
    """Create the trigger's notification for ``user_id``; None when inactive."""
    config = active_trigger_for(trigger_type)
    if config is None:
        logger.debug("No active trigger config", trigger_type=trigger_type)
        return None

    now = now or datetime.now(UTC)
    title, message = config.render(context)
    scheduled_at = now + timedelta(minutes=config.delay_minutes) if config.delay_minutes else None

    notification_type = _NOTIFICATION_TYPES[trigger_type]
    source = f"trigger:{trigger_type}"
    # Checked again by the fan-out at dispatch time
    send_email = bool(config.send_email) and email_allowed(user_id, topic_for(notification_type, source))

    notification = Notification.create(
        title=title,
        message=message,
        notification_type=notification_type,
        is_global=False,
        user_id=str(user_id),
        link=_LINKS[trigger_type],
        scheduled_at=scheduled_at,
        send_email=send_email,
        source=source,
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Trigger notification created",
        trigger_type=trigger_type,
        user_id=str(user_id),
        notification_id=str(notification.id),
        scheduled_at=str(scheduled_at) if scheduled_at else None,
    )
    return str(notification.id)
