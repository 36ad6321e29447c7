"""ProcessNotificationTriggers command + handler — the batch trigger run.

Invoked on a cadence (``manage.py process-triggers`` or the maintenance
endpoint). Each run consults the active abandoned-cart and restock configs,
notifies the rows that qualify and sets their completion flags. Flags are
never cleared here, so a row that was handled is not handled again.
"""

from datetime import UTC, datetime, timedelta

import structlog
from notifications.audience.segments import SegmentResolver
from notifications.domain import notifications
from notifications.notification.delivery import OPTED_OUT, send_email, skip_email
from notifications.notification.notification import (
    Notification,
    NotificationSource,
    NotificationType,
    as_naive_utc,
)
from notifications.preference.preference import Topic, email_allowed
from notifications.projections.product_snapshot import ProductSnapshot
from notifications.recovery.abandoned_cart import MAX_REMINDERS, AbandonedCart
from notifications.recovery.restock_alert import RestockAlert
from notifications.templates.cart_recovery import CartRecoveryTemplate
from notifications.templates.layout import money
from notifications.templates.restock import RestockTemplate
from notifications.trigger.trigger import TriggerConfig, TriggerType, active_trigger_for
from notifications.utils.query import iterate_all
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)

MAX_CARTS = 50
MAX_RESTOCK_ALERTS = 100
MIN_IDLE = timedelta(minutes=60)
REMINDER_INTERVAL = timedelta(hours=24)


@notifications.command(part_of="TriggerConfig")
class ProcessNotificationTriggers:
    """Run the abandoned-cart and restock triggers once."""

    as_of: DateTime()  # Optional: evaluate as of this time (defaults to now)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------
def carts_due_for_reminder(config: TriggerConfig, as_of: datetime, limit: int = MAX_CARTS) -> list[AbandonedCart]:
    """Idle, unrecovered carts whose next reminder is due, oldest first.

    A cart must have been idle for the larger of the trigger delay and one
    hour, and a repeat reminder waits a full day after the previous one.
    """
    idle_for = max(timedelta(minutes=config.delay_minutes or 0), MIN_IDLE)
    idle_cutoff = as_naive_utc(as_of - idle_for)
    repeat_cutoff = as_naive_utc(as_of - REMINDER_INTERVAL)

    query = current_domain.repository_for(AbandonedCart)._dao.query.filter(recovered=False, reminder_sent=False)
    due = [
        cart
        for cart in iterate_all(query)
        if (cart.reminder_count or 0) < MAX_REMINDERS
        and as_naive_utc(cart.updated_at) < idle_cutoff
        and (cart.last_reminder_at is None or as_naive_utc(cart.last_reminder_at) <= repeat_cutoff)
    ]
    due.sort(key=lambda cart: as_naive_utc(cart.updated_at))
    return due[:limit]


def pending_restock_alerts(limit: int = MAX_RESTOCK_ALERTS) -> list[RestockAlert]:
    """The oldest un-notified alerts. Stock is checked afterwards, per alert."""
    query = current_domain.repository_for(RestockAlert)._dao.query.filter(notified=False)
    alerts = sorted(iterate_all(query), key=lambda alert: as_naive_utc(alert.created_at))
    return alerts[:limit]


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------
@notifications.command_handler(part_of=TriggerConfig)
class TriggerEngineHandler:
    @handle(ProcessNotificationTriggers)
    def process_triggers(self, command: ProcessNotificationTriggers):
        as_of = command.as_of or datetime.now(UTC)
        resolver = SegmentResolver()
        summary = {"abandoned_carts": 0, "restock_alerts": 0, "emails_sent": 0}

        cart_config = active_trigger_for(TriggerType.ABANDONED_CART.value)
        if cart_config is not None:
            for cart in carts_due_for_reminder(cart_config, as_of):
                try:
                    summary["emails_sent"] += self._remind_cart(cart, cart_config, resolver, as_of)
                    summary["abandoned_carts"] += 1
                except Exception as e:
                    logger.error("Abandoned cart reminder failed", cart_id=str(cart.cart_id), error=str(e))

        restock_config = active_trigger_for(TriggerType.RESTOCK.value)
        if restock_config is not None:
            for alert in pending_restock_alerts():
                try:
                    notified, emailed = self._notify_restock(alert, restock_config, resolver, as_of)
                    summary["restock_alerts"] += notified
                    summary["emails_sent"] += emailed
                except Exception as e:
                    logger.error("Restock alert failed", alert_id=str(alert.id), error=str(e))

        logger.info("Notification triggers processed", as_of=str(as_of), **summary)
        return summary

    def _remind_cart(self, cart: AbandonedCart, config: TriggerConfig, resolver: SegmentResolver, as_of) -> int:
        profile = resolver.resolve_user(cart.user_id) if cart.user_id else None
        customer_name = profile.display_name if profile else None
        email = cart.email or (profile.email if profile else None)

        context = {
            "customer_name": customer_name or "there",
            "item_count": cart.item_count,
            "cart_total": money(cart.total_value),
        }
        title, message = config.render(context)

        if cart.user_id:
            current_domain.repository_for(Notification).add(
                Notification.create(
                    title=title,
                    message=message,
                    notification_type=NotificationType.INFO.value,
                    is_global=False,
                    user_id=str(cart.user_id),
                    link="/checkout",
                    source=NotificationSource.TRIGGER_ABANDONED_CART.value,
                )
            )

        emails_sent = 0
        if config.send_email and email and not email_allowed(cart.user_id, Topic.ABANDONED_CART):
            skip_email(email, title, OPTED_OUT)
        elif config.send_email and email:
            rendered = CartRecoveryTemplate.render(
                {
                    "customer_name": customer_name,
                    "items": cart.items,
                    "cart_total": cart.total_value,
                    "reminder_number": cart.next_reminder_number,
                }
            )
            if send_email(email, rendered).succeeded:
                emails_sent = 1

        # Recorded whatever the email outcome
        cart.record_reminder(as_of)
        current_domain.repository_for(AbandonedCart).add(cart)
        return emails_sent

    def _notify_restock(self, alert: RestockAlert, config: TriggerConfig, resolver: SegmentResolver, as_of):
        try:
            product = current_domain.repository_for(ProductSnapshot).get(str(alert.product_id))
        except ObjectNotFoundError:
            return 0, 0
        if (product.stock or 0) <= 0:
            return 0, 0

        title, message = config.render({"product_name": product.name})

        if alert.user_id:
            current_domain.repository_for(Notification).add(
                Notification.create(
                    title=title,
                    message=message,
                    notification_type=NotificationType.PRODUCT.value,
                    is_global=False,
                    user_id=str(alert.user_id),
                    link=f"/product/{product.slug}" if product.slug else None,
                    image_url=product.image_url,
                    source=NotificationSource.TRIGGER_RESTOCK.value,
                )
            )

        emails_sent = 0
        email = alert.email
        if not email and alert.user_id:
            contact = resolver.resolve_user(alert.user_id)
            email = contact.email if contact else None

        if config.send_email and email and not email_allowed(alert.user_id, Topic.RESTOCK_ALERTS):
            skip_email(email, title, OPTED_OUT)
        elif config.send_email and email:
            rendered = RestockTemplate.render(
                {
                    "product_name": product.name,
                    "product_slug": product.slug,
                    "image_url": product.image_url,
                    "title": title,
                    "message": message,
                }
            )
            if send_email(email, rendered).succeeded:
                emails_sent = 1

        alert.mark_notified(as_of)
        current_domain.repository_for(RestockAlert).add(alert)
        return 1, emails_sent
