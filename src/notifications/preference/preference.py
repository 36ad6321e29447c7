"""NotificationPreference aggregate — what a customer agreed to receive.

One record per customer. The channel switches gate whole channels; the
topic switches gate one kind of message. A customer without a record gets
everything, the same as a fresh record.
"""

from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from notifications.notification.notification import NotificationSource, NotificationType
from notifications.preference.events import PreferencesCreated, PreferencesUpdated
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier
from protean.utils.globals import current_domain


class Topic(Enum):
    ORDER_UPDATES = "order_updates"
    PROMOTIONS = "promotions"
    NEW_PRODUCTS = "new_products"
    RESTOCK_ALERTS = "restock_alerts"
    ABANDONED_CART = "abandoned_cart"


PREFERENCE_FIELDS = ("email_enabled", "push_enabled") + tuple(topic.value for topic in Topic)

# Trigger sources win over the notification type
_SOURCE_TOPICS = {
    NotificationSource.TRIGGER_ABANDONED_CART.value: Topic.ABANDONED_CART,
    NotificationSource.TRIGGER_RESTOCK.value: Topic.RESTOCK_ALERTS,
    NotificationSource.TRIGGER_ORDER_STATUS.value: Topic.ORDER_UPDATES,
}
_TYPE_TOPICS = {
    NotificationType.ORDER.value: Topic.ORDER_UPDATES,
    NotificationType.PROMO.value: Topic.PROMOTIONS,
    NotificationType.PRODUCT.value: Topic.NEW_PRODUCTS,
}


def topic_for(notification_type: str | None, source: str | None = None) -> Topic | None:
    """The topic a notification falls under; None for general announcements."""
    if source in _SOURCE_TOPICS:
        return _SOURCE_TOPICS[source]
    return _TYPE_TOPICS.get(notification_type)


@notifications.aggregate
class NotificationPreference:
    customer_id: Identifier(required=True, unique=True)
    email_enabled: Boolean(default=True)
    push_enabled: Boolean(default=True)
    order_updates: Boolean(default=True)
    promotions: Boolean(default=True)
    new_products: Boolean(default=True)
    restock_alerts: Boolean(default=True)
    abandoned_cart: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create_default(cls, customer_id):
        now = datetime.now(UTC)
        preference = cls(customer_id=str(customer_id), created_at=now, updated_at=now)
        preference.raise_(
            PreferencesCreated(
                preference_id=str(preference.id),
                customer_id=str(customer_id),
                created_at=now,
            )
        )
        return preference

    def update(self, **changes):
        """Apply the non-None switches. At least one must be given."""
        changes = {k: v for k, v in changes.items() if k in PREFERENCE_FIELDS and v is not None}
        if not changes:
            raise ValidationError({"preferences": ["At least one preference must be provided"]})

        for field, value in changes.items():
            setattr(self, field, bool(value))

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            PreferencesUpdated(
                preference_id=str(self.id),
                customer_id=str(self.customer_id),
                changed_fields=",".join(sorted(changes)),
                updated_at=now,
            )
        )

    def allows_email(self, topic: Topic | None = None) -> bool:
        if not self.email_enabled:
            return False
        return topic is None or bool(getattr(self, topic.value))

    def allows_push(self, topic: Topic | None = None) -> bool:
        if not self.push_enabled:
            return False
        return topic is None or bool(getattr(self, topic.value))


def preferences_for(customer_id) -> NotificationPreference | None:
    repo = current_domain.repository_for(NotificationPreference)
    found = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    return found[0] if found else None


def email_allowed(customer_id, topic: Topic | None = None) -> bool:
    """True unless the customer switched email, or this topic, off."""
    if not customer_id:
        return True
    preference = preferences_for(customer_id)
    return preference is None or preference.allows_email(topic)
