"""Template registry — maps notification types and triggers to email templates.

Broadcasts render by ``notification_type``; records created by a trigger
render with that trigger's template.
"""

from notifications.templates.broadcast import (
    InfoTemplate,
    OrderTemplate,
    ProductTemplate,
    PromoTemplate,
)
from notifications.templates.cart_recovery import CartRecoveryTemplate
from notifications.templates.order_status import OrderStatusTemplate
from notifications.templates.restock import RestockTemplate
from notifications.templates.sale import SaleTemplate
from notifications.templates.welcome import WelcomeTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    InfoTemplate.notification_type: InfoTemplate,
    ProductTemplate.notification_type: ProductTemplate,
    OrderTemplate.notification_type: OrderTemplate,
    PromoTemplate.notification_type: PromoTemplate,
    CartRecoveryTemplate.notification_type: CartRecoveryTemplate,
    RestockTemplate.notification_type: RestockTemplate,
    SaleTemplate.notification_type: SaleTemplate,
    OrderStatusTemplate.notification_type: OrderStatusTemplate,
    WelcomeTemplate.notification_type: WelcomeTemplate,
}

TRIGGER_SOURCE_PREFIX = "trigger:"


def get_template(key: str):
    """Look up a template class by notification type or trigger type."""
    template_cls = TEMPLATE_REGISTRY.get(key)
    if template_cls is None:
        raise ValueError(f"No template registered for: {key}")
    return template_cls


def template_for(notification):
    """Pick the email template for a notification record."""
    source = notification.source or ""
    if source.startswith(TRIGGER_SOURCE_PREFIX):
        key = source[len(TRIGGER_SOURCE_PREFIX):]
        if key in TEMPLATE_REGISTRY:
            return TEMPLATE_REGISTRY[key]
    return get_template(notification.notification_type)
