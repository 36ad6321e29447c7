"""Broadcast email templates, one per storefront notification type.

Broadcast copy is written by the admin, so these templates only frame the
notification's own title and message.
"""

from notifications.notification.notification import NotificationType
from notifications.templates.layout import absolute_url, html_page, signature


class _BroadcastTemplate:
    notification_type: str
    cta_label = "Visit the store"

    @classmethod
    def render(cls, context: dict) -> dict:
        name = context.get("recipient_name")
        greeting = f"Hi {name}," if name else "Hi there,"
        link = absolute_url(context.get("link"))

        body = f"{greeting}\n\n{context['message']}"
        if link:
            body += f"\n\n{cls.cta_label}: {link}"
        body += signature()

        return {
            "subject": context["title"],
            "body": body,
            "html_body": html_page(context["title"], [greeting, context["message"]], cls.cta_label, link),
        }


class InfoTemplate(_BroadcastTemplate):
    notification_type = NotificationType.INFO.value
    cta_label = "Read more"


class ProductTemplate(_BroadcastTemplate):
    notification_type = NotificationType.PRODUCT.value
    cta_label = "View product"


class OrderTemplate(_BroadcastTemplate):
    notification_type = NotificationType.ORDER.value
    cta_label = "View your orders"


class PromoTemplate(_BroadcastTemplate):
    notification_type = NotificationType.PROMO.value
    cta_label = "Shop now"
