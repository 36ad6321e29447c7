"""SendSaleCampaign command + handler — a flash sale announced everywhere at once.

One run creates a global promo notification for the storefront's
notification center, emails every active newsletter subscriber with their
own unsubscribe link, and sends the store admin a summary.
"""

import structlog
from notifications.audience.segments import SegmentResolver
from notifications.campaign.newsletter import unsubscribe_url
from notifications.config import get_settings
from notifications.domain import notifications
from notifications.notification.delivery import FanOutResult, send_email
from notifications.notification.notification import (
    Notification,
    NotificationSource,
    NotificationType,
    TargetSegment,
)
from notifications.templates.sale import SaleSummaryTemplate, SaleTemplate, discount_percent
from protean.exceptions import ValidationError
from protean.fields import Float, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.command(part_of="Notification")
class SendSaleCampaign:
    product_name: String(required=True, max_length=255)
    original_price: Float(required=True)
    sale_price: Float(required=True, min_value=0)
    product_slug: String(required=True, max_length=255)
    product_image: String(max_length=1000)


@notifications.command_handler(part_of=Notification)
class SaleCampaignHandler:
    @handle(SendSaleCampaign)
    def send_sale_campaign(self, command: SendSaleCampaign):
        if command.original_price <= 0 or command.sale_price >= command.original_price:
            raise ValidationError({"sale_price": ["Sale price must be below a positive original price"]})

        discount = discount_percent(command.original_price, command.sale_price)
        repo = current_domain.repository_for(Notification)

        notification = Notification.create(
            title=f"Flash Sale: {discount}% OFF!",
            message=f"{command.product_name} is now on sale! Don't miss out on this amazing deal.",
            notification_type=NotificationType.PROMO.value,
            is_global=True,
            link=f"/product/{command.product_slug}",
            image_url=command.product_image,
            target_segment=TargetSegment.NEWSLETTER_SUBSCRIBERS.value,
            source=NotificationSource.CAMPAIGN_SALE.value,
        )
        repo.add(notification)

        context = {
            "product_name": command.product_name,
            "original_price": command.original_price,
            "sale_price": command.sale_price,
            "product_slug": command.product_slug,
        }
        subscribers = SegmentResolver().resolve(TargetSegment.NEWSLETTER_SUBSCRIBERS.value)
        result = FanOutResult()
        for subscriber in subscribers:
            rendered = SaleTemplate.render({**context, "unsubscribe_url": unsubscribe_url(subscriber.email)})
            result.count(send_email(subscriber.email, rendered, notification_id=notification.id).status)

        if subscribers:
            notification.record_delivery(result.sent, failed=result.failed, skipped=result.skipped)
            repo.add(notification)

        admin_email = get_settings().admin_email
        if admin_email:
            summary = SaleSummaryTemplate.render({**context, "sent": result.sent, "total": len(subscribers)})
            send_email(admin_email, summary, notification_id=notification.id)

        logger.info(
            "Sale campaign sent",
            notification_id=str(notification.id),
            product=command.product_name,
            discount=discount,
            subscribers=len(subscribers),
            sent=result.sent,
            failed=result.failed,
        )
        return {
            "notification_id": str(notification.id),
            "total": len(subscribers),
            "sent": result.sent,
            "failed": result.failed,
            "skipped": result.skipped,
        }
