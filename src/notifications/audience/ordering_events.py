"""Inbound cross-domain event handler — Notifications reacts to Order events.

Orders feed the lifetime-value audience; status changes fire the order
status trigger for the order's customer.
"""

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification
from notifications.projections.audience import CustomerOrder, CustomerProfile
from notifications.trigger.lifecycle import fire_personal_trigger
from notifications.trigger.trigger import TriggerType
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.ordering import OrderCreated, OrderStatusChanged

logger = structlog.get_logger(__name__)

notifications.register_external_event(OrderCreated, "Ordering.OrderCreated.v1")
notifications.register_external_event(OrderStatusChanged, "Ordering.OrderStatusChanged.v1")


@notifications.event_handler(part_of=Notification, stream_category="ordering::order")
class OrderingEventsHandler:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        current_domain.repository_for(CustomerOrder).add(
            CustomerOrder(
                order_id=str(event.order_id),
                customer_id=str(event.customer_id),
                order_number=event.order_number,
                grand_total=event.grand_total,
                status="pending",
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        repo = current_domain.repository_for(CustomerOrder)
        customer_id = str(event.customer_id) if event.customer_id else None
        order_number = event.order_number

        try:
            order = repo.get(str(event.order_id))
            order.status = event.new_status
            order.updated_at = event.changed_at
            repo.add(order)
            customer_id = customer_id or str(order.customer_id)
            order_number = order_number or order.order_number
        except ObjectNotFoundError:
            logger.info("Status change for unknown order", order_id=str(event.order_id))

        if not customer_id:
            logger.info("Order status change without a customer, no notification", order_id=str(event.order_id))
            return

        fire_personal_trigger(
            TriggerType.ORDER_STATUS.value,
            user_id=customer_id,
            context={
                "order_number": order_number or str(event.order_id)[:8].upper(),
                "status": event.new_status,
                "customer_name": _customer_name(customer_id),
            },
        )


def _customer_name(customer_id) -> str | None:
    try:
        return current_domain.repository_for(CustomerProfile).get(customer_id).full_name
    except ObjectNotFoundError:
        return None
