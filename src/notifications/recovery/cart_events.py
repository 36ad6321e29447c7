"""Inbound cross-domain event handler — Notifications reacts to Cart events.

Mirrors idle carts into AbandonedCart rows for the reminder trigger. The
reminders themselves are sent by the trigger engine, not here.
"""

import json

import structlog
from notifications.domain import notifications
from notifications.recovery.abandoned_cart import AbandonedCart
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.ordering import CartAbandoned, CartRecovered

logger = structlog.get_logger(__name__)

notifications.register_external_event(CartAbandoned, "Ordering.CartAbandoned.v1")
notifications.register_external_event(CartRecovered, "Ordering.CartRecovered.v1")


@notifications.event_handler(part_of=AbandonedCart, stream_category="ordering::cart")
class CartEventsHandler:
    @handle(CartAbandoned)
    def on_cart_abandoned(self, event: CartAbandoned) -> None:
        items = json.loads(event.items) if event.items else []
        if not event.customer_id and not event.email:
            logger.info("CartAbandoned without customer or email, not tracked", cart_id=str(event.cart_id))
            return

        repo = current_domain.repository_for(AbandonedCart)
        fields = {
            "items": items,
            "total_value": event.total_value,
            "user_id": str(event.customer_id) if event.customer_id else None,
            "email": event.email,
            "abandoned_at": event.abandoned_at,
        }

        try:
            cart = repo.get(str(event.cart_id))
            cart.refresh(**fields)
        except ObjectNotFoundError:
            cart = AbandonedCart.track(cart_id=str(event.cart_id), **fields)

        repo.add(cart)

    @handle(CartRecovered)
    def on_cart_recovered(self, event: CartRecovered) -> None:
        repo = current_domain.repository_for(AbandonedCart)
        try:
            cart = repo.get(str(event.cart_id))
        except ObjectNotFoundError:
            return

        cart.mark_recovered(event.recovered_at)
        repo.add(cart)
