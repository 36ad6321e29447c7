"""Cross-domain event contracts for Ordering domain events.

These classes define the event shape for consumption by the Notifications
domain: orders feed the lifetime-value audience and the order status
trigger, carts feed abandoned-cart recovery. They are registered as external
events via domain.register_external_event() with matching __type__ strings.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class OrderCreated(BaseEvent):
    """A new order was placed."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_number = String()
    items = Text()  # JSON list of item dicts
    grand_total = Float(required=True)
    currency = String(default="USD")
    created_at = DateTime(required=True)


class OrderStatusChanged(BaseEvent):
    """An order moved to a new fulfilment status (processing, shipped, ...)."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    order_number = String()
    previous_status = String()
    new_status = String(required=True)
    changed_at = DateTime(required=True)


class CartAbandoned(BaseEvent):
    """A cart with items went idle without checkout.

    Emitted again every time the shopper touches the cart and leaves it.
    Guest carts carry only an email, signed-in carts a customer_id.
    """

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier()
    email = String()
    items = Text()  # JSON list of {name, price, quantity, size, image}
    total_value = Float(default=0.0)
    abandoned_at = DateTime(required=True)


class CartRecovered(BaseEvent):
    """An abandoned cart was checked out."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier()
    order_id = Identifier()
    recovered_at = DateTime(required=True)
