"""Customer read models used for audience resolution.

Owned by other domains (Identity, Ordering, Marketing) and kept current by the
inbound event handlers in ``notifications.audience``. The pipeline only reads
them.
"""

from notifications.domain import notifications
from protean.fields import Boolean, DateTime, Float, Identifier, String


@notifications.projection
class CustomerProfile:
    customer_id: Identifier(identifier=True, required=True)
    email: String(max_length=254)
    full_name: String(max_length=255)
    created_at: DateTime()  # Registration time; unset until CustomerRegistered arrives
    updated_at: DateTime()


@notifications.projection
class CustomerAddress:
    address_id: Identifier(identifier=True, required=True)
    customer_id: Identifier(required=True)
    city: String(required=True, max_length=255)
    country: String(max_length=100)


@notifications.projection
class CustomerOrder:
    order_id: Identifier(identifier=True, required=True)
    customer_id: Identifier(required=True)
    order_number: String(max_length=50)
    grand_total: Float(default=0.0)
    status: String(max_length=50, default="pending")
    created_at: DateTime()
    updated_at: DateTime()


@notifications.projection
class NewsletterSubscriber:
    email: String(identifier=True, required=True, max_length=254)  # lower-cased
    name: String(max_length=255)
    is_active: Boolean(default=True)
    subscribed_at: DateTime()
    updated_at: DateTime()
