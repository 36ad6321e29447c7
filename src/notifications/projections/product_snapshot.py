"""ProductSnapshot: the few product facts a restock alert needs."""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, Integer, String


@notifications.projection
class ProductSnapshot:
    product_id: Identifier(identifier=True, required=True)
    name: String(required=True, max_length=255)
    slug: String(max_length=255)
    image_url: String(max_length=1000)
    stock: Integer(default=0)
    updated_at: DateTime()
