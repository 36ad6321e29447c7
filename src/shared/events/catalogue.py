"""Cross-domain event contracts for Catalogue domain events.

The Notifications domain keeps a small product snapshot (name, slug, image)
to render restock alerts and link back to the product page.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class ProductCreated(BaseEvent):
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    title = String(required=True)
    slug = String()
    image_url = String()
    status = String(required=True)
    created_at = DateTime(required=True)


class ProductDetailsUpdated(BaseEvent):
    """A product's name, slug or primary image changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    title = String(required=True)
    slug = String()
    image_url = String()
    updated_at = DateTime(required=True)
