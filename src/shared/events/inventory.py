"""Cross-domain event contracts for Inventory domain events.

Restock alerts fire once a product's on-hand stock becomes positive, so the
Notifications domain only needs the resulting stock level per product.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Integer, String


class StockLevelChanged(BaseEvent):
    """The sellable quantity of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    inventory_item_id = Identifier()
    sku = String()
    previous_quantity = Integer(default=0)
    new_quantity = Integer(required=True)
    changed_at = DateTime(required=True)
