"""Inbound cross-domain event handlers: product facts for restock alerts.

Catalogue events carry name/slug/image; Inventory events carry stock. Both
land in the ProductSnapshot read model.
"""

import structlog
from notifications.domain import notifications
from notifications.projections.product_snapshot import ProductSnapshot
from notifications.recovery.restock_alert import RestockAlert
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.catalogue import ProductCreated, ProductDetailsUpdated
from shared.events.inventory import StockLevelChanged

logger = structlog.get_logger(__name__)

notifications.register_external_event(ProductCreated, "Catalogue.ProductCreated.v1")
notifications.register_external_event(ProductDetailsUpdated, "Catalogue.ProductDetailsUpdated.v1")
notifications.register_external_event(StockLevelChanged, "Inventory.StockLevelChanged.v1")


def _snapshot(product_id, default_name) -> ProductSnapshot:
    try:
        return current_domain.repository_for(ProductSnapshot).get(str(product_id))
    except ObjectNotFoundError:
        return ProductSnapshot(product_id=str(product_id), name=default_name, stock=0)


@notifications.event_handler(part_of=RestockAlert, stream_category="catalogue::product")
class CatalogueEventsHandler:
    @handle(ProductCreated)
    def on_product_created(self, event: ProductCreated) -> None:
        snapshot = _snapshot(event.product_id, event.title)
        snapshot.name = event.title
        snapshot.slug = event.slug
        snapshot.image_url = event.image_url
        snapshot.updated_at = event.created_at
        current_domain.repository_for(ProductSnapshot).add(snapshot)

    @handle(ProductDetailsUpdated)
    def on_product_details_updated(self, event: ProductDetailsUpdated) -> None:
        snapshot = _snapshot(event.product_id, event.title)
        snapshot.name = event.title
        snapshot.slug = event.slug or snapshot.slug
        snapshot.image_url = event.image_url or snapshot.image_url
        snapshot.updated_at = event.updated_at
        current_domain.repository_for(ProductSnapshot).add(snapshot)


@notifications.event_handler(part_of=RestockAlert, stream_category="inventory::inventory_item")
class InventoryEventsHandler:
    @handle(StockLevelChanged)
    def on_stock_level_changed(self, event: StockLevelChanged) -> None:
        snapshot = _snapshot(event.product_id, event.sku or str(event.product_id))
        snapshot.stock = event.new_quantity
        snapshot.updated_at = event.changed_at
        current_domain.repository_for(ProductSnapshot).add(snapshot)

        if (event.previous_quantity or 0) <= 0 < event.new_quantity:
            logger.info("Product back in stock", product_id=str(event.product_id), stock=event.new_quantity)
