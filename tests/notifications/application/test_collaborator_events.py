"""Application tests for the handlers that mirror other domains' data."""

import json
from datetime import UTC, datetime

from notifications.audience.identity_events import IdentityEventsHandler
from notifications.audience.marketing_events import MarketingEventsHandler
from notifications.audience.ordering_events import OrderingEventsHandler
from notifications.audience.segments import SegmentResolver
from notifications.notification.notification import TargetSegment
from notifications.projections.audience import (
    CustomerAddress,
    CustomerOrder,
    CustomerProfile,
    NewsletterSubscriber,
)
from notifications.projections.product_snapshot import ProductSnapshot
from notifications.recovery.abandoned_cart import AbandonedCart
from notifications.recovery.cart_events import CartEventsHandler
from notifications.recovery.catalogue_events import CatalogueEventsHandler, InventoryEventsHandler
from protean import current_domain
from shared.events.catalogue import ProductCreated, ProductDetailsUpdated
from shared.events.identity import AddressAdded, AddressRemoved, CustomerRegistered, ProfileUpdated
from shared.events.inventory import StockLevelChanged
from shared.events.marketing import NewsletterSubscribed, NewsletterUnsubscribed
from shared.events.ordering import CartAbandoned, CartRecovered, OrderCreated, OrderStatusChanged


def _now():
    return datetime.now(UTC)


class TestIdentityEvents:
    def test_registration_creates_profile(self):
        IdentityEventsHandler().on_customer_registered(
            CustomerRegistered(
                customer_id="cust-1",
                email="nadia@example.com",
                first_name="Nadia",
                last_name="Islam",
                registered_at=_now(),
            )
        )
        profile = current_domain.repository_for(CustomerProfile).get("cust-1")
        assert profile.email == "nadia@example.com"
        assert profile.full_name == "Nadia Islam"

    def test_profile_update(self, seed_customer):
        seed_customer("cust-1", email="old@example.com", full_name="Old Name")
        IdentityEventsHandler().on_profile_updated(
            ProfileUpdated(customer_id="cust-1", email="new@example.com", first_name="Nadia", updated_at=_now())
        )
        profile = current_domain.repository_for(CustomerProfile).get("cust-1")
        assert profile.email == "new@example.com"
        assert profile.full_name == "Nadia"

    def test_update_before_registration_has_no_join_date(self):
        IdentityEventsHandler().on_profile_updated(
            ProfileUpdated(customer_id="cust-1", email="nadia@example.com", first_name="Nadia", updated_at=_now())
        )
        profile = current_domain.repository_for(CustomerProfile).get("cust-1")
        assert profile.created_at is None
        assert SegmentResolver().resolve(TargetSegment.NEW_CUSTOMERS.value) == []

    def test_late_registration_sets_join_date_and_keeps_newer_details(self):
        handler = IdentityEventsHandler()
        handler.on_profile_updated(
            ProfileUpdated(customer_id="cust-1", email="new@example.com", first_name="Nadia", updated_at=_now())
        )
        registered_at = _now()
        handler.on_customer_registered(
            CustomerRegistered(
                customer_id="cust-1",
                email="old@example.com",
                first_name="Old",
                registered_at=registered_at,
            )
        )

        profile = current_domain.repository_for(CustomerProfile).get("cust-1")
        assert profile.email == "new@example.com"
        assert profile.full_name == "Nadia"
        assert profile.created_at is not None
        assert [c.email for c in SegmentResolver().resolve(TargetSegment.NEW_CUSTOMERS.value)] == ["new@example.com"]

    def test_addresses(self):
        handler = IdentityEventsHandler()
        handler.on_address_added(
            AddressAdded(customer_id="cust-1", address_id="addr-1", city="Dhaka", country="BD", added_at=_now())
        )
        assert current_domain.repository_for(CustomerAddress).get("addr-1").city == "Dhaka"

        handler.on_address_removed(AddressRemoved(customer_id="cust-1", address_id="addr-1", removed_at=_now()))
        assert current_domain.repository_for(CustomerAddress)._dao.query.all().items == []

    def test_removing_unknown_address_is_ignored(self):
        IdentityEventsHandler().on_address_removed(
            AddressRemoved(customer_id="cust-1", address_id="addr-missing", removed_at=_now())
        )


class TestMarketingEvents:
    def test_subscribe_and_unsubscribe(self):
        handler = MarketingEventsHandler()
        handler.on_newsletter_subscribed(NewsletterSubscribed(email="Reader@Example.com", name="Reader", subscribed_at=_now()))
        subscriber = current_domain.repository_for(NewsletterSubscriber).get("reader@example.com")
        assert subscriber.is_active is True

        handler.on_newsletter_unsubscribed(NewsletterUnsubscribed(email="reader@example.com", unsubscribed_at=_now()))
        assert current_domain.repository_for(NewsletterSubscriber).get("reader@example.com").is_active is False

    def test_resubscribe_reactivates(self):
        handler = MarketingEventsHandler()
        handler.on_newsletter_subscribed(NewsletterSubscribed(email="r@example.com", subscribed_at=_now()))
        handler.on_newsletter_unsubscribed(NewsletterUnsubscribed(email="r@example.com", unsubscribed_at=_now()))
        handler.on_newsletter_subscribed(NewsletterSubscribed(email="r@example.com", subscribed_at=_now()))
        assert current_domain.repository_for(NewsletterSubscriber).get("r@example.com").is_active is True


class TestOrderingEvents:
    def test_order_created_and_status(self):
        handler = OrderingEventsHandler()
        handler.on_order_created(
            OrderCreated(order_id="ord-1", customer_id="cust-1", order_number="ORD-1", grand_total=2500.0, created_at=_now())
        )
        handler.on_order_status_changed(OrderStatusChanged(order_id="ord-1", new_status="shipped", changed_at=_now()))

        order = current_domain.repository_for(CustomerOrder).get("ord-1")
        assert order.grand_total == 2500.0
        assert order.status == "shipped"


class TestCartEvents:
    ITEMS = [{"name": "Kurta", "price": 1200, "quantity": 2}]

    def _abandon(self, **overrides):
        defaults = {
            "cart_id": "cart-1",
            "customer_id": "cust-1",
            "items": json.dumps(self.ITEMS),
            "total_value": 2400.0,
            "abandoned_at": _now(),
        }
        defaults.update(overrides)
        CartEventsHandler().on_cart_abandoned(CartAbandoned(**defaults))

    def test_abandoned_cart_is_tracked(self):
        self._abandon()
        cart = current_domain.repository_for(AbandonedCart).get("cart-1")
        assert cart.items == self.ITEMS
        assert cart.total_value == 2400.0
        assert str(cart.user_id) == "cust-1"

    def test_cart_without_contact_is_ignored(self):
        self._abandon(customer_id=None)
        assert current_domain.repository_for(AbandonedCart)._dao.query.all().items == []

    def test_abandoned_again_refreshes(self):
        self._abandon()
        repo = current_domain.repository_for(AbandonedCart)
        cart = repo.get("cart-1")
        cart.record_reminder()
        repo.add(cart)

        self._abandon(total_value=1200.0)

        cart = repo.get("cart-1")
        assert cart.reminder_sent is False
        assert cart.reminder_count == 1
        assert cart.total_value == 1200.0

    def test_recovered(self):
        self._abandon()
        CartEventsHandler().on_cart_recovered(CartRecovered(cart_id="cart-1", recovered_at=_now()))
        assert current_domain.repository_for(AbandonedCart).get("cart-1").recovered is True


class TestProductEvents:
    def test_product_and_stock(self):
        CatalogueEventsHandler().on_product_created(
            ProductCreated(
                product_id="prod-1",
                sku="SAR-01",
                title="Jamdani Saree",
                slug="jamdani-saree",
                status="Active",
                created_at=_now(),
            )
        )
        InventoryEventsHandler().on_stock_level_changed(
            StockLevelChanged(product_id="prod-1", previous_quantity=0, new_quantity=4, changed_at=_now())
        )

        snapshot = current_domain.repository_for(ProductSnapshot).get("prod-1")
        assert snapshot.name == "Jamdani Saree"
        assert snapshot.slug == "jamdani-saree"
        assert snapshot.stock == 4

    def test_details_update_keeps_missing_fields(self):
        CatalogueEventsHandler().on_product_created(
            ProductCreated(product_id="prod-1", sku="S", title="Saree", slug="saree", image_url="/a.jpg", status="Active", created_at=_now())
        )
        CatalogueEventsHandler().on_product_details_updated(
            ProductDetailsUpdated(product_id="prod-1", title="Silk Saree", updated_at=_now())
        )
        snapshot = current_domain.repository_for(ProductSnapshot).get("prod-1")
        assert snapshot.name == "Silk Saree"
        assert snapshot.slug == "saree"
        assert snapshot.image_url == "/a.jpg"

    def test_stock_before_product_details(self):
        InventoryEventsHandler().on_stock_level_changed(
            StockLevelChanged(product_id="prod-2", sku="SKU-2", new_quantity=1, changed_at=_now())
        )
        assert current_domain.repository_for(ProductSnapshot).get("prod-2").name == "SKU-2"
