import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def notifications_bed():
    from notifications.domain import notifications

    bed = DomainFixture(notifications)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(notifications_bed):
    with notifications_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Reset stores, the email adapter and the realtime hub after every test."""
    from notifications.channel import reset_channels
    from notifications.realtime.hub import get_hub

    reset_channels()
    get_hub().reset()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    reset_channels()
    get_hub().reset()


@pytest.fixture()
def email():
    """The in-memory email adapter every send in the test goes through."""
    from notifications.channel import get_email_channel

    return get_email_channel()


@pytest.fixture()
def seed_customer():
    """Factory for a customer as Identity and Ordering would have reported it."""
    from datetime import UTC, datetime
    from uuid import uuid4

    from notifications.projections.audience import CustomerAddress, CustomerOrder, CustomerProfile
    from protean import current_domain

    def _seed(customer_id, email=None, full_name=None, created_at=None, city=None, order_totals=()):
        created_at = created_at or datetime.now(UTC)
        current_domain.repository_for(CustomerProfile).add(
            CustomerProfile(
                customer_id=customer_id,
                email=email,
                full_name=full_name,
                created_at=created_at,
                updated_at=created_at,
            )
        )
        if city:
            current_domain.repository_for(CustomerAddress).add(
                CustomerAddress(address_id=f"addr-{uuid4().hex[:8]}", customer_id=customer_id, city=city)
            )
        for total in order_totals:
            current_domain.repository_for(CustomerOrder).add(
                CustomerOrder(
                    order_id=f"ord-{uuid4().hex[:8]}",
                    customer_id=customer_id,
                    grand_total=total,
                    created_at=created_at,
                )
            )
        return customer_id

    return _seed


@pytest.fixture()
def seed_subscriber():
    from datetime import UTC, datetime

    from notifications.projections.audience import NewsletterSubscriber
    from protean import current_domain

    def _seed(email, name=None, is_active=True):
        current_domain.repository_for(NewsletterSubscriber).add(
            NewsletterSubscriber(
                email=email.lower(),
                name=name,
                is_active=is_active,
                subscribed_at=datetime.now(UTC),
            )
        )
        return email

    return _seed
