"""Segment resolution: turns a target segment into concrete email recipients.

Reads only the customer read models (profiles, addresses, orders, newsletter
subscribers). Every read walks the full result set page by page, so an
audience is never truncated by a provider's page size.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog
from notifications.notification.notification import TargetSegment, as_naive_utc
from notifications.projections.audience import (
    CustomerAddress,
    CustomerOrder,
    CustomerProfile,
    NewsletterSubscriber,
)
from notifications.utils.query import iterate_all
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)

NEW_CUSTOMER_WINDOW = timedelta(days=30)
DEFAULT_MIN_ORDER_VALUE = 5000


class SegmentResolutionError(Exception):
    """The audience for a notification could not be determined."""


@dataclass(frozen=True)
class RecipientContact:
    email: str
    display_name: str | None = None
    user_id: str | None = None


def _contact(profile: CustomerProfile) -> RecipientContact:
    return RecipientContact(email=profile.email, display_name=profile.full_name, user_id=str(profile.customer_id))


class SegmentResolver:
    """Resolve segments against the customer read models."""

    def resolve(self, segment: str, criteria: dict | None = None, as_of: datetime | None = None) -> list[RecipientContact]:
        criteria = criteria or {}
        as_of = as_of or datetime.now(UTC)

        resolvers = {
            TargetSegment.ALL.value: self._all,
            TargetSegment.NEWSLETTER_SUBSCRIBERS.value: self._newsletter_subscribers,
            TargetSegment.NEW_CUSTOMERS.value: self._new_customers,
            TargetSegment.HIGH_VALUE.value: self._high_value,
            TargetSegment.BY_LOCATION.value: self._by_location,
        }
        if segment not in resolvers:
            raise SegmentResolutionError(f"Unknown segment: {segment}")

        try:
            recipients = resolvers[segment](criteria, as_of)
        except SegmentResolutionError:
            raise
        except Exception as exc:
            raise SegmentResolutionError(f"Could not resolve segment {segment}: {exc}") from exc

        logger.debug("Segment resolved", segment=segment, recipients=len(recipients))
        return recipients

    def resolve_user(self, user_id) -> RecipientContact | None:
        """The contact for a single user, if they have an email on file."""
        try:
            profile = current_domain.repository_for(CustomerProfile).get(str(user_id))
        except ObjectNotFoundError:
            return None
        return _contact(profile) if profile.email else None

    def preview(self, segment: str, criteria: dict | None = None, as_of: datetime | None = None, sample_size: int = 5) -> dict:
        recipients = self.resolve(segment, criteria, as_of)
        return {"count": len(recipients), "sample": recipients[:sample_size]}

    # -------------------------------------------------------------------
    # Segments
    # -------------------------------------------------------------------
    def _profiles_with_email(self):
        query = current_domain.repository_for(CustomerProfile)._dao.query
        return [p for p in iterate_all(query) if p.email]

    def _active_subscribers(self):
        query = current_domain.repository_for(NewsletterSubscriber)._dao.query.filter(is_active=True)
        return list(iterate_all(query))

    def _all(self, criteria, as_of):
        by_email: dict[str, RecipientContact] = {}
        for profile in self._profiles_with_email():
            by_email.setdefault(profile.email.lower(), _contact(profile))
        for subscriber in self._active_subscribers():
            by_email.setdefault(subscriber.email.lower(), RecipientContact(email=subscriber.email, display_name=subscriber.name))
        return list(by_email.values())

    def _newsletter_subscribers(self, criteria, as_of):
        return [RecipientContact(email=s.email, display_name=s.name) for s in self._active_subscribers()]

    def _new_customers(self, criteria, as_of):
        cutoff = as_naive_utc(as_of - NEW_CUSTOMER_WINDOW)
        # Profiles only seen through ProfileUpdated have no registration time yet
        return [
            _contact(p)
            for p in self._profiles_with_email()
            if p.created_at is not None and as_naive_utc(p.created_at) >= cutoff
        ]

    def _high_value(self, criteria, as_of):
        try:
            min_order_value = float(criteria.get("min_order_value", DEFAULT_MIN_ORDER_VALUE))
        except (TypeError, ValueError) as exc:
            raise SegmentResolutionError(f"Invalid min_order_value: {criteria.get('min_order_value')!r}") from exc

        totals: dict[str, float] = defaultdict(float)
        for order in iterate_all(current_domain.repository_for(CustomerOrder)._dao.query):
            totals[str(order.customer_id)] += order.grand_total or 0.0

        return [_contact(p) for p in self._profiles_with_email() if totals.get(str(p.customer_id), 0.0) >= min_order_value]

    def _by_location(self, criteria, as_of):
        city = (criteria.get("city") or "").strip().lower()
        if not city:
            return []

        customer_ids = {
            str(address.customer_id)
            for address in iterate_all(current_domain.repository_for(CustomerAddress)._dao.query)
            if city in (address.city or "").lower()
        }
        return [_contact(p) for p in self._profiles_with_email() if str(p.customer_id) in customer_ids]
