"""Notification aggregate (CQRS) — a storefront notification record.

A notification is either a broadcast (``is_global``) resolved against a
target segment at dispatch time, or a personal message for a single user.
It carries its schedule, its aggregate engagement counters, and, for A/B
experiments, the variant linkage between the two content versions.

Lifecycle:
    created (is_sent=False, scheduled) → SENT (by the scheduler)
    created (is_sent=True, immediate)
    SENT → delivered_count / opened_count / clicked_count / is_read updates
    any → purged (hard delete by an admin, cascades to the B variant)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from notifications.notification.events import (
    NotificationClicked,
    NotificationCreated,
    NotificationDelivered,
    NotificationOpened,
    NotificationPurged,
    NotificationRead,
    NotificationSent,
)
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    INFO = "info"
    PRODUCT = "product"
    ORDER = "order"
    PROMO = "promo"


class TargetSegment(Enum):
    ALL = "all"
    NEWSLETTER_SUBSCRIBERS = "newsletter_subscribers"
    NEW_CUSTOMERS = "new_customers"
    HIGH_VALUE = "high_value"
    BY_LOCATION = "by_location"


class Variant(Enum):
    A = "A"
    B = "B"


class NotificationSource(Enum):
    ADMIN = "admin"
    AB_TEST = "ab_test"
    TRIGGER_ABANDONED_CART = "trigger:abandoned_cart"
    TRIGGER_ORDER_STATUS = "trigger:order_status"
    TRIGGER_RESTOCK = "trigger:restock"
    TRIGGER_WELCOME = "trigger:welcome"
    CAMPAIGN_SALE = "campaign:sale"


def as_naive_utc(value: datetime | None) -> datetime | None:
    """Normalize a datetime to naive UTC so stored and computed times compare."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class Notification:
    """A notification shown in the storefront's notification center.

    Broadcasts are addressed to a segment; personal notifications to one
    ``user_id``. Engagement counters accumulate for the lifetime of the record.
    """

    # Content
    title: String(required=True, max_length=255)
    message: Text(default="")  # A/B variants may leave the body empty
    notification_type: String(choices=NotificationType, default=NotificationType.INFO.value)
    link: String(max_length=500)
    image_url: String(max_length=1000)

    # Addressing
    is_global: Boolean(default=True)
    user_id: Identifier()
    target_segment: String(choices=TargetSegment, default=TargetSegment.ALL.value)
    target_criteria: Text()  # JSON object, e.g. {"min_order_value": 5000}

    # Scheduling & delivery
    scheduled_at: DateTime()  # Null means send on creation
    send_email: Boolean(default=False)
    is_sent: Boolean(default=False)
    sent_at: DateTime()
    source: String(max_length=50, default=NotificationSource.ADMIN.value)

    # Read marker (authenticated recipients)
    is_read: Boolean(default=False)

    # Engagement counters
    delivered_count: Integer(default=0)
    opened_count: Integer(default=0)
    clicked_count: Integer(default=0)

    # A/B testing
    is_ab_test: Boolean(default=False)
    ab_test_name: String(max_length=255)
    variant_id: String(choices=Variant)
    parent_id: Identifier()

    # Timestamps
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def personal_notification_needs_recipient(self):
        if not self.is_global and not self.user_id:
            raise ValidationError({"user_id": ["Personal notifications require a user_id"]})

    @invariant.post
    def variant_linkage_must_be_consistent(self):
        if not self.is_ab_test:
            if self.variant_id or self.parent_id:
                raise ValidationError({"variant_id": ["Only A/B test notifications carry variants"]})
            return

        if self.variant_id == Variant.A.value and self.parent_id:
            raise ValidationError({"parent_id": ["Variant A is the parent and cannot reference another record"]})
        if self.variant_id == Variant.B.value and not self.parent_id:
            raise ValidationError({"parent_id": ["Variant B must reference its variant A"]})
        if self.variant_id not in (Variant.A.value, Variant.B.value):
            raise ValidationError({"variant_id": ["A/B test notifications must be variant A or B"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        message,
        notification_type=NotificationType.INFO.value,
        is_global=True,
        user_id=None,
        link=None,
        image_url=None,
        scheduled_at=None,
        send_email=False,
        target_segment=TargetSegment.ALL.value,
        target_criteria=None,
        source=NotificationSource.ADMIN.value,
        is_ab_test=False,
        ab_test_name=None,
        variant_id=None,
        parent_id=None,
        delivered_count=0,
    ):
        """Create a notification.

        Without ``scheduled_at`` the notification is sent on creation;
        otherwise it waits for the scheduler.
        """
        now = datetime.now(UTC)
        sent_now = scheduled_at is None

        notification = cls(
            title=title,
            message=message,
            notification_type=notification_type,
            is_global=is_global,
            user_id=user_id,
            link=link,
            image_url=image_url,
            target_segment=target_segment or TargetSegment.ALL.value,
            target_criteria=json.dumps(target_criteria or {}),
            scheduled_at=scheduled_at,
            send_email=send_email,
            is_sent=sent_now,
            sent_at=now if sent_now else None,
            source=source,
            delivered_count=delivered_count,
            is_ab_test=is_ab_test,
            ab_test_name=ab_test_name,
            variant_id=variant_id,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                title=title,
                notification_type=notification.notification_type,
                is_global=notification.is_global,
                user_id=str(user_id) if user_id else None,
                target_segment=notification.target_segment,
                scheduled_at=scheduled_at,
                is_sent=sent_now,
                send_email=bool(send_email),
                source=source,
                is_ab_test=bool(is_ab_test),
                variant_id=variant_id,
                parent_id=str(parent_id) if parent_id else None,
                created_at=now,
            )
        )

        return notification

    # -------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------
    @property
    def criteria(self) -> dict:
        return json.loads(self.target_criteria) if self.target_criteria else {}

    def is_due(self, as_of: datetime) -> bool:
        """True when the notification is scheduled, unsent and its time has elapsed."""
        if self.is_sent or self.scheduled_at is None:
            return False
        return as_naive_utc(self.scheduled_at) <= as_naive_utc(as_of)

    def is_visible_to(self, user_id=None) -> bool:
        """Global records are visible to everyone, personal ones to their owner."""
        if self.is_global:
            return True
        return user_id is not None and str(self.user_id) == str(user_id)

    @property
    def is_ab_parent(self) -> bool:
        return bool(self.is_ab_test) and self.parent_id is None

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------
    def mark_sent(self, sent_at=None):
        """Claim the notification for dispatch. A notification is sent once."""
        if self.is_sent:
            raise ValidationError({"is_sent": ["Notification has already been sent"]})

        now = sent_at or datetime.now(UTC)
        self.is_sent = True
        self.sent_at = now
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                is_global=self.is_global,
                user_id=str(self.user_id) if self.user_id else None,
                sent_at=now,
            )
        )

    def record_delivery(self, delivered, failed=0, skipped=0):
        """Record the outcome of a per-recipient fan-out."""
        now = datetime.now(UTC)
        self.delivered_count = (self.delivered_count or 0) + delivered
        self.updated_at = now

        self.raise_(
            NotificationDelivered(
                notification_id=str(self.id),
                delivered=delivered,
                failed=failed,
                skipped=skipped,
                delivered_count=self.delivered_count,
                recorded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Engagement
    # -------------------------------------------------------------------
    def record_open(self):
        now = datetime.now(UTC)
        self.opened_count = (self.opened_count or 0) + 1
        self.updated_at = now

        self.raise_(
            NotificationOpened(
                notification_id=str(self.id),
                notification_type=self.notification_type,
                variant_id=self.variant_id,
                opened_count=self.opened_count,
                opened_at=now,
            )
        )

    def record_click(self):
        now = datetime.now(UTC)
        self.clicked_count = (self.clicked_count or 0) + 1
        self.updated_at = now

        self.raise_(
            NotificationClicked(
                notification_id=str(self.id),
                notification_type=self.notification_type,
                variant_id=self.variant_id,
                clicked_count=self.clicked_count,
                clicked_at=now,
            )
        )

    def mark_read(self, read_by=None):
        """Set the server-side read marker. Marking twice is a no-op."""
        if self.is_read:
            return

        now = datetime.now(UTC)
        self.is_read = True
        self.updated_at = now

        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                read_by=str(read_by) if read_by else None,
                read_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Purge
    # -------------------------------------------------------------------
    def purge(self, reason="admin"):
        """Announce the hard delete; the repository removes the record."""
        self.raise_(
            NotificationPurged(
                notification_id=str(self.id),
                is_ab_test=bool(self.is_ab_test),
                parent_id=str(self.parent_id) if self.parent_id else None,
                reason=reason,
                purged_at=datetime.now(UTC),
            )
        )
