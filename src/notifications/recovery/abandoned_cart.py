"""AbandonedCart aggregate — reminder bookkeeping for an idle cart.

The cart itself belongs to Ordering; this row mirrors it from CartAbandoned
events and owns the reminder flags the trigger engine sets.

Rules:
    - at most MAX_REMINDERS reminders per cart
    - a recovered cart is never reminded
    - a refreshed cart (abandoned again) re-opens the reminder window
"""

import json
from datetime import UTC, datetime

from notifications.domain import notifications
from notifications.recovery.events import (
    AbandonedCartRecovered,
    AbandonedCartTracked,
    CartReminderSent,
)
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

MAX_REMINDERS = 3


@notifications.aggregate
class AbandonedCart:
    cart_id: Identifier(identifier=True, required=True)
    user_id: Identifier()
    email: String(max_length=254)
    cart_data: Text()  # JSON list of {name, price, quantity, size, image}
    total_value: Float(default=0.0)
    reminder_sent: Boolean(default=False)
    reminder_count: Integer(default=0)
    last_reminder_at: DateTime()
    recovered: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def track(cls, cart_id, items, total_value=0.0, user_id=None, email=None, abandoned_at=None):
        now = abandoned_at or datetime.now(UTC)
        cart = cls(
            cart_id=cart_id,
            user_id=user_id,
            email=email,
            cart_data=json.dumps(items or []),
            total_value=total_value or 0.0,
            created_at=now,
            updated_at=now,
        )
        cart._raise_tracked(now)
        return cart

    def refresh(self, items, total_value=0.0, user_id=None, email=None, abandoned_at=None):
        """The shopper came back and left again: new contents, new idle clock."""
        now = abandoned_at or datetime.now(UTC)
        self.cart_data = json.dumps(items or [])
        self.total_value = total_value or 0.0
        self.user_id = user_id or self.user_id
        self.email = email or self.email
        self.reminder_sent = False
        self.recovered = False
        self.updated_at = now
        self._raise_tracked(now)

    def _raise_tracked(self, now):
        self.raise_(
            AbandonedCartTracked(
                cart_id=str(self.cart_id),
                user_id=str(self.user_id) if self.user_id else None,
                total_value=self.total_value,
                item_count=len(self.items),
                tracked_at=now,
            )
        )

    @property
    def items(self) -> list[dict]:
        return json.loads(self.cart_data) if self.cart_data else []

    @property
    def item_count(self) -> int:
        return sum(int(item.get("quantity") or 1) for item in self.items)

    @property
    def next_reminder_number(self) -> int:
        return (self.reminder_count or 0) + 1

    def record_reminder(self, now=None):
        if self.recovered:
            raise ValidationError({"recovered": ["Cart was already recovered"]})
        if (self.reminder_count or 0) >= MAX_REMINDERS:
            raise ValidationError({"reminder_count": [f"At most {MAX_REMINDERS} reminders per cart"]})

        now = now or datetime.now(UTC)
        self.reminder_sent = True
        self.reminder_count = (self.reminder_count or 0) + 1
        self.last_reminder_at = now

        self.raise_(
            CartReminderSent(
                cart_id=str(self.cart_id),
                user_id=str(self.user_id) if self.user_id else None,
                reminder_count=self.reminder_count,
                reminded_at=now,
            )
        )

    def mark_recovered(self, recovered_at=None):
        if self.recovered:
            return
        now = recovered_at or datetime.now(UTC)
        self.recovered = True
        self.updated_at = now
        self.raise_(AbandonedCartRecovered(cart_id=str(self.cart_id), recovered_at=now))
