"""RestockAlert aggregate: a "notify me" request for an out-of-stock product."""

from datetime import UTC, datetime

from notifications.domain import notifications
from notifications.recovery.events import RestockAlertNotified, RestockAlertRequested
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String


@notifications.aggregate
class RestockAlert:
    product_id: Identifier(required=True)
    user_id: Identifier()
    email: String(max_length=254)
    notified: Boolean(default=False)
    notified_at: DateTime()
    created_at: DateTime()

    @invariant.post
    def alert_needs_a_contact(self):
        if not self.user_id and not self.email:
            raise ValidationError({"email": ["A restock alert needs a user_id or an email"]})

    @classmethod
    def request(cls, product_id, user_id=None, email=None):
        now = datetime.now(UTC)
        alert = cls(
            product_id=product_id,
            user_id=user_id,
            email=email.strip().lower() if email else None,
            created_at=now,
        )
        alert.raise_(
            RestockAlertRequested(
                alert_id=str(alert.id),
                product_id=str(product_id),
                user_id=str(user_id) if user_id else None,
                email=alert.email,
                requested_at=now,
            )
        )
        return alert

    def mark_notified(self, now=None):
        if self.notified:
            raise ValidationError({"notified": ["Restock alert was already notified"]})

        now = now or datetime.now(UTC)
        self.notified = True
        self.notified_at = now
        self.raise_(RestockAlertNotified(alert_id=str(self.id), product_id=str(self.product_id), notified_at=now))
