"""Newsletter unsubscribe links — signing, verification and the commands behind them.

Every campaign email carries a link with the subscriber's address and a
token derived from it. The token is the first 32 hex characters of
SHA-256 over the address followed by the configured secret, so a link
can't be forged for someone else's address without the secret.
"""

import hashlib
import hmac
from datetime import UTC, datetime
from urllib.parse import urlencode

import structlog
from notifications.config import get_settings
from notifications.domain import notifications
from notifications.notification.notification import Notification
from notifications.projections.audience import NewsletterSubscriber
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)

TOKEN_LENGTH = 32


def unsubscribe_token(email: str, secret: str | None = None) -> str:
    secret = secret if secret is not None else get_settings().newsletter_secret
    return hashlib.sha256(f"{email}{secret}".encode()).hexdigest()[:TOKEN_LENGTH]


def verify_unsubscribe_token(email: str, token: str | None) -> bool:
    if not email or not token:
        return False
    return hmac.compare_digest(unsubscribe_token(email), token)


def unsubscribe_url(email: str) -> str:
    query = urlencode({"email": email, "token": unsubscribe_token(email)})
    return f"{get_settings().api_url}/notifications/newsletter/unsubscribe?{query}"


@notifications.command(part_of="Notification")
class UnsubscribeNewsletter:
    email: String(required=True, max_length=254)
    token: String(required=True, max_length=64)


@notifications.command(part_of="Notification")
class ResubscribeNewsletter:
    """Undo an unsubscribe from the confirmation page; takes the same link token."""

    email: String(required=True, max_length=254)
    token: String(required=True, max_length=64)


@notifications.command_handler(part_of=Notification)
class NewsletterSubscriptionHandler:
    @handle(UnsubscribeNewsletter)
    def unsubscribe(self, command: UnsubscribeNewsletter):
        return self._set_active(command.email, command.token, False)

    @handle(ResubscribeNewsletter)
    def resubscribe(self, command: ResubscribeNewsletter):
        return self._set_active(command.email, command.token, True)

    def _set_active(self, email: str, token: str, is_active: bool) -> bool:
        # Tokens are issued for the address exactly as the subscriber row stores it
        if not verify_unsubscribe_token(email, token):
            raise ValidationError({"token": ["Invalid or expired link"]})

        repo = current_domain.repository_for(NewsletterSubscriber)
        subscriber = repo.get(email.strip().lower())

        if subscriber.is_active == is_active:
            return False

        subscriber.is_active = is_active
        subscriber.updated_at = datetime.now(UTC)
        repo.add(subscriber)
        logger.info("Newsletter subscription changed", email=subscriber.email, is_active=is_active)
        return True
