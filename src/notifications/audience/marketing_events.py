"""Inbound cross-domain event handler — Notifications reacts to newsletter events."""

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification
from notifications.projections.audience import NewsletterSubscriber
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.marketing import NewsletterSubscribed, NewsletterUnsubscribed

logger = structlog.get_logger(__name__)

notifications.register_external_event(NewsletterSubscribed, "Marketing.NewsletterSubscribed.v1")
notifications.register_external_event(NewsletterUnsubscribed, "Marketing.NewsletterUnsubscribed.v1")


@notifications.event_handler(part_of=Notification, stream_category="marketing::subscriber")
class MarketingEventsHandler:
    """Maintains the newsletter subscriber read model."""

    @handle(NewsletterSubscribed)
    def on_newsletter_subscribed(self, event: NewsletterSubscribed) -> None:
        repo = current_domain.repository_for(NewsletterSubscriber)
        email = event.email.strip().lower()

        try:
            subscriber = repo.get(email)
            subscriber.is_active = True
            subscriber.name = event.name or subscriber.name
            subscriber.updated_at = event.subscribed_at
        except ObjectNotFoundError:
            subscriber = NewsletterSubscriber(
                email=email,
                name=event.name,
                is_active=True,
                subscribed_at=event.subscribed_at,
                updated_at=event.subscribed_at,
            )

        repo.add(subscriber)

    @handle(NewsletterUnsubscribed)
    def on_newsletter_unsubscribed(self, event: NewsletterUnsubscribed) -> None:
        repo = current_domain.repository_for(NewsletterSubscriber)
        try:
            subscriber = repo.get(event.email.strip().lower())
        except ObjectNotFoundError:
            logger.info("Unsubscribe for unknown address", email=event.email)
            return

        subscriber.is_active = False
        subscriber.updated_at = event.unsubscribed_at
        repo.add(subscriber)
