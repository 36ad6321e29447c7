"""Cross-domain event contracts for Marketing (newsletter) events.

Newsletter sign-ups happen on the storefront footer and do not require an
account, so subscribers are keyed by email rather than customer id.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, String


class NewsletterSubscribed(BaseEvent):
    """An email address joined (or re-joined) the newsletter."""

    __version__ = 1

    email = String(required=True)
    name = String()
    subscribed_at = DateTime(required=True)


class NewsletterUnsubscribed(BaseEvent):
    """An email address left the newsletter."""

    __version__ = 1

    email = String(required=True)
    unsubscribed_at = DateTime(required=True)
