"""Runtime settings for the notification pipeline, read from the environment.

Protean's own configuration (databases, brokers, event processing) lives in
``domain.toml``. This module covers what the pipeline needs on top of it:
the email provider credentials, the storefront identity used in copy and
the secret that signs newsletter unsubscribe links.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    email_provider: str
    resend_api_key: str | None
    resend_api_url: str
    from_address: str
    storefront_name: str
    storefront_url: str
    currency_symbol: str
    api_url: str
    admin_email: str | None
    newsletter_secret: str

    @property
    def email_configured(self) -> bool:
        if self.email_provider == "fake":
            return True
        return bool(self.resend_api_key)


def get_settings() -> Settings:
    """Read settings fresh on every call so tests can patch the environment."""
    return Settings(
        email_provider=os.getenv("NOTIFICATIONS_EMAIL_PROVIDER", "resend").lower(),
        resend_api_key=os.getenv("RESEND_API_KEY") or None,
        resend_api_url=os.getenv("RESEND_API_URL", "https://api.resend.com"),
        from_address=os.getenv("NOTIFICATIONS_FROM_ADDRESS", "Storefront <notifications@storefront.example>"),
        storefront_name=os.getenv("STOREFRONT_NAME", "Storefront"),
        storefront_url=os.getenv("STOREFRONT_URL", "https://storefront.example").rstrip("/"),
        currency_symbol=os.getenv("STOREFRONT_CURRENCY", "৳"),
        api_url=os.getenv("NOTIFICATIONS_API_URL", os.getenv("STOREFRONT_URL", "https://storefront.example")).rstrip("/"),
        admin_email=os.getenv("NOTIFICATIONS_ADMIN_EMAIL") or None,
        newsletter_secret=os.getenv("NEWSLETTER_UNSUBSCRIBE_SECRET", "storefront-newsletter-secret"),
    )
