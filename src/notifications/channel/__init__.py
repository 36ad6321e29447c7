"""Channel adapter registry — pluggable notification delivery channels.

Email is the only server-side channel. The adapter is chosen by
``NOTIFICATIONS_EMAIL_PROVIDER``: ``resend`` (default) needs
``RESEND_API_KEY`` and yields no adapter without it; ``fake`` records
messages in memory for tests and local development.
"""

from notifications.channel.email_port import EmailPort
from notifications.config import get_settings

_channel_instances: dict[str, EmailPort | None] = {}

EMAIL = "email"


def get_email_channel() -> EmailPort | None:
    """Return the configured email adapter, or None when email is unconfigured."""
    if EMAIL not in _channel_instances:
        settings = get_settings()

        if settings.email_provider == "fake":
            from notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[EMAIL] = FakeEmailAdapter()
        elif settings.email_provider == "resend":
            if settings.resend_api_key:
                from notifications.channel.resend import ResendEmailAdapter

                _channel_instances[EMAIL] = ResendEmailAdapter(
                    api_key=settings.resend_api_key,
                    from_address=settings.from_address,
                    base_url=settings.resend_api_url,
                )
            else:
                _channel_instances[EMAIL] = None
        else:
            raise ValueError(f"Unknown email provider: {settings.email_provider}")

    return _channel_instances[EMAIL]


def set_email_channel(adapter: EmailPort | None):
    """Install a specific adapter (or None to simulate a missing key)."""
    _channel_instances[EMAIL] = adapter


def reset_channels():
    """Close and forget every adapter; the next lookup re-reads settings."""
    for adapter in _channel_instances.values():
        if adapter is not None:
            adapter.close()
    _channel_instances.clear()
