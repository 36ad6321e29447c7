"""Email channel port — abstract interface for email dispatch."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters.

    Adapters never raise for a rejected message; they report it through
    ``status``. Transport errors may still raise and are caught per recipient.
    """

    provider_name: str = "email"

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send one email to one recipient.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

    def close(self):
        """Release transport resources. Adapters without any need not override."""
