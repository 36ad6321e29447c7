"""Fake email adapter — records sent emails for testing."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages in memory for test assertions."""

    provider_name = "fake"

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.failing_addresses: set[str] = set()
        self.raise_on_send = False

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Email delivery failed",
        failing_addresses: list[str] | None = None,
        raise_on_send: bool = False,
    ):
        """Configure the fake adapter behavior for testing.

        ``failing_addresses`` rejects only those recipients; ``raise_on_send``
        simulates a transport error instead of a rejected message.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_addresses = {a.lower() for a in failing_addresses or []}
        self.raise_on_send = raise_on_send

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        if self.raise_on_send:
            raise ConnectionError(self.failure_reason)

        if not self.should_succeed or to.lower() in self.failing_addresses:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
                "html_body": html_body,
            }
        )

        return {"message_id": message_id, "status": "sent"}

    def sent_to(self, address: str) -> list[dict]:
        return [e for e in self.sent_emails if e["to"].lower() == address.lower()]
