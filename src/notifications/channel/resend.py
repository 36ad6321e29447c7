"""Resend email adapter — sends transactional email over the Resend HTTP API."""

import httpx
import structlog

from notifications.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)


class ResendEmailAdapter(EmailPort):
    """Posts one message per call to ``POST /emails``.

    A non-2xx response is reported as a failed send; network errors propagate
    to the caller, which records them against the recipient.
    """

    provider_name = "resend"

    def __init__(
        self,
        api_key: str,
        from_address: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.from_address = from_address
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
        )

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "text": body,
        }
        if html_body:
            payload["html"] = html_body

        response = self._client.post("/emails", json=payload)

        if response.is_success:
            message_id = response.json().get("id")
            logger.debug("email_accepted", provider=self.provider_name, message_id=message_id)
            return {"message_id": message_id, "status": "sent"}

        error = _error_message(response)
        logger.warning(
            "email_rejected",
            provider=self.provider_name,
            status_code=response.status_code,
            error=error,
        )
        return {"message_id": None, "status": "failed", "error": error}

    def close(self):
        self._client.close()


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    return data.get("message") or data.get("name") or f"HTTP {response.status_code}"
