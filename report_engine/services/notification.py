"""Result notifications sent to guardians over an SMS gateway.

Sending is best-effort: one attempt per recipient, no retry, bounded by
an HTTP timeout. Callers treat :class:`NotificationError` as a local,
per-recipient failure.

Configuration (via environment variables):
- SMS_GATEWAY_URL: HTTP endpoint accepting JSON send requests
- SMS_GATEWAY_API_KEY: bearer token for the gateway
- SMS_SENDER_ID: sender name shown to recipients
"""

import logging

import httpx

from report_engine.core.config import settings
from report_engine.core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class SmsGateway:
    """Sends a single text message to one phone number."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        sender_id: str = "SCHOOL",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.url = url
        self.sender_id = sender_id
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = client or httpx.Client(timeout=timeout, headers=headers)

    def send(self, recipient: str, message: str) -> None:
        """Deliver one message; raises NotificationError on any failure."""
        payload = {
            "sender": self.sender_id,
            "recipient": recipient,
            "message": message,
        }
        try:
            response = self.client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise NotificationError(recipient, f"gateway unreachable: {e}") from e

        if response.status_code >= 400:
            raise NotificationError(
                recipient,
                f"gateway returned HTTP {response.status_code}: {response.text[:200]}",
            )
        logger.debug(f"[SMS] Sent to {recipient}")

    def close(self) -> None:
        self.client.close()


def get_sms_gateway() -> SmsGateway | None:
    """Gateway built from settings, or None when sending is not configured."""
    if not settings.SMS_GATEWAY_URL:
        return None
    return SmsGateway(
        url=settings.SMS_GATEWAY_URL,
        api_key=settings.SMS_GATEWAY_API_KEY,
        sender_id=settings.SMS_SENDER_ID,
        timeout=settings.SMS_TIMEOUT_SECONDS,
    )


def build_result_message(
    student_name: str,
    reg_no: str,
    division: str | None,
    aggregate: int | None,
    viewer_base_url: str,
) -> str:
    return (
        f"Hello, results for {student_name} are out. "
        f"Division: {division or 'N/A'}, "
        f"Aggregate: {aggregate if aggregate is not None else 'N/A'}. "
        f"More details at {viewer_base_url}/report-viewer. "
        f"RegNo: {reg_no}."
    )
