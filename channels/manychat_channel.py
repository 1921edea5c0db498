"""ManyChat WhatsApp delivery channel."""

import logging
from typing import Optional

import requests

from schemas.responses import DeliveryResult
from .base_channel import BaseChannel

logger = logging.getLogger(__name__)


class ManyChatChannel(BaseChannel):
    """Sends text messages through the ManyChat sendContent API."""

    DEFAULT_API_URL = "https://api.manychat.com/whatsapp/sending/sendContent"
    MESSAGE_TAG = "ACCOUNT_UPDATE"

    def __init__(
        self,
        token: Optional[str],
        api_url: Optional[str] = None,
        timeout: float = 10
    ):
        """
        Initialize ManyChat channel.

        Args:
            token: ManyChat API token (sending is disabled without it)
            api_url: sendContent endpoint (default: WhatsApp endpoint)
            timeout: Request timeout in seconds
        """
        self.token = token
        self.api_url = api_url or self.DEFAULT_API_URL
        self.timeout = timeout

        if not self.token:
            logger.warning("MANYCHAT_TOKEN is not configured; messages cannot be sent")

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def build_payload(self, recipient_id: str, text: str) -> dict:
        """Request body for one text message."""
        return {
            "subscriber_id": recipient_id,
            "data": {
                "version": "v2",
                "content": {
                    "messages": [
                        {"type": "text", "text": text}
                    ]
                }
            },
            "message_tag": self.MESSAGE_TAG,
        }

    def send_message(self, recipient_id: str, text: str) -> DeliveryResult:
        if not self.token:
            logger.warning(f"DeliveryFailed to {recipient_id}: MANYCHAT_TOKEN not configured")
            return DeliveryResult(success=False, error="MANYCHAT_TOKEN not configured")

        logger.info(f"Sending message to {recipient_id} ({len(text)} chars)")

        try:
            response = requests.post(
                self.api_url,
                json=self.build_payload(recipient_id, text),
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.error(f"DeliveryFailed to {recipient_id}: timeout after {self.timeout}s")
            return DeliveryResult(success=False, error=f"Request timeout after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            logger.error(f"DeliveryFailed to {recipient_id}: {e}")
            return DeliveryResult(success=False, error=str(e))

        try:
            data = response.json()
        except ValueError:
            data = response.text

        if response.status_code == 200 and isinstance(data, dict) and data.get("status") == "success":
            logger.info(f"Message delivered to {recipient_id}")
            return DeliveryResult(success=True, provider_response=data)

        logger.error(
            f"DeliveryFailed to {recipient_id}: unexpected response "
            f"(status={response.status_code}, body={data})"
        )
        return DeliveryResult(
            success=False,
            provider_response=data,
            error=f"Unexpected ManyChat response (HTTP {response.status_code})"
        )

    def get_channel_name(self) -> str:
        return "manychat"
