"""Inbound message schema and normalization."""

from typing import Optional
from pydantic import BaseModel, field_validator

from errors import InvalidInboundMessage

SUBSCRIBER_PREFIXES = ("user:",)
DEFAULT_DISPLAY_NAME = "viajero"


def normalize_subscriber_id(raw) -> str:
    """Strip known channel prefixes and surrounding whitespace."""
    value = "" if raw is None else str(raw).strip()
    for prefix in SUBSCRIBER_PREFIXES:
        if value.startswith(prefix):
            value = value[len(prefix):]
    return value.strip()


class InboundMessage(BaseModel):
    """A message received from the messaging channel."""
    subscriber_id: str
    message_text: str
    display_name: str = DEFAULT_DISPLAY_NAME
    phone: Optional[str] = None

    @field_validator("subscriber_id", mode="before")
    @classmethod
    def _normalize_subscriber(cls, value):
        return normalize_subscriber_id(value)

    @field_validator("message_text", mode="before")
    @classmethod
    def _normalize_text(cls, value):
        return "" if value is None else str(value).strip()

    @field_validator("display_name", mode="before")
    @classmethod
    def _default_name(cls, value):
        value = "" if value is None else str(value).strip()
        return value or DEFAULT_DISPLAY_NAME

    def validate_required(self) -> None:
        """Raise InvalidInboundMessage if required fields are empty."""
        missing = []
        if not self.subscriber_id:
            missing.append("subscriber_id")
        if not self.message_text:
            missing.append("message_text")
        if missing:
            raise InvalidInboundMessage(
                f"Missing required fields: {', '.join(missing)}"
            )

    @classmethod
    def from_webhook(cls, payload: Optional[dict]) -> "InboundMessage":
        """
        Build an inbound message from a channel webhook body.

        Accepts the field names the channel sends (subscriber_id or key,
        last_input_text or text, first_name, phone).

        Args:
            payload: Raw webhook body

        Returns:
            Normalized InboundMessage (not yet validated)
        """
        body = payload or {}
        return cls(
            subscriber_id=body.get("subscriber_id") or body.get("key") or "",
            message_text=body.get("last_input_text") or body.get("text") or "",
            display_name=body.get("first_name") or DEFAULT_DISPLAY_NAME,
            phone=body.get("phone") or None,
        )
