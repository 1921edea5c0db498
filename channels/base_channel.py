"""Outbound messaging channel interface."""

from abc import ABC, abstractmethod

from schemas.responses import DeliveryResult


class BaseChannel(ABC):
    """Delivers a text message to a recipient. Implementations never retry."""

    @abstractmethod
    def send_message(self, recipient_id: str, text: str) -> DeliveryResult:
        """
        Send a message.

        Args:
            recipient_id: Channel-specific recipient id
            text: Message text

        Returns:
            DeliveryResult; failures are reported, not raised
        """
        pass

    @abstractmethod
    def get_channel_name(self) -> str:
        """Get the channel name."""
        pass
