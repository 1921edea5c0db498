"""Admin alerts for escalated conversations."""

import logging
from datetime import datetime
from typing import Optional, Union

from channels.base_channel import BaseChannel
from schemas.responses import DeliveryResult

logger = logging.getLogger(__name__)


class EscalationNotifier:
    """Sends one alert per escalated message to a fixed admin recipient."""

    def __init__(
        self,
        channel: BaseChannel,
        admin_recipient_id: Optional[str],
        alert_template: str
    ):
        """
        Initialize notifier.

        Args:
            channel: Outbound channel used for the alert
            admin_recipient_id: Recipient that receives alerts
            alert_template: Template with {name} {subscriber_id} {message} {timestamp}
        """
        self.channel = channel
        self.admin_recipient_id = admin_recipient_id
        self.alert_template = alert_template

        if not admin_recipient_id:
            logger.warning("ADMIN_SUBSCRIBER_ID is not configured; escalations will not be notified")

    def notify(
        self,
        subscriber_id: str,
        display_name: str,
        message: str,
        timestamp: Union[datetime, str]
    ) -> DeliveryResult:
        """
        Alert the admin about an escalated message. Never raises, never retries.

        Returns:
            DeliveryResult of the alert
        """
        if not self.admin_recipient_id:
            logger.warning(f"NotificationFailed for {subscriber_id}: admin recipient not configured")
            return DeliveryResult(success=False, error="ADMIN_SUBSCRIBER_ID not configured")

        if isinstance(timestamp, datetime):
            timestamp = timestamp.isoformat()

        try:
            text = self.alert_template.format(
                name=display_name,
                subscriber_id=subscriber_id,
                message=message,
                timestamp=timestamp,
            ).strip()
            result = self.channel.send_message(self.admin_recipient_id, text)
        except Exception as e:
            logger.error(f"NotificationFailed for {subscriber_id}: {e}")
            return DeliveryResult(success=False, error=str(e))

        if result.success:
            logger.info(f"Admin notified about {subscriber_id}")
        else:
            logger.error(f"NotificationFailed for {subscriber_id}: {result.error}")
        return result
