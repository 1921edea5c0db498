"""Channel that keeps messages locally, for the CLI and local runs."""

import logging
import threading
from typing import List, Tuple

from schemas.responses import DeliveryResult
from .base_channel import BaseChannel

logger = logging.getLogger(__name__)


class ConsoleChannel(BaseChannel):
    """Records every message instead of sending it."""

    def __init__(self):
        self._lock = threading.Lock()
        self.sent: List[Tuple[str, str]] = []

    def send_message(self, recipient_id: str, text: str) -> DeliveryResult:
        with self._lock:
            self.sent.append((recipient_id, text))
        logger.info(f"[console] -> {recipient_id}: {text}")
        return DeliveryResult(success=True)

    def get_channel_name(self) -> str:
        return "console"
