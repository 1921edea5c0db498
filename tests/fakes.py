"""Test doubles shared by the test modules."""

import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Union

from analytics.base_sink import BaseAnalyticsSink
from channels.base_channel import BaseChannel
from errors import AnalyticsError, LLMError
from llm.base_client import BaseLLMClient, LLMResponse, Message
from schemas.responses import AnalyticsRecord, DeliveryResult


class FakeLLMClient(BaseLLMClient):
    """
    Completion provider returning scripted replies.

    ``reply`` is a string, an exception instance to raise, or a callable
    taking the message list.
    """

    def __init__(self, reply: Union[str, Exception, Callable[[List[Message]], str]] = "OK"):
        self.reply = reply
        self.calls: List[dict] = []
        self._lock = threading.Lock()

    def chat(self, messages, temperature=0.7, max_tokens=500) -> LLMResponse:
        with self._lock:
            self.calls.append({
                "messages": list(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
            })
        if isinstance(self.reply, Exception):
            raise self.reply
        content = self.reply(messages) if callable(self.reply) else self.reply
        return LLMResponse(content=content, finish_reason="stop")

    def get_provider_name(self) -> str:
        return "fake"

    def get_model_name(self) -> str:
        return "fake-model"


def timeout_error() -> LLMError:
    return LLMError("Request timed out after 10s")


class RecordingChannel(BaseChannel):
    """Channel that records messages and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[tuple] = []
        self._lock = threading.Lock()

    def send_message(self, recipient_id: str, text: str) -> DeliveryResult:
        with self._lock:
            self.sent.append((recipient_id, text))
        if self.fail:
            return DeliveryResult(success=False, error="channel down")
        return DeliveryResult(success=True, provider_response={"status": "success"})

    def get_channel_name(self) -> str:
        return "recording"

    def sent_to(self, recipient_id: str) -> List[str]:
        return [text for rid, text in self.sent if rid == recipient_id]


class RecordingSink(BaseAnalyticsSink):
    """Analytics sink that records or rejects records."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: List[AnalyticsRecord] = []

    def emit(self, record: AnalyticsRecord) -> None:
        if self.fail:
            raise AnalyticsError("sink unavailable")
        self.records.append(record)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 3, 2, 10, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)
