"""Bounded per-subscriber conversation history."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from llm.base_client import Message
from storage.base import BaseStateStore
from .models import ConversationTurn

logger = logging.getLogger(__name__)


class ConversationMemory:
    """
    Keeps the most recent turns for each subscriber, oldest first.

    Eviction is FIFO on turn count: when the cap is exceeded the oldest
    turns are dropped. Turns are never reordered or edited.
    """

    NAMESPACE = "memory"
    MAX_TURNS = 10

    def __init__(
        self,
        store: BaseStateStore,
        max_turns: int = MAX_TURNS,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize conversation memory.

        Args:
            store: Keyed state store holding the histories
            max_turns: Maximum turns kept per subscriber
            clock: Optional time source for turn timestamps
        """
        if max_turns < 1:
            raise ValueError("max_turns must be >= 1")
        self.store = store
        self.max_turns = max_turns
        self._clock = clock or datetime.now

    def append(self, subscriber_id: str, role: str, content: str) -> ConversationTurn:
        """
        Append one turn.

        Args:
            subscriber_id: Normalized subscriber id
            role: "user" or "assistant"
            content: Message text

        Returns:
            The stored ConversationTurn
        """
        turn = ConversationTurn(role=role, content=content, timestamp=self._clock())
        self._append_turns(subscriber_id, [turn])
        return turn

    def append_exchange(
        self,
        subscriber_id: str,
        user_text: str,
        assistant_text: str
    ) -> List[ConversationTurn]:
        """Append a user message and its reply in one atomic update."""
        now = self._clock()
        turns = [
            ConversationTurn(role="user", content=user_text, timestamp=now),
            ConversationTurn(role="assistant", content=assistant_text, timestamp=now),
        ]
        self._append_turns(subscriber_id, turns)
        return turns

    def _append_turns(self, subscriber_id: str, turns: List[ConversationTurn]) -> None:
        new_turns = [turn.model_dump(mode="json") for turn in turns]

        def mutate(current):
            history = list(current or [])
            history.extend(new_turns)
            evicted = max(0, len(history) - self.max_turns)
            return history[evicted:], evicted

        evicted = self.store.update(self.NAMESPACE, subscriber_id, mutate)
        if evicted:
            logger.debug(f"Evicted {evicted} oldest turns for {subscriber_id}")

    def snapshot(self, subscriber_id: str) -> List[ConversationTurn]:
        """Stored turns for a subscriber, oldest first."""
        raw = self.store.get(self.NAMESPACE, subscriber_id) or []
        return [ConversationTurn.model_validate(item) for item in raw]

    def get_context_messages(self, subscriber_id: str) -> List[Message]:
        """
        Get the history as messages for the completion provider.

        Args:
            subscriber_id: Normalized subscriber id

        Returns:
            List of Message objects, oldest first
        """
        return [
            Message(role=turn.role, content=turn.content)
            for turn in self.snapshot(subscriber_id)
        ]

    def turn_count(self, subscriber_id: str) -> int:
        """Number of stored turns."""
        return len(self.store.get(self.NAMESPACE, subscriber_id) or [])

    def clear(self, subscriber_id: str) -> None:
        """Drop a subscriber's history."""
        self.store.delete(self.NAMESPACE, subscriber_id)
