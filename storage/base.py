"""Keyed state store interface."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Tuple

# mutator(current_value) -> (new_value, result)
Mutator = Callable[[Optional[Any]], Tuple[Any, Any]]


class BaseStateStore(ABC):
    """
    Per-subscriber state behind a narrow get/update interface.

    Values are JSON-compatible and grouped by namespace ("rate_limit",
    "memory", ...). ``update`` runs the mutator atomically for one
    (namespace, key) pair; updates to different keys may run concurrently.

    With a ``ttl`` set, an entry not updated for longer than ``ttl`` reads
    as absent even before ``purge_expired`` removes it. The ttl must not be
    shorter than the rate-limit window.
    """

    ttl: Optional[timedelta] = None

    def _is_expired(self, updated_at: datetime, now: datetime) -> bool:
        return self.ttl is not None and now - updated_at > self.ttl

    @abstractmethod
    def get(self, namespace: str, key: str) -> Optional[Any]:
        """Return the stored value or None."""
        pass

    @abstractmethod
    def update(self, namespace: str, key: str, mutator: Mutator) -> Any:
        """
        Atomically read, transform and write one value.

        Args:
            namespace: State namespace
            key: Subscriber key
            mutator: Receives the current value (None if absent) and returns
                (new_value, result). A new_value of None deletes the entry.

        Returns:
            The mutator's result
        """
        pass

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Remove one value."""
        pass

    @abstractmethod
    def purge_expired(self, max_idle: timedelta) -> int:
        """Drop entries not updated within ``max_idle``; return how many."""
        pass

    @abstractmethod
    def list_keys(self, namespace: Optional[str] = None) -> list[str]:
        """Subscriber keys with stored state, optionally for one namespace."""
        pass
