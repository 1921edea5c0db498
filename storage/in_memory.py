"""In-process state store for single-instance deployments."""

import copy
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from .base import BaseStateStore, Mutator
from .keyed_lock import KeyedLock

logger = logging.getLogger(__name__)


class InMemoryStateStore(BaseStateStore):
    """Dictionary-backed store with one lock per subscriber key."""

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        ttl: Optional[timedelta] = None
    ):
        self._clock = clock or datetime.now
        self.ttl = ttl
        self._data: Dict[Tuple[str, str], Tuple[Any, datetime]] = {}
        self._data_guard = threading.Lock()
        self._locks = KeyedLock()

    def get(self, namespace: str, key: str) -> Optional[Any]:
        with self._data_guard:
            entry = self._data.get((namespace, key))
        if entry is None or self._is_expired(entry[1], self._clock()):
            return None
        return copy.deepcopy(entry[0])

    def update(self, namespace: str, key: str, mutator: Mutator) -> Any:
        with self._locks.hold(key):
            current = self.get(namespace, key)
            new_value, result = mutator(current)
            with self._data_guard:
                if new_value is None:
                    self._data.pop((namespace, key), None)
                else:
                    self._data[(namespace, key)] = (
                        copy.deepcopy(new_value), self._clock()
                    )
            return result

    def delete(self, namespace: str, key: str) -> None:
        with self._locks.hold(key):
            with self._data_guard:
                self._data.pop((namespace, key), None)

    def purge_expired(self, max_idle: timedelta) -> int:
        cutoff = self._clock() - max_idle
        with self._data_guard:
            expired = [k for k, (_, updated) in self._data.items() if updated < cutoff]
            for k in expired:
                del self._data[k]
        if expired:
            logger.info(f"Purged {len(expired)} idle state entries")
        return len(expired)

    def list_keys(self, namespace: Optional[str] = None) -> list[str]:
        with self._data_guard:
            keys = {key for ns, key in self._data if namespace is None or ns == namespace}
        return sorted(keys)
