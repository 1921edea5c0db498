"""Per-subscriber state storage."""

from .base import BaseStateStore
from .keyed_lock import KeyedLock
from .in_memory import InMemoryStateStore
from .sqlite_store import SQLiteStateStore

__all__ = [
    "BaseStateStore",
    "KeyedLock",
    "InMemoryStateStore",
    "SQLiteStateStore",
]
