"""SQLite-based state store for subscriber persistence."""

import sqlite3
import json
import logging
from pathlib import Path
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from .base import BaseStateStore, Mutator
from .keyed_lock import KeyedLock

logger = logging.getLogger(__name__)


class SQLiteStateStore(BaseStateStore):
    """
    SQLite-backed persistent state store.

    Layout: one row per (subscriber key, namespace) holding a JSON value, so
    a subscriber maps to {rate_limit: {...}, memory: [...]}.
    """

    def __init__(
        self,
        db_path: str = "data/subscriber_state.db",
        clock: Optional[Callable[[], datetime]] = None,
        ttl: Optional[timedelta] = None
    ):
        """
        Initialize SQLite state store.

        Args:
            db_path: Path to SQLite database file
            clock: Optional time source (defaults to datetime.now)
            ttl: Idle time after which entries read as absent
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock or datetime.now
        self.ttl = ttl
        self._locks = KeyedLock()
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path, timeout=10, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS subscriber_state (
                subscriber_key TEXT NOT NULL,
                namespace TEXT NOT NULL,
                value TEXT NOT NULL,
                updated_at TIMESTAMP NOT NULL,
                PRIMARY KEY (subscriber_key, namespace)
            )
        """)

        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_state_updated ON subscriber_state(updated_at)"
        )

        conn.close()
        logger.info(f"Database initialized at {self.db_path}")

    def _decode(self, row: Optional[sqlite3.Row]) -> Optional[Any]:
        """Stored value, or None when the row is missing or idle past the ttl."""
        if row is None:
            return None
        if self._is_expired(datetime.fromisoformat(row["updated_at"]), self._clock()):
            return None
        return json.loads(row["value"])

    def get(self, namespace: str, key: str) -> Optional[Any]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(
            "SELECT value, updated_at FROM subscriber_state WHERE subscriber_key = ? AND namespace = ?",
            (key, namespace)
        )
        row = cursor.fetchone()
        conn.close()

        return self._decode(row)

    def update(self, namespace: str, key: str, mutator: Mutator) -> Any:
        with self._locks.hold(key):
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                # Write lock taken before the read so other processes cannot interleave
                cursor.execute("BEGIN IMMEDIATE")
                cursor.execute(
                    "SELECT value, updated_at FROM subscriber_state WHERE subscriber_key = ? AND namespace = ?",
                    (key, namespace)
                )
                row = cursor.fetchone()
                current = self._decode(row)

                new_value, result = mutator(current)

                if new_value is None:
                    cursor.execute(
                        "DELETE FROM subscriber_state WHERE subscriber_key = ? AND namespace = ?",
                        (key, namespace)
                    )
                else:
                    cursor.execute(
                        """
                        INSERT OR REPLACE INTO subscriber_state
                        (subscriber_key, namespace, value, updated_at)
                        VALUES (?, ?, ?, ?)
                        """,
                        (key, namespace, json.dumps(new_value), self._clock().isoformat())
                    )
                cursor.execute("COMMIT")
                return result
            except Exception:
                if conn.in_transaction:
                    cursor.execute("ROLLBACK")
                raise
            finally:
                conn.close()

    def delete(self, namespace: str, key: str) -> None:
        with self._locks.hold(key):
            conn = self._get_connection()
            conn.execute(
                "DELETE FROM subscriber_state WHERE subscriber_key = ? AND namespace = ?",
                (key, namespace)
            )
            conn.close()

    def purge_expired(self, max_idle: timedelta) -> int:
        cutoff = (self._clock() - max_idle).isoformat()
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM subscriber_state WHERE updated_at < ?",
            (cutoff,)
        )
        purged = cursor.rowcount
        conn.close()

        if purged:
            logger.info(f"Purged {purged} idle state entries")
        return purged

    def list_keys(self, namespace: Optional[str] = None) -> list[str]:
        """List subscriber keys, optionally restricted to one namespace."""
        conn = self._get_connection()
        cursor = conn.cursor()

        if namespace:
            cursor.execute(
                "SELECT DISTINCT subscriber_key FROM subscriber_state WHERE namespace = ? ORDER BY subscriber_key",
                (namespace,)
            )
        else:
            cursor.execute(
                "SELECT DISTINCT subscriber_key FROM subscriber_state ORDER BY subscriber_key"
            )

        rows = cursor.fetchall()
        conn.close()
        return [row["subscriber_key"] for row in rows]
