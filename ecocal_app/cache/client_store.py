"""Client-local persistence of the last good calendar view."""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from ..errors import MalformedDataError, PersistenceError
from ..events.models import ClientCacheEntry
from ..utils.time import format_iso


class ClientCacheStore:
    """
    SQLite-backed durable store for ClientCacheEntry values.

    A save with an empty event list is refused, so a failed or empty refresh
    can never overwrite a previously good entry.
    """

    def __init__(self, db_path: str = "ecocal_client.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("client.store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS cache_entries (
                        cache_key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        fetched_at TEXT NOT NULL,
                        event_count INTEGER NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Cannot initialize client cache: {e}",
                operation="init",
                target=str(self.db_path)
            )

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e))
            raise
        finally:
            if conn:
                conn.close()

    def load(self, cache_key: str) -> Optional[ClientCacheEntry]:
        """
        Read the persisted entry for a key.

        Unreadable entries are logged and reported as absent.

        Args:
            cache_key: Well-known client cache key

        Returns:
            The entry, or None if nothing usable is stored
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT payload FROM cache_entries WHERE cache_key = ?
                """, (cache_key,)).fetchone()
        except sqlite3.Error as e:
            self.logger.error("Failed to read client cache", cache_key=cache_key, error=str(e))
            return None

        if row is None:
            return None

        try:
            entry = ClientCacheEntry.from_json(row["payload"])
        except MalformedDataError as e:
            self.logger.warning("Discarding unreadable client cache entry", cache_key=cache_key, error=str(e))
            return None

        if entry.skipped:
            self.logger.warning(
                "Dropped undecodable events from client cache",
                cache_key=cache_key,
                skipped=entry.skipped
            )

        if entry.is_empty:
            return None
        return entry

    def save(self, cache_key: str, entry: ClientCacheEntry) -> bool:
        """
        Persist an entry, replacing the previous one.

        Args:
            cache_key: Well-known client cache key
            entry: Entry to persist

        Returns:
            True if written, False if the entry was empty and refused

        Raises:
            PersistenceError: if the database write fails
        """
        if entry.is_empty:
            self.logger.warning("Refusing to persist empty calendar view", cache_key=cache_key)
            return False

        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("""
                        INSERT OR REPLACE INTO cache_entries (
                            cache_key, payload, fetched_at, event_count, updated_at
                        ) VALUES (?, ?, ?, ?, ?)
                    """, (
                        cache_key,
                        entry.to_json(),
                        format_iso(entry.fetched_at),
                        len(entry.events),
                        datetime.now(timezone.utc).isoformat()
                    ))
                    conn.commit()

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to persist client cache: {e}",
                    operation="save",
                    target=cache_key
                )

        self.logger.info(
            "Client cache persisted",
            cache_key=cache_key,
            event_count=len(entry.events),
            fetched_at=format_iso(entry.fetched_at)
        )
        return True

    def delete(self, cache_key: str) -> bool:
        """Remove an entry. Returns True if one existed."""
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("""
                        DELETE FROM cache_entries WHERE cache_key = ?
                    """, (cache_key,))
                    conn.commit()
                    return cursor.rowcount > 0

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to delete client cache: {e}",
                    operation="delete",
                    target=cache_key
                )

    def get_stats(self) -> dict[str, Any]:
        """Get database statistics."""
        try:
            with self._get_connection() as conn:
                rows = conn.execute("""
                    SELECT cache_key, event_count, fetched_at FROM cache_entries
                """).fetchall()

                return {
                    row["cache_key"]: {
                        "event_count": row["event_count"],
                        "fetched_at": row["fetched_at"],
                    }
                    for row in rows
                }

        except sqlite3.Error as e:
            self.logger.error("Failed to get stats", error=str(e))
            return {}
