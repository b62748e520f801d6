"""
SQLite-backed key-value store.

Each call opens its own connection in a worker thread and closes it before
returning, so no handle is held between operations. SQLite serializes
concurrent writers itself.
"""

import asyncio
import sqlite3
from pathlib import Path

from loguru import logger

from credstore.errors import UnderlyingStoreError

# =============================================================================
# CONFIGURATION
# =============================================================================

# Seconds to wait on a locked database before failing
CONNECT_TIMEOUT = 5.0


# =============================================================================
# SQLITE STORE
# =============================================================================


class SQLiteKeyValueStore:
    """
    Key-value store in a single SQLite table.

    Schema:
        kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=CONNECT_TIMEOUT)
        if not self._initialized:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
            self._initialized = True
            logger.debug(f"Initialized key-value table in {self.db_path}")
        return conn

    # =========================================================================
    # SYNC OPERATIONS (run in worker threads)
    # =========================================================================

    def _get_sync(self, key: str) -> str | None:
        conn = self._connect()
        try:
            cursor = conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _set_sync(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def _remove_sync(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    # =========================================================================
    # ASYNC API
    # =========================================================================

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except (sqlite3.Error, OSError) as e:
            raise UnderlyingStoreError(f"SQLite get failed for {key!r}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._set_sync, key, value)
        except (sqlite3.Error, OSError) as e:
            raise UnderlyingStoreError(f"SQLite set failed for {key!r}: {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove_sync, key)
        except (sqlite3.Error, OSError) as e:
            raise UnderlyingStoreError(f"SQLite remove failed for {key!r}: {e}") from e
