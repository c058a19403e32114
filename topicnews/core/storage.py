"""
Key-value storage for topicnews.
"""
import asyncio
import sqlite3
import logging
from pathlib import Path
from typing import Dict, Optional

from topicnews.errors import StorageError

logger = logging.getLogger(__name__)

class SqliteKeyValueStore:
    """
    Stores string values by key in a single SQLite table.

    Reads and writes run in the event loop's default executor so callers
    can await them without blocking the loop.
    """
    def __init__(self, path: str = "topicnews.db"):
        self.path = Path(path)
        self._write_lock = None
        self._init_db()

    def _init_db(self):
        """Initialize the SQLite database."""
        try:
            if self.path.parent != Path('.'):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with sqlite3.connect(self.path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT,
                        updated DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """)
        except (OSError, sqlite3.Error) as e:
            # Left to surface on first get/set so construction never fails
            logger.error(f"Could not initialise storage at {self.path}: {e}")

    def _get(self, key: str) -> Optional[str]:
        try:
            with sqlite3.connect(self.path) as conn:
                cursor = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?",
                    (key,)
                )
                result = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Error reading {key!r} from {self.path}: {e}") from e
        return result[0] if result else None

    def _set(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self.path) as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO kv_store (key, value, updated)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    """,
                    (key, value)
                )
        except sqlite3.Error as e:
            raise StorageError(f"Error writing {key!r} to {self.path}: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        """
        Get the value stored under a key.

        Args:
            key: The key to look up

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the database cannot be read
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._get, key)

    async def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the database cannot be written
        """
        # Writes commit in call order
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        async with self._write_lock:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._set, key, value)


class MemoryKeyValueStore:
    """In-process store, used when nothing needs to survive a restart."""
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value
