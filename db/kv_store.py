"""Key-value stores backing the activity log."""

import asyncio
import sqlite3
from abc import ABC, abstractmethod
from contextlib import closing
from pathlib import Path

from utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Minimal async get/put store holding string values under string keys."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store (or overwrite) a value."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteKeyValueStore(KeyValueStore):
    """Single-table SQLite store. Blocking sqlite3 calls run in a worker thread."""

    def __init__(self, path: str):
        self._path = path
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self._path, check_same_thread=False)

    def _init_db(self) -> None:
        with closing(self._get_conn()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
        logger.info("Key-value store initialised at %s", self._path)

    def _get_sync(self, key: str) -> str | None:
        with closing(self._get_conn()) as conn, conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def _put_sync(self, key: str, value: str) -> None:
        with closing(self._get_conn()) as conn, conn:
            conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def put(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._put_sync, key, value)
