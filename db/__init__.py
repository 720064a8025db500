"""
Persistence for the activity log.

The log is kept behind a small KeyValueStore interface so it can live in
memory (default) or in a SQLite file (ACTIVITY_DB_PATH).
"""

from config.config import Config

from .activity_log import ACTIVITY_LOG_KEY, ActivityEntry, ActivityRecorder
from .kv_store import InMemoryKeyValueStore, KeyValueStore, SqliteKeyValueStore


def create_store(config: Config) -> KeyValueStore:
    if config.ACTIVITY_DB_PATH:
        return SqliteKeyValueStore(config.ACTIVITY_DB_PATH)
    return InMemoryKeyValueStore()


__all__ = [
    "ACTIVITY_LOG_KEY",
    "ActivityEntry",
    "ActivityRecorder",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqliteKeyValueStore",
    "create_store",
]
