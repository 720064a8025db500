"""
Bounded, newest-first activity log stored as one JSON list under one key.

Writes are a plain read-modify-write with no locking: concurrent records may
overwrite each other (last write wins). The log is best-effort telemetry.
"""

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from models.conversation import PREVIEW_MAX_CHARS
from utils.logger import get_logger

from .kv_store import KeyValueStore

logger = get_logger(__name__)

ACTIVITY_LOG_KEY = "activity_log"
DEFAULT_MAX_ENTRIES = 200


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ActivityEntry:
    time: str
    endpoint: str
    mode: str
    model: str
    query: str

    @classmethod
    def create(cls, *, endpoint: str, mode: str, model: str, query: str, time: str | None = None) -> "ActivityEntry":
        return cls(
            time=time or utc_timestamp(),
            endpoint=endpoint,
            mode=mode,
            model=model,
            query=(query or "")[:PREVIEW_MAX_CHARS],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ActivityRecorder:
    def __init__(self, store: KeyValueStore, *, max_entries: int = DEFAULT_MAX_ENTRIES, key: str = ACTIVITY_LOG_KEY):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._store = store
        self._max_entries = max_entries
        self._key = key

    @property
    def max_entries(self) -> int:
        return self._max_entries

    async def _load(self) -> list[dict[str, Any]]:
        raw = await self._store.get(self._key)
        if not raw:
            return []
        logs = json.loads(raw)
        if not isinstance(logs, list):
            raise ValueError(f"Activity log under {self._key!r} is not a list")
        return logs

    async def record(self, entry: ActivityEntry) -> bool:
        """
        Prepend an entry and truncate to max_entries.

        Never raises: store failures are logged and reported as False, so a
        broken log can never affect a user-facing response.
        """
        try:
            logs = await self._load()
            logs.insert(0, entry.to_dict())
            del logs[self._max_entries:]
            await self._store.put(self._key, json.dumps(logs, ensure_ascii=False))
            return True
        except Exception as exc:
            logger.warning(
                "Activity log write failed",
                extra={"extra_fields": {"error": str(exc), "error_type": type(exc).__name__}},
            )
            return False

    async def entries(self) -> list[dict[str, Any]]:
        return await self._load()

    async def stats(self, since: str | None = None, now: datetime | None = None) -> dict[str, Any]:
        """
        Summarize the log.

        Args:
            since: ISO timestamp; when set, only entries strictly newer are listed
            now: Reference time for the "today" count (defaults to current UTC time)

        Returns:
            {"total", "today", "logs"}; total and today count the whole log
        """
        try:
            logs = await self._load()
        except Exception as exc:
            logger.warning(
                "Activity log read failed",
                extra={"extra_fields": {"error": str(exc), "error_type": type(exc).__name__}},
            )
            return {"total": 0, "today": 0, "logs": []}

        total = len(logs)
        today_str = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
        today = sum(1 for entry in logs if str(entry.get("time", "")).startswith(today_str))

        if since:
            logs = [entry for entry in logs if str(entry.get("time", "")) > since]

        return {"total": total, "today": today, "logs": logs}
