"""TTL cache for search results."""

import threading
import time
from typing import Any


class InMemoryTTLCache:
    """
    In-memory cache with a fixed time-to-live per entry.

    Keys are normalized queries (trimmed, case-folded, inner whitespace
    collapsed). A TTL of zero or less disables the cache: get() always misses
    and set() is a no-op.
    """

    def __init__(self, ttl_seconds: int, max_entries: int = 512):
        self._cache: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._ttl = float(ttl_seconds)
        self._max_entries = max_entries

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    @staticmethod
    def _make_key(text: str) -> str:
        return " ".join((text or "").split()).casefold()

    def get(self, text: str) -> Any | None:
        if not self.enabled:
            return None
        key = self._make_key(text)
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if time.monotonic() < expires_at:
                return value
            del self._cache[key]
            return None

    def set(self, text: str, value: Any) -> None:
        if not self.enabled:
            return
        key = self._make_key(text)
        with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                # evict the entry closest to expiry
                oldest = min(self._cache, key=lambda k: self._cache[k][1])
                del self._cache[oldest]
            self._cache[key] = (value, time.monotonic() + self._ttl)
