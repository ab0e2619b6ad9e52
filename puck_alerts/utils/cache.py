"""In-memory TTL cache for upstream API responses."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

from ..logging import logger


class TTLCache:
    """Process-local key/value cache with per-entry expiry.

    Entries carry their own TTL so one cache can hold both the static tier
    (rosters, schedules) and the live tier (landing, play-by-play). Expired
    entries are dropped lazily on read.

    Safe for concurrent readers; invalidation and writes take the same lock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                logger.debug("api_cache_expired", key=key)
                return None
        return value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value for ``ttl_seconds``. Non-positive TTLs are ignored."""
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def invalidate(self, keys: Iterable[str]) -> int:
        """Remove the given keys. Returns how many were present."""
        removed = 0
        with self._lock:
            for key in keys:
                if self._entries.pop(key, None) is not None:
                    removed += 1
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
