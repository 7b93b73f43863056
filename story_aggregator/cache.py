from __future__ import annotations

import threading
import time
from typing import Any, Callable

from .config import CACHE_TTL_SECONDS


def make_cache_key(**params: Any) -> str:
    parts = [f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")]
    return "aggregate?" + "&".join(parts)


class TTLCache:
    """In-memory key/value store whose entries expire after ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float = CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at < self.ttl_seconds:
                return value
            del self._entries[key]
            return None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def expire(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear_matching(self, predicate: Callable[[str], bool]) -> int:
        with self._lock:
            doomed = [key for key in self._entries if predicate(key)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
