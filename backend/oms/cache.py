# Overview: Process-local TTL cache injected into the app (identity, phantom tokens, order listings).

"""
Capacity-bounded key/value cache with a per-entry time-to-live.

create_app() builds one instance and stores it on app.extensions["oms_cache"].
Services receive it explicitly; create_app(cache=...) accepts any object with
the same get/set/delete surface.

Values must be immutable (frozen dataclasses, tuples, strings, or dicts that
callers never mutate after set). A lock guards the dict; Flask may serve
requests on several threads.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable


class TTLCache:
    def __init__(
        self,
        max_entries: int = 1000,
        default_ttl: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[Hashable, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if expires_at <= now:
                del self._entries[key]
                return default
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        now = self._clock()
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._make_room(now)
            self._entries[key] = (value, now + ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns the number removed."""
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _make_room(self, now: float) -> None:
        # Sweep expired entries first; if still full, evict the soonest to expire.
        expired = [k for k, (_, exp) in self._entries.items() if exp <= now]
        for k in expired:
            del self._entries[k]
        if len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][1])
            del self._entries[oldest]


def get_cache() -> TTLCache:
    """Return the cache bound to the current Flask app."""
    from flask import current_app

    return current_app.extensions["oms_cache"]
