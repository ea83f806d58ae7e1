from __future__ import annotations

import copy
import threading
import time
from typing import Any, Callable, Mapping, Optional

from ..core.constants import KNOWN_STUDENTS_TTL_SECONDS


class CacheService:
    """Short-lived key/value cache with per-entry TTL.

    Values are deep-copied on the way in and out so callers never share mutable state
    with the cache. Writers invalidate the keys they affect.

    ``ttl_overrides`` maps key prefixes to lifetimes that replace the caller's TTL.
    Expired entries are dropped on every ``put``.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        default_ttl: int = KNOWN_STUDENTS_TTL_SECONDS,
        ttl_overrides: Optional[Mapping[str, int]] = None,
    ):
        self._clock = clock
        self._default_ttl = int(default_ttl)
        self._ttl_overrides = {prefix: int(ttl) for prefix, ttl in (ttl_overrides or {}).items()}
        self._entries: dict[str, tuple[float, Any]] = {}
        self._mutex = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._mutex:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self._ttl_for(key, ttl_seconds)
        with self._mutex:
            now = self._clock()
            for k in [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]:
                del self._entries[k]
            self._entries[key] = (now + ttl, copy.deepcopy(value))

    def _ttl_for(self, key: str, ttl_seconds: Optional[int]) -> int:
        for prefix, ttl in self._ttl_overrides.items():
            if key.startswith(prefix):
                return ttl
        return self._default_ttl if ttl_seconds is None else int(ttl_seconds)

    def size(self) -> int:
        with self._mutex:
            return len(self._entries)

    def remove(self, *keys: str) -> None:
        with self._mutex:
            for k in keys:
                self._entries.pop(k, None)

    def remove_prefix(self, prefix: str) -> None:
        with self._mutex:
            for k in [k for k in self._entries if k.startswith(prefix)]:
                del self._entries[k]

    def clear(self) -> None:
        with self._mutex:
            self._entries.clear()
