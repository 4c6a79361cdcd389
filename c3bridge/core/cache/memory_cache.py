"""In-memory cache implementation."""

import logging
import threading
from typing import Any

from c3bridge.core.cache.models import CacheEntry, CacheStats


logger = logging.getLogger(__name__)


class MemoryCache:
    """In-memory cache implementation.

    Stores cached data for the lifetime of the process only. Used when the
    persistent cache is disabled so compilations within one build session can
    still short-circuit.
    """

    def __init__(self, default_ttl_seconds: int | None = None) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()
        logger.debug("Initialized memory cache")

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None or entry.is_expired:
                self._cache.pop(key, None)
                self._stats.miss_count += 1
                return default
            self._stats.hit_count += 1
            return entry.data

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        with self._lock:
            self._cache[key] = CacheEntry(
                data=value, ttl_seconds=ttl or self.default_ttl_seconds
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def exists(self, key: str) -> bool:
        with self._lock:
            entry = self._cache.get(key)
            return entry is not None and not entry.is_expired

    def get_stats(self) -> CacheStats:
        with self._lock:
            self._stats.total_entries = len(self._cache)
            return self._stats

    def close(self) -> None:
        pass
