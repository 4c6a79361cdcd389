"""DiskCache-based cache manager implementation."""

import logging
from pathlib import Path
from typing import Any

import diskcache  # type: ignore[import-untyped]

from c3bridge.core.cache.models import CacheStats, DiskCacheConfig


logger = logging.getLogger(__name__)


class DiskCacheManager:
    """Cache manager implementation using the DiskCache library.

    DiskCache provides SQLite-backed persistent caching with automatic
    concurrency control, so several build processes can share one index.
    """

    def __init__(self, config: DiskCacheConfig) -> None:
        """Initialize DiskCache manager.

        Args:
            config: Cache configuration
        """
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        cache_path = Path(self.config.cache_path)
        cache_path.mkdir(parents=True, exist_ok=True)

        self._cache = diskcache.Cache(
            directory=str(cache_path),
            size_limit=self.config.max_size_bytes,
            timeout=self.config.timeout,
        )
        self._stats = CacheStats()

        self.logger.debug("DiskCache initialized at %s", cache_path)

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve value from cache."""
        try:
            value = self._cache.get(key, default=default)

            if value is not default:
                self._stats.hit_count += 1
                self.logger.debug("Cache hit for key: %s", key)
            else:
                self._stats.miss_count += 1
                self.logger.debug("Cache miss for key: %s", key)

            return value

        except Exception as e:
            self._stats.error_count += 1
            self.logger.warning("Cache get error for key %s: %s", key, e)
            return default

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value in cache."""
        try:
            if ttl is not None:
                self._cache.set(key, value, expire=ttl)
            else:
                self._cache.set(key, value)

            self.logger.debug("Cached value for key: %s (TTL: %s)", key, ttl)

        except Exception as e:
            self._stats.error_count += 1
            self.logger.warning("Cache set error for key %s: %s", key, e)
            raise

    def delete(self, key: str) -> bool:
        """Remove value from cache."""
        try:
            result: bool = self._cache.delete(key)
            self.logger.debug("Deleted cache key: %s (existed: %s)", key, result)
            return result

        except Exception as e:
            self._stats.error_count += 1
            self.logger.warning("Cache delete error for key %s: %s", key, e)
            return False

    def clear(self) -> None:
        """Clear all entries from cache."""
        try:
            self._cache.clear()
            self._stats = CacheStats(
                hit_count=self._stats.hit_count,
                miss_count=self._stats.miss_count,
                eviction_count=self._stats.eviction_count,
                error_count=self._stats.error_count,
            )
            self.logger.info("Cache cleared")

        except Exception as e:
            self._stats.error_count += 1
            self.logger.warning("Cache clear error: %s", e)
            raise

    def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        try:
            return key in self._cache

        except Exception as e:
            self._stats.error_count += 1
            self.logger.warning("Cache exists error for key %s: %s", key, e)
            return False

    def get_stats(self) -> CacheStats:
        """Get cache performance statistics."""
        try:
            self._stats.total_entries = len(self._cache)
            volume = self._cache.volume()
            self._stats.total_size_bytes = volume if isinstance(volume, int) else 0
        except Exception as e:
            self.logger.warning("Error getting cache stats: %s", e)
        return self._stats

    def close(self) -> None:
        """Close the cache and release resources."""
        try:
            self._cache.close()
            self.logger.debug("Cache closed")
        except Exception as e:
            self.logger.warning("Error closing cache: %s", e)

    def __enter__(self) -> "DiskCacheManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
