"""Generic cache system for c3bridge."""

from pathlib import Path
from typing import Any

from c3bridge.core.cache.cache_manager import CacheManager
from c3bridge.core.cache.diskcache_manager import DiskCacheManager
from c3bridge.core.cache.memory_cache import MemoryCache
from c3bridge.core.cache.models import CacheKey, CacheStats, DiskCacheConfig


def create_diskcache_manager(
    cache_path: Path, max_size_mb: int = 512, timeout: float = 30.0
) -> CacheManager:
    """Create a persistent, process-shared cache manager.

    Args:
        cache_path: Directory holding the cache database
        max_size_mb: Maximum cache size in megabytes
        timeout: SQLite lock timeout in seconds

    Returns:
        Configured DiskCache manager
    """
    config = DiskCacheConfig(
        cache_path=cache_path,
        max_size_bytes=max_size_mb * 1024 * 1024,
        timeout=timeout,
    )
    return DiskCacheManager(config)


def create_memory_cache(default_ttl_hours: int | None = None) -> CacheManager:
    """Create an in-memory cache manager."""
    return MemoryCache(
        default_ttl_seconds=default_ttl_hours * 3600 if default_ttl_hours else None
    )


def create_cache_from_settings(settings: Any) -> CacheManager:
    """Create a cache manager from c3bridge settings.

    ``cache_strategy="disabled"`` keeps caching in memory only, so nothing is
    persisted between build invocations.

    Args:
        settings: Settings object with cache_strategy and cache_path attributes

    Returns:
        Configured cache manager
    """
    if settings.cache_strategy == "disabled":
        return create_memory_cache()
    return create_diskcache_manager(Path(settings.cache_path))


__all__ = [
    "CacheKey",
    "CacheManager",
    "CacheStats",
    "DiskCacheConfig",
    "DiskCacheManager",
    "MemoryCache",
    "create_cache_from_settings",
    "create_diskcache_manager",
    "create_memory_cache",
]
