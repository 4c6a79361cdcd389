"""Generic cache manager protocol."""

from typing import Any, Protocol, runtime_checkable

from c3bridge.core.cache.models import CacheStats


@runtime_checkable
class CacheManager(Protocol):
    """Generic cache manager interface.

    Implementations must be safe to ignore: a failing cache degrades to a
    miss, never to a broken build.
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve value from cache.

        Args:
            key: Cache key to retrieve
            default: Default value if key not found

        Returns:
            Cached value or default
        """
        ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value in cache.

        Args:
            key: Cache key to store under
            value: Value to cache
            ttl: Time-to-live in seconds (None for no expiration)
        """
        ...

    def delete(self, key: str) -> bool:
        """Remove value from cache.

        Returns:
            True if key was removed, False if not found
        """
        ...

    def clear(self) -> None:
        """Clear all entries from cache."""
        ...

    def exists(self, key: str) -> bool:
        """Check if key exists in cache and is not expired."""
        ...

    def get_stats(self) -> CacheStats:
        """Get cache performance statistics."""
        ...

    def close(self) -> None:
        """Release any resources held by the cache."""
        ...
