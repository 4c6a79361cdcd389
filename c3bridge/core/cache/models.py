"""Cache data models and types."""

import hashlib
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class CacheStats:
    """Cache performance statistics."""

    total_entries: int = 0
    total_size_bytes: int = 0
    hit_count: int = 0
    miss_count: int = 0
    eviction_count: int = 0
    error_count: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total_requests = self.hit_count + self.miss_count
        if total_requests == 0:
            return 0.0
        return (self.hit_count / total_requests) * 100.0

    @property
    def miss_rate(self) -> float:
        """Calculate cache miss rate as percentage."""
        return 100.0 - self.hit_rate


@dataclass
class CacheEntry:
    """Cached value with its expiry time."""

    data: Any
    created_at: float = field(default_factory=time.time)
    ttl_seconds: int | None = None

    @property
    def is_expired(self) -> bool:
        """Check if cache entry has expired based on TTL."""
        if self.ttl_seconds is None:
            return False
        return time.time() > (self.created_at + self.ttl_seconds)


@dataclass
class DiskCacheConfig:
    """Configuration for DiskCache-backed caches."""

    cache_path: Path
    max_size_bytes: int = 512 * 1024 * 1024
    timeout: float = 30.0


class CacheKey:
    """Helper for generating consistent cache keys."""

    @staticmethod
    def from_parts(*parts: str) -> str:
        """Generate cache key from multiple string parts."""
        combined = "\x1f".join(str(part) for part in parts)
        return hashlib.sha256(combined.encode()).hexdigest()

    @staticmethod
    def from_dict(data: dict[str, Any]) -> str:
        """Generate cache key from dictionary data."""
        sorted_json = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return CacheKey.from_parts(sorted_json)

    @staticmethod
    def from_path(path: Path) -> str:
        """Generate cache key part from file path, modification time and size."""
        try:
            stat = path.stat()
            return f"{path}:{stat.st_mtime_ns}:{stat.st_size}"
        except OSError:
            return f"{path}:missing"
