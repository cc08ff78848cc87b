"""Thread-safe in-memory cache implementation.

Backs both the orchestrator-level result cache and the per-source
caches of the HTTP adapters.

Behavior:
- Thread-safe with RLock
- Optional TTL (time-to-live), checked lazily on read
- Bounded size with insertion-order eviction
- Explicit invalidation
- Statistics tracking
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from ...domain.errors import ConfigurationError
from ...domain.models import CacheEntry

T = TypeVar("T")


@dataclass
class InMemoryCache(Generic[T]):
    """Thread-safe in-memory cache with optional TTL and bounded size.

    This cache implements the CachePort protocol and can be injected
    into the orchestrator and adapters that need caching functionality.

    When a write of a new key would exceed `max_size`, the oldest
    inserted entry is evicted first. Reads do not refresh an entry's
    position, so this is FIFO rather than access-order LRU.

    Attributes:
        default_ttl_seconds: Default time-to-live for entries (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging
        clock: Time source returning epoch seconds

    Example:
        cache = InMemoryCache[list](name="search", default_ttl_seconds=300)
        result = cache.get_or_compute("mum-india-10", lambda: search("mum"))
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"
    clock: Callable[[], float] = field(default=time.time, repr=False)

    _store: Dict[str, CacheEntry] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")
        if self.max_size is not None and self.max_size < 1:
            raise ConfigurationError(
                f"Cache max_size must be at least 1, got {self.max_size}",
                setting_name="max_size",
                expected_type="positive int",
            )
        if self.default_ttl_seconds is not None and self.default_ttl_seconds <= 0:
            raise ConfigurationError(
                f"Cache TTL must be positive, got {self.default_ttl_seconds}",
                setting_name="default_ttl_seconds",
                expected_type="positive float",
            )

    def get(self, key: str) -> Optional[T]:
        """Get a value from the cache.

        Args:
            key: The cache key.

        Returns:
            The cached value, or None if not found or expired.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self.clock()):
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._hits += 1
            return entry.data

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the raw entry (with timestamps) without touching statistics."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None or entry.is_expired(self.clock()):
                return None
            return entry

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Set a value in the cache.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Optional TTL override for this entry.
        """
        with self._lock:
            if key in self._store:
                # Re-inserting moves the key to the newest position
                del self._store[key]
            elif self.max_size is not None and len(self._store) >= self.max_size:
                oldest_key = next(iter(self._store))
                del self._store[oldest_key]
                self._logger.debug(
                    "Cache evicted entry",
                    extra={"key": oldest_key, "reason": "max_size"},
                )

            effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
            now = self.clock()
            expires_at = now + effective_ttl if effective_ttl is not None else float("inf")

            self._store[key] = CacheEntry(
                key=key, data=value, timestamp=now, expires_at=expires_at
            )
            self._logger.debug(
                "Cache entry set",
                extra={"key": key, "ttl": effective_ttl},
            )

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Get from cache or compute and cache the value.

        This is the primary method for the cache-aside pattern.

        Args:
            key: The cache key.
            compute_fn: Function to compute the value if not cached.

        Returns:
            The cached or computed value.
        """
        value = self.get(key)
        if value is not None:
            self._logger.debug("Cache hit", extra={"key": key})
            return value

        # Compute value (outside lock to avoid blocking)
        self._logger.debug("Cache miss, computing", extra={"key": key})
        computed = compute_fn()

        self.set(key, computed)
        return computed

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry.

        Args:
            key: The cache key to invalidate.

        Returns:
            True if the key existed and was removed.
        """
        with self._lock:
            if key in self._store:
                del self._store[key]
                self._logger.debug("Cache entry invalidated", extra={"key": key})
                return True
            return False

    def purge_expired(self) -> int:
        """Drop every expired entry.

        Reads already expire entries lazily; this only reclaims memory
        held by keys that are never read again.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self.clock()
            expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
            for key in expired:
                del self._store[key]
            return len(expired)

    def size(self) -> int:
        """Return the number of entries in the cache.

        Returns:
            Current number of cached entries.
        """
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
            Dictionary with size, keys, hit/miss counts and hit rate.
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "keys": list(self._store.keys()),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }

    def keys(self) -> list[str]:
        """Return all keys in the cache, oldest first.

        Returns:
            List of cache keys.
        """
        with self._lock:
            return list(self._store.keys())
