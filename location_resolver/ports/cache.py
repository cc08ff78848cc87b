"""Cache port - Injectable caching abstraction.

This protocol defines the contract for the bounded, time-expiring
key/value store shared by the orchestrator and by individual sources.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for caching.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - Testing

    The cache port allows dependency injection of caching behavior,
    making it easy to disable caching in tests or swap implementations.
    """

    def get(self, key: str) -> Optional[T]:
        """Get a value from the cache.

        Args:
            key: The cache key.

        Returns:
            The cached value, or None if not found or expired.
        """
        ...

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Set a value in the cache.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Optional TTL override in seconds.
        """
        ...

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Get from cache or compute and cache the value.

        This is the primary method for cache-aside pattern:
        1. Check if key exists in cache
        2. If yes, return cached value
        3. If no, call compute_fn, cache result, return result

        Args:
            key: The cache key.
            compute_fn: Function to compute the value if not cached.

        Returns:
            The cached or computed value.
        """
        ...

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        ...

    def invalidate(self, key: str) -> bool:
        """Invalidate a specific cache entry.

        Args:
            key: The cache key to invalidate.

        Returns:
            True if the key existed and was removed, False otherwise.
        """
        ...

    def size(self) -> int:
        """Return the number of entries in the cache."""
        ...

    def keys(self) -> List[str]:
        """Return all keys currently stored, oldest first."""
        ...

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics (size, keys, hits, misses, hit rate)."""
        ...
