"""Null cache implementation for testing.

This cache always misses, so every orchestrator call reaches the
sources. Use it to observe fallback behavior without cached state
leaking between calls.

Example:
    service = LocationResolverService(..., cache=NullCache())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """No-op cache - always misses.

    This cache implements the CachePort protocol but never actually
    caches anything.
    """

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        pass

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        return compute_fn()

    def clear(self) -> int:
        return 0

    def invalidate(self, key: str) -> bool:
        return False

    def size(self) -> int:
        return 0

    def stats(self) -> Dict[str, Any]:
        return {
            "size": 0,
            "keys": [],
            "hits": 0,
            "misses": 0,
            "hit_rate_percent": 0.0,
        }

    def keys(self) -> list[str]:
        return []
