"""Services layer - Application orchestration.

This module contains the service that orchestrates the location
sources to fulfill search and lookup use cases.

Available services:
- LocationResolverService: Cache-aware, fallback-driven location resolution
"""

from .location_resolver import (
    CacheStats,
    LocationResolverService,
    SearchStage,
    next_search_stage,
)

__all__ = [
    "LocationResolverService",
    "CacheStats",
    "SearchStage",
    "next_search_stage",
]
