"""Location resolver service - Main orchestrator.

Resolves a partial place name against three sources in priority order
(database, external geocoding API, static gazetteer), merges and ranks
their answers, and caches the ranked result.

Every source call is wrapped into a SourceOutcome, and the fallback
chain is a small explicit stage machine over those outcomes.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..config import ResolverConfig, get_config
from ..domain.countries import fallback_countries
from ..domain.errors import SourceNotConfiguredError
from ..domain.models import Country, Location, NewCity, SearchResult, SourceKind, State
from ..domain.outcome import SourceOutcome
from ..domain.ranking import CandidateSet, rank_locations
from ..location_utils import generate_cache_key, generate_popular_cache_key
from ..ports.cache import CachePort
from ..ports.countries import CountryDirectoryPort
from ..ports.database import LocationDatabasePort
from ..ports.gazetteer import GazetteerPort
from ..ports.geocoding import GeocodingSourcePort

T = TypeVar("T")

COUNTRIES_CACHE_KEY = "countries"


class SearchStage(Enum):
    """Stages of the search fallback chain."""

    DATABASE = auto()
    EXTERNAL = auto()
    STATIC = auto()
    DONE = auto()


def next_search_stage(
    stage: SearchStage,
    candidate_count: int,
    sufficiency_threshold: int,
    fallback_to_static: bool,
) -> SearchStage:
    """Decide which source to consult after `stage`.

    Args:
        stage: The stage that just ran.
        candidate_count: Number of distinct candidates collected so far.
        sufficiency_threshold: Minimum count that stops the external lookup.
        fallback_to_static: Whether the gazetteer may be consulted.

    Returns:
        The next stage.
    """
    if stage is SearchStage.DATABASE:
        if candidate_count < sufficiency_threshold:
            return SearchStage.EXTERNAL
        return SearchStage.DONE
    if stage is SearchStage.EXTERNAL:
        if candidate_count == 0 and fallback_to_static:
            return SearchStage.STATIC
        return SearchStage.DONE
    return SearchStage.DONE


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of the orchestrator cache."""

    size: int
    keys: tuple[str, ...]
    hits: int = 0
    misses: int = 0
    hit_rate_percent: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "keys": list(self.keys),
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": self.hit_rate_percent,
        }


@dataclass
class LocationResolverService:
    """Cache-aware orchestrator over the location sources.

    Attributes:
        database: Structured location store (first priority)
        geocoder: External geocoding API (second priority)
        gazetteer: Static in-memory table (last resort)
        cache: Result cache shared by every caller of this instance
        country_directory: Optional reference API for country listing
        config: Orchestrator configuration
    """

    database: LocationDatabasePort
    geocoder: GeocodingSourcePort
    gazetteer: GazetteerPort
    cache: CachePort[Any]
    country_directory: Optional[CountryDirectoryPort] = None
    config: ResolverConfig = field(default_factory=lambda: get_config().resolver)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        country: Optional[str] = None,
        limit: Optional[int] = None,
        include_coordinates: bool = True,
    ) -> SearchResult:
        """Resolve a partial place name into ranked locations.

        Never raises for source failures: a total failure is an empty
        result.

        Args:
            query: The partial place name typed by the user.
            country: Country name (None for the configured default).
            limit: Maximum number of records (None for the default).
            include_coordinates: Whether returned records keep coordinates.

        Returns:
            SearchResult with at most `limit` ranked records.
        """
        cleaned = (query or "").strip()
        if len(cleaned) < self.config.min_query_length:
            self._logger.debug("Query too short", extra={"query_length": len(cleaned)})
            return SearchResult.empty()

        country = self._resolve_country(country)
        limit = self._clamp_limit(limit, self.config.default_limit)
        cache_key = generate_cache_key(cleaned, country, limit)

        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Search cache hit", extra={"key": cache_key})
            return self._present(cached, limit, include_coordinates)

        started = time.perf_counter()
        candidates = self._collect_candidates(cleaned, country, limit)
        ranked = candidates.ranked(cleaned)
        self.cache.set(cache_key, ranked)

        self._logger.info(
            "Search resolved",
            extra={
                "query": cleaned,
                "country": country,
                "results": len(ranked),
                "sources": candidates.source_counts(),
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return self._present(ranked, limit, include_coordinates)

    def _collect_candidates(
        self, query: str, country: Optional[str], limit: int
    ) -> CandidateSet:
        """Run the fallback chain and return the merged candidates."""
        candidates = CandidateSet()
        stage = SearchStage.DATABASE

        while stage is not SearchStage.DONE:
            if stage is SearchStage.DATABASE:
                db_outcome = self._attempt(
                    SourceKind.DATABASE,
                    "search_cities",
                    lambda: self.database.search_cities(query, country, limit),
                )
                if db_outcome.is_ok and db_outcome.value is not None:
                    candidates.add(db_outcome.value.locations, SourceKind.DATABASE)

            elif stage is SearchStage.EXTERNAL:
                api_outcome = self._attempt(
                    SourceKind.EXTERNAL,
                    "search",
                    lambda: self.geocoder.search(
                        query, country, limit, include_coordinates=True
                    ),
                )
                if api_outcome.is_ok and api_outcome.value:
                    candidates.add(api_outcome.value, SourceKind.EXTERNAL)

            elif stage is SearchStage.STATIC:
                static_outcome = self._attempt(
                    SourceKind.STATIC,
                    "search_static",
                    lambda: self.gazetteer.search_static(query, country),
                )
                if static_outcome.is_ok and static_outcome.value:
                    candidates.add(static_outcome.value, SourceKind.STATIC)

            stage = next_search_stage(
                stage,
                len(candidates),
                self.config.sufficiency_threshold,
                self.config.fallback_to_static,
            )

        return candidates

    def _present(
        self, ranked: List[Location], limit: int, include_coordinates: bool
    ) -> SearchResult:
        result = SearchResult.from_candidates(ranked, limit)
        if include_coordinates:
            return result
        return SearchResult(
            locations=tuple(loc.without_coordinates() for loc in result.locations),
            total=result.total,
            has_more=result.has_more,
        )

    # ------------------------------------------------------------------
    # Simple lookups
    # ------------------------------------------------------------------

    def get_popular_cities(
        self, country: Optional[str] = None, limit: Optional[int] = None
    ) -> List[Location]:
        """Return popular cities of a country.

        Database first; the gazetteer answers when the database fails
        or has nothing.
        """
        country = self._resolve_country(country)
        limit = self._clamp_limit(limit, self.config.popular_limit)
        cache_key = generate_popular_cache_key(country, limit)

        cached = self.cache.get(cache_key)
        if cached is not None:
            return list(cached)

        outcome = self._attempt(
            SourceKind.DATABASE,
            "get_popular_cities",
            lambda: self.database.get_popular_cities(country, limit),
        )
        cities: List[Location] = list(outcome.value or []) if outcome.is_ok else []

        if not cities:
            self._logger.debug(
                "Popular cities from gazetteer",
                extra={"country": country},
            )
            cities = self.gazetteer.filter_popular(country)[:limit]

        cities = rank_locations(cities)[:limit]
        self.cache.set(cache_key, cities)
        return list(cities)

    def get_location_by_id(self, location_id: str) -> Optional[Location]:
        """Find a location by id in the database, then the gazetteer.

        Not cached.
        """
        if not location_id or not location_id.strip():
            return None

        outcome = self._attempt(
            SourceKind.DATABASE,
            "get_city_by_id",
            lambda: self.database.get_city_by_id(location_id),
        )
        if outcome.is_ok and outcome.value is not None:
            return outcome.value

        return self.gazetteer.get_by_id(location_id)

    def get_countries(self) -> List[Country]:
        """List countries from the database, the reference API, or a fixed list."""
        cached = self.cache.get(COUNTRIES_CACHE_KEY)
        if cached is not None:
            return list(cached)

        countries: List[Country] = []
        source = SourceKind.DATABASE

        db_outcome = self._attempt(
            SourceKind.DATABASE, "get_countries", self.database.get_countries
        )
        if db_outcome.is_ok and db_outcome.value:
            countries = list(db_outcome.value)

        if not countries and self.country_directory is not None:
            directory = self.country_directory
            api_outcome = self._attempt(
                SourceKind.COUNTRIES_API, "list_countries", directory.list_countries
            )
            if api_outcome.is_ok and api_outcome.value:
                countries = list(api_outcome.value)
                source = SourceKind.COUNTRIES_API

        if not countries:
            self._logger.warning("Using fallback country list")
            countries = fallback_countries(self.config.default_country)
            source = SourceKind.FALLBACK

        self._logger.debug(
            "Countries resolved",
            extra={"source": source.value, "count": len(countries)},
        )
        self.cache.set(COUNTRIES_CACHE_KEY, countries)
        return list(countries)

    def get_states(self, country_code: str) -> List[State]:
        """List states of a country from the database. Not cached."""
        outcome = self._attempt(
            SourceKind.DATABASE,
            "get_states",
            lambda: self.database.get_states(country_code),
        )
        return list(outcome.value or []) if outcome.is_ok else []

    # ------------------------------------------------------------------
    # Admin mutations
    # ------------------------------------------------------------------

    def add_city(self, city: NewCity) -> Optional[Location]:
        """Add a city to the database and invalidate the whole cache.

        Returns:
            The stored city, or None on failure.
        """
        outcome = self._attempt(
            SourceKind.DATABASE, "add_city", lambda: self.database.add_city(city)
        )
        if not outcome.is_ok or outcome.value is None:
            self._logger.warning("Add city failed", extra={"city": city.name})
            return None

        cleared = self.cache.clear()
        self._logger.info(
            "Cache invalidated after city insert",
            extra={"city_id": outcome.value.id, "entries_cleared": cleared},
        )
        return outcome.value

    def update_city_popularity(self, city_id: str, is_popular: bool) -> bool:
        """Update a city's popularity flag and invalidate the whole cache.

        Returns:
            True on success.
        """
        outcome = self._attempt(
            SourceKind.DATABASE,
            "update_city_popularity",
            lambda: self.database.update_city_popularity(city_id, is_popular),
        )
        if not outcome.is_ok or not outcome.value:
            self._logger.warning("Update city popularity failed", extra={"city_id": city_id})
            return False

        cleared = self.cache.clear()
        self._logger.info(
            "Cache invalidated after popularity update",
            extra={"city_id": city_id, "entries_cleared": cleared},
        )
        return True

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def clear_cache(self) -> int:
        """Drop every cached result.

        Returns:
            Number of entries removed.
        """
        return self.cache.clear()

    def get_cache_stats(self) -> CacheStats:
        stats = self.cache.stats()
        return CacheStats(
            size=stats.get("size", 0),
            keys=tuple(stats.get("keys", ())),
            hits=stats.get("hits", 0),
            misses=stats.get("misses", 0),
            hit_rate_percent=stats.get("hit_rate_percent", 0.0),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _attempt(
        self, source: SourceKind, operation: str, call: Callable[[], T]
    ) -> SourceOutcome[T]:
        """Run one source call and tag its result.

        Any exception becomes an `err` outcome; nothing propagates.
        """
        try:
            value = call()
        except SourceNotConfiguredError as e:
            self._logger.info(
                "Source not configured, skipping",
                extra={"source": source.value, "operation": operation, "setting": e.setting_name},
            )
            return SourceOutcome.err(source, str(e), not_configured=True)
        except Exception as e:
            self._logger.warning(
                "Source call failed, falling back",
                extra={
                    "source": source.value,
                    "operation": operation,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            return SourceOutcome.err(source, str(e))
        return SourceOutcome.ok(source, value)

    def _resolve_country(self, country: Optional[str]) -> Optional[str]:
        if country is None:
            country = self.config.default_country
        country = country.strip()
        return country or None

    def _clamp_limit(self, limit: Optional[int], default: int) -> int:
        if limit is None:
            limit = default
        return max(1, min(int(limit), self.config.max_limit))
