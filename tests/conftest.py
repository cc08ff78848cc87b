"""Shared fixtures for the location resolver test suite."""

from typing import Callable
from unittest.mock import MagicMock

import pytest

from location_resolver.adapters.cache import InMemoryCache
from location_resolver.adapters.database import SqlAlchemyLocationDatabase
from location_resolver.adapters.gazetteer import StaticGazetteer
from location_resolver.config import (
    DatabaseConfig,
    GazetteerConfig,
    GeoNamesConfig,
    ResolverConfig,
)
from location_resolver.domain.models import Coordinates, Location, SearchResult
from location_resolver.services import LocationResolverService


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_location() -> Callable[..., Location]:
    """Factory for canonical records with sensible defaults."""

    def _make(
        id: str,
        name: str,
        country: str = "India",
        state=None,
        population=None,
        is_popular: bool = False,
        lat=None,
        lng=None,
    ) -> Location:
        coordinates = Coordinates(lat=lat, lng=lng) if lat is not None else None
        return Location(
            id=id,
            name=name,
            country=country,
            state=state,
            coordinates=coordinates,
            population=population,
            is_popular=is_popular,
        )

    return _make


@pytest.fixture
def resolver_config() -> ResolverConfig:
    return ResolverConfig(
        cache_timeout_ms=300_000,
        max_cache_size=1000,
        fallback_to_static=True,
        default_country="India",
        default_limit=10,
        popular_limit=20,
        max_limit=50,
        sufficiency_threshold=3,
        min_query_length=2,
    )


@pytest.fixture
def geonames_config() -> GeoNamesConfig:
    return GeoNamesConfig(
        api_key="demo-user",
        base_url="https://api.geonames.org",
        timeout_seconds=5.0,
    )


@pytest.fixture
def cache(clock, resolver_config) -> InMemoryCache:
    return InMemoryCache(
        name="test",
        default_ttl_seconds=resolver_config.cache_timeout_seconds,
        max_size=resolver_config.max_cache_size,
        clock=clock,
    )


@pytest.fixture
def gazetteer() -> StaticGazetteer:
    """Gazetteer loaded from the CSV shipped with the package."""
    return StaticGazetteer(GazetteerConfig())


@pytest.fixture
def database() -> MagicMock:
    """Database source double that answers with nothing."""
    db = MagicMock()
    db.search_cities.return_value = SearchResult.empty()
    db.get_popular_cities.return_value = []
    db.get_countries.return_value = []
    db.get_states.return_value = []
    db.get_city_by_id.return_value = None
    db.add_city.return_value = None
    db.update_city_popularity.return_value = False
    return db


@pytest.fixture
def geocoder() -> MagicMock:
    """External source double that answers with nothing."""
    api = MagicMock()
    api.search.return_value = []
    return api


@pytest.fixture
def country_directory() -> MagicMock:
    directory = MagicMock()
    directory.list_countries.return_value = []
    return directory


@pytest.fixture
def resolver(
    database, geocoder, gazetteer, cache, country_directory, resolver_config
) -> LocationResolverService:
    return LocationResolverService(
        database=database,
        geocoder=geocoder,
        gazetteer=gazetteer,
        cache=cache,
        country_directory=country_directory,
        config=resolver_config,
    )


@pytest.fixture
def memory_database() -> SqlAlchemyLocationDatabase:
    """Database adapter over a fresh in-memory SQLite schema."""
    return SqlAlchemyLocationDatabase(
        DatabaseConfig(url="sqlite:///:memory:", create_schema=True)
    )
