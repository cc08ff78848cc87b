"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It wires the location sources, the shared cache and the orchestrator.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import AppConfig, get_config

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        resolver = container.resolve(LocationResolverService)

        # Testing
        container = Container()
        container.register(GeocodingSourcePort, lambda: FakeGeocoder())
        geocoder = container.resolve(GeocodingSourcePort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Every resolver built from one container shares the same cache.
        Two containers never share state.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import InMemoryCache
        from .adapters.countries import RestCountriesAdapter
        from .adapters.database import SqlAlchemyLocationDatabase
        from .adapters.gazetteer import StaticGazetteer
        from .adapters.geocoding import GeoNamesGeocodingAdapter
        from .ports.cache import CachePort
        from .ports.countries import CountryDirectoryPort
        from .ports.database import LocationDatabasePort
        from .ports.gazetteer import GazetteerPort
        from .ports.geocoding import GeocodingSourcePort
        from .services import LocationResolverService

        config = config or get_config()
        container = cls(config=config)

        # Orchestrator result cache
        container.register(
            CachePort,
            lambda: InMemoryCache(
                name="resolver",
                default_ttl_seconds=config.resolver.cache_timeout_seconds,
                max_size=config.resolver.max_cache_size,
            ),
        )

        # Sources
        container.register(
            LocationDatabasePort,
            lambda: SqlAlchemyLocationDatabase(config.database),
        )
        container.register(
            GeocodingSourcePort,
            lambda: GeoNamesGeocodingAdapter(config.geonames),
        )
        container.register(
            GazetteerPort,
            lambda: StaticGazetteer(config.gazetteer),
        )
        container.register(
            CountryDirectoryPort,
            lambda: RestCountriesAdapter(config.countries),
        )

        # Main service
        def create_location_resolver() -> LocationResolverService:
            return LocationResolverService(
                database=container.resolve(LocationDatabasePort),
                geocoder=container.resolve(GeocodingSourcePort),
                gazetteer=container.resolve(GazetteerPort),
                cache=container.resolve(CachePort),
                country_directory=container.resolve(CountryDirectoryPort),
                config=config.resolver,
            )

        container.register(LocationResolverService, create_location_resolver)

        return container
