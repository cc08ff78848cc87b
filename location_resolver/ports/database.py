"""Database port - Abstraction for the structured location store.

The database is the fastest and most authoritative source when it is
populated. Implementations never raise on query failures: they log a
warning and return an empty result, None or False instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Country, Location, NewCity, SearchResult, State


class LocationDatabasePort(Protocol):
    """Port for the location database.

    Implementation: adapters/database/sqlalchemy_repository.py
    """

    def search_cities(
        self, query: str, country: Optional[str] = None, limit: int = 10
    ) -> SearchResult:
        """Search active cities by name or state.

        Args:
            query: The partial place name.
            country: Country name filter (None for all countries).
            limit: Maximum number of rows.

        Returns:
            SearchResult, empty on failure. ``has_more`` is only a hint
            (``len(rows) == limit``); the orchestrator recomputes it from
            the merged candidate list and never reads this value.
        """
        ...

    def get_popular_cities(
        self, country: Optional[str] = None, limit: int = 20
    ) -> List[Location]:
        """List cities curated as popular for a country."""
        ...

    def get_countries(self) -> List[Country]:
        """List active countries ordered by name."""
        ...

    def get_states(self, country_code: str) -> List[State]:
        """List active states of a country ordered by name."""
        ...

    def get_city_by_id(self, city_id: str) -> Optional[Location]:
        """Get an active city by id, or None."""
        ...

    def add_city(self, city: NewCity) -> Optional[Location]:
        """Insert a city and return it, or None on failure."""
        ...

    def update_city_popularity(self, city_id: str, is_popular: bool) -> bool:
        """Set the popularity flag of a city; False on failure or unknown id."""
        ...
