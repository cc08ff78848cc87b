"""SQLAlchemy location database adapter.

This adapter implements LocationDatabasePort over the cities, states
and countries tables:
- Parameterized prefix/substring search with server-side ordering
- Popular cities, countries and states listings
- Admin writes (add city, update popularity)
- Failures logged and converted to empty results, never raised
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import Engine, case, create_engine, func, or_, select, update
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ...config import DatabaseConfig, get_config
from ...domain.countries import country_code_for, fallback_countries
from ...domain.models import Coordinates, Country, Location, NewCity, SearchResult, State
from ...ports.gazetteer import GazetteerPort
from .tables import Base, CityRow, CountryRow, StateRow


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input only matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def create_database_engine(config: DatabaseConfig) -> Engine:
    """Build an engine whose connections and queries are bounded by the timeout.

    Args:
        config: Database configuration.

    Returns:
        A SQLAlchemy Engine.
    """
    url = make_url(config.url)
    backend = url.get_backend_name()
    kwargs: Dict[str, Any] = {"echo": config.echo}

    if backend == "sqlite":
        connect_args: Dict[str, Any] = {
            "timeout": config.timeout_seconds,
            "check_same_thread": False,
        }
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = connect_args
    elif backend == "postgresql":
        # connect_timeout bounds connecting, statement_timeout bounds each query
        kwargs["connect_args"] = {
            "connect_timeout": max(1, int(config.timeout_seconds)),
            "options": f"-c statement_timeout={int(config.timeout_seconds * 1000)}",
        }
        kwargs["pool_pre_ping"] = True
        kwargs["pool_timeout"] = config.timeout_seconds

    return create_engine(url, **kwargs)


def _row_to_location(row: CityRow) -> Location:
    coordinates = None
    if row.latitude is not None and row.longitude is not None:
        coordinates = Coordinates(lat=float(row.latitude), lng=float(row.longitude))
    return Location(
        id=str(row.id),
        name=row.name,
        country=row.country,
        state=row.state or None,
        coordinates=coordinates,
        population=row.population,
        is_popular=bool(row.is_popular),
    )


@dataclass
class SqlAlchemyLocationDatabase:
    """Location database backed by SQLAlchemy.

    Attributes:
        config: Database configuration (URL, timeout, schema creation)
        engine: Optional pre-built engine (tests inject in-memory SQLite)
    """

    config: DatabaseConfig = field(default_factory=lambda: get_config().database)
    engine: Optional[Engine] = None

    _session_factory: sessionmaker[Session] = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.engine is None:
            self.engine = create_database_engine(self.config)
        self._session_factory = sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False
        )
        if self.config.create_schema:
            self.create_schema()

    def create_schema(self) -> bool:
        """Create missing tables.

        Returns:
            True if the schema is in place.
        """
        try:
            Base.metadata.create_all(self.engine)
            return True
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database schema creation failed",
                extra={"error": str(e)},
            )
            return False

    def _map_rows(self, rows: List[CityRow]) -> List[Location]:
        locations: List[Location] = []
        for row in rows:
            try:
                locations.append(_row_to_location(row))
            except ValueError as e:
                self._logger.warning(
                    "Skipping malformed city row",
                    extra={"city_id": row.id, "error": str(e)},
                )
        return locations

    def search_cities(
        self, query: str, country: Optional[str] = None, limit: int = 10
    ) -> SearchResult:
        """Search active cities whose name or state contains the query.

        Args:
            query: The partial place name.
            country: Country name filter (None for all countries).
            limit: Maximum number of rows.

        Returns:
            SearchResult, empty on failure.
        """
        needle = _escape_like(query.strip())
        contains = f"%{needle}%"
        prefix_rank = case(
            (CityRow.name.ilike(f"{needle}%", escape="\\"), 0),
            else_=1,
        )
        stmt = (
            select(CityRow)
            .where(CityRow.is_active.is_(True))
            .where(
                or_(
                    CityRow.name.ilike(contains, escape="\\"),
                    CityRow.state.ilike(contains, escape="\\"),
                )
            )
        )
        if country:
            stmt = stmt.where(func.lower(CityRow.country) == country.strip().lower())
        stmt = stmt.order_by(
            CityRow.is_popular.desc(),
            prefix_rank,
            CityRow.population.is_(None),
            CityRow.population.desc(),
            CityRow.name,
        ).limit(limit)

        try:
            with self._session_factory() as session:
                rows = list(session.scalars(stmt))
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database city search failed",
                extra={"query": query, "country": country, "error": str(e)},
            )
            return SearchResult.empty()

        locations = self._map_rows(rows)
        self._logger.debug(
            "Database city search",
            extra={"query": query, "country": country, "results": len(locations)},
        )
        return SearchResult(
            locations=tuple(locations),
            total=len(locations),
            has_more=len(rows) == limit,
        )

    def get_popular_cities(
        self, country: Optional[str] = None, limit: int = 20
    ) -> List[Location]:
        """List active popular cities, most populated first."""
        stmt = select(CityRow).where(
            CityRow.is_active.is_(True), CityRow.is_popular.is_(True)
        )
        if country:
            stmt = stmt.where(func.lower(CityRow.country) == country.strip().lower())
        stmt = stmt.order_by(
            CityRow.population.is_(None), CityRow.population.desc(), CityRow.name
        ).limit(limit)

        try:
            with self._session_factory() as session:
                rows = list(session.scalars(stmt))
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database popular cities failed",
                extra={"country": country, "error": str(e)},
            )
            return []
        return self._map_rows(rows)

    def get_countries(self) -> List[Country]:
        """List active countries ordered by name."""
        stmt = (
            select(CountryRow)
            .where(CountryRow.is_active.is_(True))
            .order_by(CountryRow.name)
        )
        try:
            with self._session_factory() as session:
                rows = list(session.scalars(stmt))
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database countries failed",
                extra={"error": str(e)},
            )
            return []
        return [Country(code=row.code, name=row.name) for row in rows]

    def get_states(self, country_code: str) -> List[State]:
        """List active states of a country ordered by name."""
        stmt = (
            select(StateRow)
            .where(
                StateRow.is_active.is_(True),
                StateRow.country_code == country_code.strip().upper(),
            )
            .order_by(StateRow.name)
        )
        try:
            with self._session_factory() as session:
                rows = list(session.scalars(stmt))
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database states failed",
                extra={"country_code": country_code, "error": str(e)},
            )
            return []
        return [
            State(id=row.id, name=row.name, code=row.code, country_code=row.country_code)
            for row in rows
        ]

    def get_city_by_id(self, city_id: str) -> Optional[Location]:
        """Get an active city by id."""
        stmt = select(CityRow).where(CityRow.id == city_id, CityRow.is_active.is_(True))
        try:
            with self._session_factory() as session:
                row = session.scalars(stmt).first()
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database get city failed",
                extra={"city_id": city_id, "error": str(e)},
            )
            return None
        if row is None:
            return None
        mapped = self._map_rows([row])
        return mapped[0] if mapped else None

    def add_city(self, city: NewCity) -> Optional[Location]:
        """Insert a city.

        Args:
            city: The validated city data.

        Returns:
            The stored city, or None on failure.
        """
        row = CityRow(
            name=city.name.strip(),
            country=city.country.strip(),
            state=city.state,
            latitude=city.coordinates.lat if city.coordinates else None,
            longitude=city.coordinates.lng if city.coordinates else None,
            population=city.population,
            is_popular=city.is_popular,
            is_active=True,
        )
        try:
            with self._session_factory() as session, session.begin():
                session.add(row)
                session.flush()
                location = _row_to_location(row)
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database add city failed",
                extra={"city": city.name, "error": str(e)},
            )
            return None

        self._logger.info(
            "City added",
            extra={"city_id": location.id, "city": location.name},
        )
        return location

    def update_city_popularity(self, city_id: str, is_popular: bool) -> bool:
        """Set the popularity flag of a city.

        Returns:
            True if a row was updated.
        """
        stmt = update(CityRow).where(CityRow.id == city_id).values(is_popular=is_popular)
        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(stmt)
                updated = result.rowcount
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database update city failed",
                extra={"city_id": city_id, "error": str(e)},
            )
            return False

        if not updated:
            self._logger.warning("City not found for update", extra={"city_id": city_id})
            return False
        return True

    def seed_from_gazetteer(self, gazetteer: GazetteerPort) -> int:
        """Populate empty tables from the static gazetteer.

        Rows whose id already exists are left untouched.

        Args:
            gazetteer: Source of the seed cities.

        Returns:
            Number of cities inserted.
        """
        entries = list(gazetteer.all())
        countries: Dict[str, Country] = {c.name: c for c in fallback_countries()}
        for entry in entries:
            code = country_code_for(entry.country)
            if code and entry.country not in countries:
                countries[entry.country] = Country(code=code, name=entry.country)

        try:
            with self._session_factory() as session, session.begin():
                known_countries = set(session.scalars(select(CountryRow.code)))
                for country in countries.values():
                    if country.code not in known_countries:
                        session.add(CountryRow(code=country.code, name=country.name))
                        known_countries.add(country.code)

                known_states = {
                    (row.country_code, row.name)
                    for row in session.scalars(select(StateRow))
                }
                for entry in entries:
                    code = country_code_for(entry.country)
                    if not entry.state or code is None:
                        continue
                    if (code, entry.state) not in known_states:
                        session.add(StateRow(name=entry.state, country_code=code))
                        known_states.add((code, entry.state))

                known_cities = set(session.scalars(select(CityRow.id)))
                inserted = 0
                for entry in entries:
                    if entry.id in known_cities:
                        continue
                    session.add(
                        CityRow(
                            id=entry.id,
                            name=entry.name,
                            country=entry.country,
                            state=entry.state,
                            latitude=entry.coordinates.lat if entry.coordinates else None,
                            longitude=entry.coordinates.lng if entry.coordinates else None,
                            population=entry.population,
                            is_popular=entry.is_popular,
                            is_active=True,
                        )
                    )
                    known_cities.add(entry.id)
                    inserted += 1
        except SQLAlchemyError as e:
            self._logger.warning(
                "Database seeding failed",
                extra={"error": str(e)},
            )
            return 0

        self._logger.info("Database seeded", extra={"cities": inserted})
        return inserted
