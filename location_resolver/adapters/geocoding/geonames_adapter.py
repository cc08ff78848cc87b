"""GeoNames geocoding adapter.

This adapter queries the GeoNames `searchJSON` endpoint for populated
places and maps its rows into canonical Location records with:
- Validated deserialization of every row (pydantic)
- Adapter-level caching via CachePort
- Configuration injection (credentials, endpoint, timeout)
- Typed errors for the orchestrator to recover from
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...config import GeoNamesConfig, get_config
from ...domain.countries import country_code_for
from ...domain.errors import GeocodingError, MalformedPayloadError, SourceNotConfiguredError
from ...domain.models import Coordinates, Location
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache

SOURCE_NAME = "geonames"

# GeoNames status codes for exhausted credits / rate limits
_RATE_LIMIT_CODES = {18, 19, 20}


class GeoNamesRecord(BaseModel):
    """One row of a GeoNames search response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    geoname_id: int = Field(alias="geonameId")
    name: str = Field(min_length=1)
    country_name: str = Field(alias="countryName", min_length=1)
    admin_name1: Optional[str] = Field(default=None, alias="adminName1")
    lat: Optional[float] = None
    lng: Optional[float] = None
    population: Optional[int] = Field(default=None, ge=0)

    def to_location(self) -> Location:
        coordinates = None
        if self.lat is not None and self.lng is not None:
            coordinates = Coordinates(lat=self.lat, lng=self.lng)
        return Location(
            id=str(self.geoname_id),
            name=self.name.strip(),
            country=self.country_name.strip(),
            state=(self.admin_name1 or "").strip() or None,
            coordinates=coordinates,
            population=self.population or None,
            is_popular=False,
        )


@dataclass
class GeoNamesGeocodingAdapter:
    """GeoNames search adapter implementing GeocodingSourcePort.

    Attributes:
        config: GeoNames configuration
        cache: Cache for successful responses (built from config if None)
        session: HTTP session used for requests
    """

    config: GeoNamesConfig = field(default_factory=lambda: get_config().geonames)
    cache: Optional[CachePort[List[Location]]] = None
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.cache is None:
            self.cache = InMemoryCache(
                name=SOURCE_NAME,
                default_ttl_seconds=self.config.cache_timeout_seconds,
                max_size=self.config.max_cache_size,
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    def search(
        self,
        query: str,
        country: Optional[str] = None,
        limit: int = 10,
        include_coordinates: bool = True,
    ) -> List[Location]:
        """Search populated places whose name starts with `query`.

        Args:
            query: The partial place name.
            country: Country name to restrict the search to.
            limit: Maximum number of rows to request.
            include_coordinates: Whether to fill in coordinates.

        Returns:
            Canonical location records, most populated first.

        Raises:
            SourceNotConfiguredError: If no API key is configured.
            GeocodingError: On transport failure or non-success status.
            MalformedPayloadError: If the response does not parse.
        """
        if not self.is_configured:
            raise SourceNotConfiguredError(
                "GeoNames API key not configured",
                source=SOURCE_NAME,
                setting_name="LRE_GEONAMES_API_KEY",
            )

        cleaned = query.strip()
        if not cleaned:
            return []

        country_code = country_code_for(country)
        cache_key = f"{cleaned.lower()}:{country_code or country or 'all'}:{limit}"
        assert self.cache is not None

        locations = self.cache.get(cache_key)
        if locations is None:
            locations = self._fetch(cleaned, country, country_code, limit)
            self.cache.set(cache_key, locations)
        else:
            self._logger.debug("GeoNames cache hit", extra={"query": cleaned})

        if include_coordinates:
            return list(locations)
        return [location.without_coordinates() for location in locations]

    def _fetch(
        self,
        query: str,
        country: Optional[str],
        country_code: Optional[str],
        limit: int,
    ) -> List[Location]:
        params: dict[str, Any] = {
            "name_startsWith": query,
            "maxRows": limit,
            "username": self.config.api_key,
            "featureClass": self.config.feature_class,
            "orderby": self.config.order_by,
        }
        if country_code:
            params["country"] = country_code
        elif country:
            self._logger.debug(
                "No country code known, filtering results by name",
                extra={"country": country},
            )

        try:
            response = self.session.get(
                self.config.search_url,
                params=params,
                timeout=self.config.timeout_seconds,
            )
        except requests.Timeout as e:
            raise GeocodingError(
                "GeoNames request timed out",
                source=SOURCE_NAME,
                query=query,
                cause=e,
            )
        except requests.RequestException as e:
            raise GeocodingError(
                "GeoNames request failed",
                source=SOURCE_NAME,
                query=query,
                cause=e,
            )

        if not response.ok:
            raise GeocodingError(
                f"GeoNames request failed with status {response.status_code}",
                source=SOURCE_NAME,
                query=query,
                status_code=response.status_code,
                is_rate_limited=response.status_code == 429,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedPayloadError(
                "GeoNames response is not JSON",
                source=SOURCE_NAME,
                detail="invalid json",
                cause=e,
            )

        if not isinstance(data, dict):
            raise MalformedPayloadError(
                "GeoNames response is not an object",
                source=SOURCE_NAME,
                detail=type(data).__name__,
            )

        status = data.get("status")
        if isinstance(status, dict):
            code = status.get("value")
            raise GeocodingError(
                f"GeoNames error: {status.get('message', 'unknown error')}",
                source=SOURCE_NAME,
                query=query,
                is_rate_limited=code in _RATE_LIMIT_CODES,
            )

        rows = data.get("geonames")
        if not isinstance(rows, list):
            raise MalformedPayloadError(
                "GeoNames response has no result list",
                source=SOURCE_NAME,
                detail="missing 'geonames'",
            )

        locations: List[Location] = []
        for raw in rows:
            try:
                location = GeoNamesRecord.model_validate(raw).to_location()
            except (ValidationError, ValueError) as e:
                self._logger.warning(
                    "Skipping malformed GeoNames row",
                    extra={"query": query, "error": str(e)},
                )
                continue
            if (
                country_code is None
                and country
                and location.country.casefold() != country.strip().casefold()
            ):
                continue
            locations.append(location)

        self._logger.debug(
            "GeoNames search",
            extra={"query": query, "country": country_code, "results": len(locations)},
        )
        return locations
