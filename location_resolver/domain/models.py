"""Immutable domain models for the location resolution engine.

All models are frozen dataclasses with slots for memory efficiency.
These models have no external dependencies and represent the core
business concepts of the application.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SourceKind(Enum):
    """Origin of a location candidate or country listing."""

    DATABASE = "database"
    EXTERNAL = "external"
    STATIC = "static"
    COUNTRIES_API = "countries_api"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class Coordinates:
    """GPS coordinates of a location."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.lat <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180 <= self.lng <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.lng}"
            )

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


def _require_text(value: str, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")


@dataclass(frozen=True, slots=True)
class Location:
    """The canonical location record every source is mapped into.

    Attributes:
        id: Opaque identifier, unique within one result set
        name: Display name (non-empty)
        country: Country name, the partition key for search and caching
        state: Optional administrative subdivision
        coordinates: Optional GPS coordinates
        population: Optional population, used only as a ranking tiebreaker
        is_popular: True only for curated gazetteer/database records
    """

    id: str
    name: str
    country: str
    state: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    population: Optional[int] = None
    is_popular: bool = False

    def __post_init__(self) -> None:
        _require_text(self.id, "id")
        _require_text(self.name, "name")
        _require_text(self.country, "country")

    def without_coordinates(self) -> Location:
        """Return a copy of this record with coordinates removed."""
        if self.coordinates is None:
            return self
        return dataclasses.replace(self, coordinates=None)

    def as_dict(self) -> Dict[str, Any]:
        """Render the camelCase wire shape, omitting absent optionals."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "isPopular": self.is_popular,
        }
        if self.state:
            data["state"] = self.state
        if self.coordinates is not None:
            data["coordinates"] = self.coordinates.as_dict()
        if self.population is not None:
            data["population"] = self.population
        return data


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A bounded, ranked slice of location candidates.

    Attributes:
        locations: Ranked records, at most `limit` of them
        total: Number of candidates before truncation
        has_more: Whether candidates were dropped by truncation
    """

    locations: tuple[Location, ...] = field(default_factory=tuple)
    total: int = 0
    has_more: bool = False

    @classmethod
    def empty(cls) -> SearchResult:
        return cls()

    @classmethod
    def from_candidates(cls, candidates: List[Location], limit: int) -> SearchResult:
        """Slice a ranked candidate list down to `limit` records."""
        return cls(
            locations=tuple(candidates[:limit]),
            total=len(candidates),
            has_more=len(candidates) > limit,
        )

    @property
    def is_empty(self) -> bool:
        """Check if no location was found."""
        return len(self.locations) == 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "locations": [location.as_dict() for location in self.locations],
            "total": self.total,
            "hasMore": self.has_more,
        }


@dataclass(frozen=True, slots=True)
class Country:
    """A country with its ISO 3166-1 alpha-2 code."""

    code: str
    name: str

    def as_dict(self) -> Dict[str, str]:
        return {"code": self.code, "name": self.name}


@dataclass(frozen=True, slots=True)
class State:
    """An administrative subdivision of a country."""

    id: str
    name: str
    code: str
    country_code: str


@dataclass(frozen=True, slots=True)
class NewCity:
    """Input for adding a city to the location database.

    Attributes:
        name: City name
        country: Country name
        state: Optional administrative subdivision
        coordinates: Optional GPS coordinates
        population: Optional population
        is_popular: Whether the city is curated as popular
    """

    name: str
    country: str
    state: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    population: Optional[int] = None
    is_popular: bool = False

    def __post_init__(self) -> None:
        _require_text(self.name, "name")
        _require_text(self.country, "country")
        if self.population is not None and self.population < 0:
            raise ValueError(f"Population must be positive, got {self.population}")


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached value with its write time and expiry time (epoch seconds)."""

    key: str
    data: Any
    timestamp: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at
