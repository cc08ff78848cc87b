"""Domain layer - Core business models, errors and policies.

This module contains immutable domain models, typed errors, the
ranking/merge policy and the tagged source outcome used throughout
the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    CountriesApiError,
    GazetteerError,
    GeocodingError,
    LocationResolverError,
    MalformedPayloadError,
    SourceError,
    SourceNotConfiguredError,
)
from .models import (
    CacheEntry,
    Coordinates,
    Country,
    Location,
    NewCity,
    SearchResult,
    SourceKind,
    State,
)
from .outcome import SourceOutcome
from .ranking import CandidateSet, rank_locations

__all__ = [
    # Models
    "Coordinates",
    "Location",
    "SearchResult",
    "Country",
    "State",
    "NewCity",
    "CacheEntry",
    "SourceKind",
    "SourceOutcome",
    # Policies
    "CandidateSet",
    "rank_locations",
    # Errors
    "LocationResolverError",
    "ConfigurationError",
    "GazetteerError",
    "SourceError",
    "SourceNotConfiguredError",
    "GeocodingError",
    "CountriesApiError",
    "MalformedPayloadError",
]
