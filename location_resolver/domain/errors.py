"""Typed domain errors for the location resolution engine.

These error types replace silent exception swallowing with explicit,
typed errors that can be handled appropriately at each layer.

All errors inherit from LocationResolverError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class LocationResolverError(Exception):
    """Base error for the location resolution domain.

    All domain-specific errors inherit from this class.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class ConfigurationError(LocationResolverError):
    """Invalid or missing configuration.

    Raised at construction time and never swallowed by the orchestrator.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class GazetteerError(LocationResolverError):
    """The static gazetteer data could not be loaded.

    Attributes:
        file_path: Path to the gazetteer data file
    """

    file_path: Optional[str] = None


@dataclass
class SourceError(LocationResolverError):
    """A location source failed to produce a usable answer.

    Attributes:
        source: Name of the failing source (e.g. 'geonames')
    """

    source: str = ""


@dataclass
class SourceNotConfiguredError(SourceError):
    """A source is missing a required setting (typically a credential).

    Kept distinct from other source errors so callers can tell
    "not configured" apart from "returned nothing" in logs.

    Attributes:
        setting_name: Name of the missing setting
    """

    setting_name: str = ""


@dataclass
class GeocodingError(SourceError):
    """The external geocoding API call failed.

    Attributes:
        query: The location query that failed
        status_code: HTTP status code, when a response was received
        is_rate_limited: Whether the failure was due to rate limiting
    """

    query: str = ""
    status_code: Optional[int] = None
    is_rate_limited: bool = False


@dataclass
class CountriesApiError(SourceError):
    """The country reference API call failed.

    Attributes:
        status_code: HTTP status code, when a response was received
    """

    status_code: Optional[int] = None


@dataclass
class MalformedPayloadError(SourceError):
    """A source answered with a payload that does not match its schema.

    Attributes:
        detail: Short description of what was wrong with the payload
    """

    detail: str = ""
