"""Geocoding port - Abstraction for the external place-search API.

This protocol defines the contract for third-party geocoding services,
allowing different implementations (GeoNames, etc.) to be used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Location


class GeocodingSourcePort(Protocol):
    """Port for external geocoding sources.

    Implementation: adapters/geocoding/geonames_adapter.py

    Unlike the database source, implementations raise on failure
    (missing credentials, HTTP errors, malformed payloads); the
    orchestrator turns those errors into an empty contribution.
    """

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
        ...
