"""Country directory port - Abstraction for the reference country list."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol

if TYPE_CHECKING:
    from ..domain.models import Country


class CountryDirectoryPort(Protocol):
    """Port for an external "all countries" reference source.

    Implementation: adapters/countries/rest_countries_adapter.py
    """

    def list_countries(self) -> List[Country]:
        """Return every country sorted by name.

        Raises:
            CountriesApiError: On transport failure or non-success status.
            MalformedPayloadError: If the response does not parse.
        """
        ...
