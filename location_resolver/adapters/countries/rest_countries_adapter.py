"""REST Countries adapter.

Fetches the full country list from the public REST Countries API.
Only consulted when the location database cannot list countries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...config import CountriesApiConfig, get_config
from ...domain.errors import CountriesApiError, MalformedPayloadError
from ...domain.models import Country

SOURCE_NAME = "restcountries"


class _CountryName(BaseModel):
    model_config = ConfigDict(extra="ignore")

    common: str = Field(min_length=1)


class RestCountryRecord(BaseModel):
    """One element of the REST Countries response."""

    model_config = ConfigDict(extra="ignore")

    cca2: str = Field(min_length=2, max_length=2)
    name: _CountryName

    def to_country(self) -> Country:
        return Country(code=self.cca2.upper(), name=self.name.common.strip())


@dataclass
class RestCountriesAdapter:
    """Country directory implementing CountryDirectoryPort.

    Attributes:
        config: Endpoint and timeout configuration
        session: HTTP session used for requests
    """

    config: CountriesApiConfig = field(default_factory=lambda: get_config().countries)
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def list_countries(self) -> List[Country]:
        """Return every country sorted by name.

        Raises:
            CountriesApiError: On transport failure or non-success status.
            MalformedPayloadError: If the response does not parse.
        """
        try:
            response = self.session.get(
                self.config.url,
                params={"fields": "name,cca2"},
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise CountriesApiError(
                "Countries request failed",
                source=SOURCE_NAME,
                cause=e,
            )

        if not response.ok:
            raise CountriesApiError(
                f"Countries request failed with status {response.status_code}",
                source=SOURCE_NAME,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedPayloadError(
                "Countries response is not JSON",
                source=SOURCE_NAME,
                detail="invalid json",
                cause=e,
            )

        if not isinstance(data, list):
            raise MalformedPayloadError(
                "Countries response is not a list",
                source=SOURCE_NAME,
                detail=type(data).__name__,
            )

        countries: List[Country] = []
        for raw in data:
            try:
                countries.append(RestCountryRecord.model_validate(raw).to_country())
            except ValidationError as e:
                self._logger.debug(
                    "Skipping malformed country",
                    extra={"error": str(e)},
                )

        countries.sort(key=lambda country: country.name.casefold())
        self._logger.debug("Countries fetched", extra={"count": len(countries)})
        return countries
