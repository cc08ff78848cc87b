"""Country directory adapters - Implementations of CountryDirectoryPort.

Available implementations:
- RestCountriesAdapter: public REST Countries API
"""

from .rest_countries_adapter import RestCountriesAdapter, RestCountryRecord

__all__ = ["RestCountriesAdapter", "RestCountryRecord"]
