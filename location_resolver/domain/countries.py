"""Country name to ISO 3166-1 alpha-2 code mapping.

Used to translate the country names the engine is partitioned by into
the code parameter external sources expect, and to provide the last
resort country list when no source can answer.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .models import Country

COUNTRY_CODES: Dict[str, str] = {
    "argentina": "AR",
    "australia": "AU",
    "austria": "AT",
    "bangladesh": "BD",
    "belgium": "BE",
    "bhutan": "BT",
    "brazil": "BR",
    "canada": "CA",
    "china": "CN",
    "egypt": "EG",
    "france": "FR",
    "germany": "DE",
    "greece": "GR",
    "india": "IN",
    "indonesia": "ID",
    "ireland": "IE",
    "italy": "IT",
    "japan": "JP",
    "kenya": "KE",
    "malaysia": "MY",
    "maldives": "MV",
    "mexico": "MX",
    "nepal": "NP",
    "netherlands": "NL",
    "new zealand": "NZ",
    "portugal": "PT",
    "singapore": "SG",
    "south africa": "ZA",
    "spain": "ES",
    "sri lanka": "LK",
    "switzerland": "CH",
    "thailand": "TH",
    "turkey": "TR",
    "united arab emirates": "AE",
    "united kingdom": "GB",
    "united states": "US",
    "vietnam": "VN",
}

FALLBACK_COUNTRIES: tuple[Country, ...] = (
    Country(code="IN", name="India"),
    Country(code="US", name="United States"),
    Country(code="GB", name="United Kingdom"),
    Country(code="AU", name="Australia"),
    Country(code="CA", name="Canada"),
)


def country_code_for(country: Optional[str]) -> Optional[str]:
    """Map a country name (or an alpha-2 code) to its alpha-2 code.

    Args:
        country: Country name such as 'India', or a code such as 'IN'.

    Returns:
        The upper-case alpha-2 code, or None if the country is unknown.
    """
    if not country or not country.strip():
        return None
    cleaned = country.strip()
    if len(cleaned) == 2 and cleaned.isalpha():
        return cleaned.upper()
    return COUNTRY_CODES.get(cleaned.casefold())


def fallback_countries(default_country: Optional[str] = None) -> List[Country]:
    """Hardcoded country list, guaranteed to contain the default country."""
    countries = list(FALLBACK_COUNTRIES)
    if default_country and not any(
        c.name.casefold() == default_country.casefold() for c in countries
    ):
        code = country_code_for(default_country) or default_country[:2].upper()
        countries.insert(0, Country(code=code, name=default_country))
    return countries
