"""Static gazetteer adapter.

A fixed, hand-curated table of well-known places, loaded once from a
CSV file shipped with the package. It is the last-resort source for
searches and the fallback for popular-city and by-id lookups.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ...config import GazetteerConfig, get_config
from ...domain.errors import GazetteerError
from ...domain.models import Coordinates, Location
from ...domain.ranking import rank_locations

_TRUE_VALUES = {"1", "true", "yes", "y"}


def _same_country(location: Location, country: Optional[str]) -> bool:
    if not country:
        return True
    return location.country.casefold() == country.strip().casefold()


@dataclass
class StaticGazetteer:
    """In-memory gazetteer implementing GazetteerPort.

    Attributes:
        config: Gazetteer configuration (data file path)
        entries: Preloaded entries; when given, the data file is not read
    """

    config: GazetteerConfig = field(default_factory=lambda: get_config().gazetteer)
    entries: Optional[Sequence[Location]] = None

    _entries: tuple[Location, ...] = field(init=False, repr=False)
    _by_id: Dict[str, Location] = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.entries is not None:
            self._entries = tuple(self.entries)
        else:
            self._entries = tuple(self._load_from_csv())
        self._by_id = {}
        for entry in self._entries:
            self._by_id.setdefault(entry.id, entry)
        self._logger.debug("Gazetteer loaded", extra={"entries": len(self._entries)})

    def _load_from_csv(self) -> List[Location]:
        """Read the data file, skipping malformed rows."""
        path = self.config.data_file
        locations: List[Location] = []
        try:
            with path.open(encoding="utf-8", newline="") as f:
                reader = csv.DictReader(f)
                for line_number, row in enumerate(reader, start=2):
                    try:
                        locations.append(self._row_to_location(row))
                    except (KeyError, ValueError) as e:
                        self._logger.warning(
                            "Skipping malformed gazetteer row",
                            extra={"line": line_number, "error": str(e)},
                        )
        except OSError as e:
            raise GazetteerError(
                f"Failed to load gazetteer: {e}",
                file_path=str(path),
                cause=e,
            )
        return locations

    @staticmethod
    def _row_to_location(row: Dict[str, str]) -> Location:
        lat = (row.get("lat") or "").strip()
        lng = (row.get("lng") or "").strip()
        population = (row.get("population") or "").strip()
        return Location(
            id=row["id"].strip(),
            name=row["name"].strip(),
            country=row["country"].strip(),
            state=(row.get("state") or "").strip() or None,
            coordinates=Coordinates(lat=float(lat), lng=float(lng))
            if lat and lng
            else None,
            population=int(population) if population else None,
            is_popular=(row.get("is_popular") or "").strip().lower() in _TRUE_VALUES,
        )

    def search_static(self, query: str, country: Optional[str] = None) -> List[Location]:
        """Search entries by case-insensitive substring on name or state.

        Args:
            query: The partial place name.
            country: Restrict to this country (None for all).

        Returns:
            Ranked matches.
        """
        needle = query.strip().casefold()
        if not needle:
            return []
        matches = [
            entry
            for entry in self._entries
            if _same_country(entry, country)
            and (
                needle in entry.name.casefold()
                or (entry.state is not None and needle in entry.state.casefold())
            )
        ]
        return rank_locations(matches, needle)

    def filter_popular(self, country: Optional[str] = None) -> List[Location]:
        """Return the popular entries of a country, ranked."""
        popular = [
            entry
            for entry in self._entries
            if entry.is_popular and _same_country(entry, country)
        ]
        return rank_locations(popular)

    def get_by_id(self, location_id: str) -> Optional[Location]:
        return self._by_id.get(location_id)

    def all(self) -> Sequence[Location]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)
