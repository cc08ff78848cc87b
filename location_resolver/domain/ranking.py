"""Ranking policy and id-based merging of location candidates.

Ranking order:
1. Popular records first
2. Names starting with the query before substring-only matches
3. Higher population first, records without population last
4. Name, lexicographically

The same policy is used by the orchestrator on merged results and by
the static gazetteer on its own matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Location, SourceKind


def rank_key(location: Location, query: Optional[str] = None) -> Tuple:
    """Sort key implementing the ranking policy for one record."""
    needle = (query or "").strip().casefold()
    is_prefix = bool(needle) and location.name.casefold().startswith(needle)
    population = location.population
    return (
        not location.is_popular,
        not is_prefix,
        population is None,
        -(population or 0),
        location.name.casefold(),
        location.name,
    )


def rank_locations(
    locations: Iterable[Location], query: Optional[str] = None
) -> List[Location]:
    """Return a new list of locations ordered by the ranking policy.

    Args:
        locations: Candidates to order.
        query: The user query, used for the prefix-match criterion.

    Returns:
        The ranked list.
    """
    return sorted(locations, key=lambda location: rank_key(location, query))


@dataclass
class CandidateSet:
    """Accumulates candidates from several sources, unique by id.

    The first source to contribute an id owns it: later records with the
    same id are dropped, so adding sources in priority order makes
    higher-priority versions win collisions.
    """

    _records: Dict[str, Location] = field(default_factory=dict)
    _sources: Dict[str, SourceKind] = field(default_factory=dict)

    def add(self, records: Sequence[Location], source: SourceKind) -> int:
        """Add records from a source.

        Args:
            records: Records returned by the source.
            source: The contributing source.

        Returns:
            Number of records actually added.
        """
        added = 0
        for record in records:
            if record.id in self._records:
                continue
            self._records[record.id] = record
            self._sources[record.id] = source
            added += 1
        return added

    def source_of(self, location_id: str) -> Optional[SourceKind]:
        """Return which source contributed the record with this id."""
        return self._sources.get(location_id)

    def source_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for source in self._sources.values():
            counts[source.value] = counts.get(source.value, 0) + 1
        return counts

    def ranked(self, query: Optional[str] = None) -> List[Location]:
        return rank_locations(self._records.values(), query)

    def __len__(self) -> int:
        return len(self._records)
