"""Gazetteer port - Abstraction for the in-memory last-resort source."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import Location


class GazetteerPort(Protocol):
    """Port for the static gazetteer.

    Implementation: adapters/gazetteer/static_gazetteer.py

    The gazetteer is immutable after construction and has no external
    dependency, so its operations never fail.
    """

    def search_static(self, query: str, country: Optional[str] = None) -> List[Location]:
        """Ranked case-insensitive substring matches on name or state."""
        ...

    def filter_popular(self, country: Optional[str] = None) -> List[Location]:
        """Ranked popular entries of a country."""
        ...

    def get_by_id(self, location_id: str) -> Optional[Location]:
        """Linear lookup by id."""
        ...

    def all(self) -> Sequence[Location]:
        """Every entry, in file order."""
        ...
