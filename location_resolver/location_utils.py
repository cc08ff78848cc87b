"""Helpers for displaying, filtering and converting location records.

These are pure functions over the canonical Location record, used by
the orchestrator (cache keys) and by callers building pickers or forms
on top of the engine.
"""

from __future__ import annotations

import functools
import itertools
import threading
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional

from geopy.distance import great_circle

from .domain.models import Location

_temp_ids = itertools.count(1)


class DisplayFormat(str, Enum):
    """How much of a location's hierarchy to show."""

    NAME = "name"
    NAME_STATE = "name-state"
    NAME_STATE_COUNTRY = "name-state-country"
    FULL = "full"


def format_location_display(
    location: Location, display_format: DisplayFormat | str = DisplayFormat.NAME_STATE
) -> str:
    """Render a location as display text.

    Args:
        location: The record to render.
        display_format: One of the DisplayFormat values.

    Returns:
        e.g. 'Mumbai', 'Mumbai, Maharashtra' or 'Mumbai, Maharashtra, India'.
        Unknown formats render the name only.
    """
    try:
        display_format = DisplayFormat(display_format)
    except ValueError:
        return location.name

    if display_format is DisplayFormat.NAME_STATE:
        return f"{location.name}, {location.state}" if location.state else location.name
    if display_format in (DisplayFormat.NAME_STATE_COUNTRY, DisplayFormat.FULL):
        if location.state:
            return f"{location.name}, {location.state}, {location.country}"
        return f"{location.name}, {location.country}"
    return location.name


def location_display_text(location: Location, context: str = "medium") -> str:
    """Display text for a UI context: 'short', 'medium' or 'long'."""
    if context == "medium":
        return format_location_display(location, DisplayFormat.NAME_STATE)
    if context == "long":
        return format_location_display(location, DisplayFormat.FULL)
    return location.name


def _key_part(value: str) -> str:
    # escape the separator so distinct parts never join to the same key
    return value.replace("%", "%25").replace("-", "%2D")


def generate_cache_key(query: str, country: Optional[str] = None, limit: int = 10) -> str:
    """Build the orchestrator cache key for a search request."""
    return f"{_key_part(query.strip().lower())}-{_key_part(country or 'all')}-{limit or 10}"


def generate_popular_cache_key(country: Optional[str] = None, limit: int = 20) -> str:
    """Build the orchestrator cache key for a popular-cities request."""
    return f"popular:{_key_part(country or 'all')}-{limit}"


def is_valid_location(candidate: Any) -> bool:
    """Check that a record or mapping carries a usable id, name and country."""
    if isinstance(candidate, Location):
        return True
    if not isinstance(candidate, Mapping):
        return False
    return all(
        isinstance(candidate.get(key), str) and candidate.get(key, "").strip()
        for key in ("id", "name", "country")
    )


def filter_locations_by_country(
    locations: Iterable[Location], country: str
) -> List[Location]:
    """Keep the locations whose country matches, ignoring case."""
    wanted = country.strip().casefold()
    return [loc for loc in locations if loc.country.casefold() == wanted]


def match_locations(locations: Iterable[Location], query: str) -> List[Location]:
    """Substring match on name, state or country.

    Queries shorter than two characters return every location.
    """
    locations = list(locations)
    if not query or len(query) < 2:
        return locations

    needle = query.casefold()
    return [
        loc
        for loc in locations
        if needle in loc.name.casefold()
        or (loc.state and needle in loc.state.casefold())
        or needle in loc.country.casefold()
    ]


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in kilometres."""
    return great_circle((lat1, lng1), (lat2, lng2)).km


def find_nearby_locations(
    locations: Iterable[Location],
    center_lat: float,
    center_lng: float,
    radius_km: float,
) -> List[Location]:
    """Locations with coordinates lying within `radius_km` of a point."""
    nearby: List[Location] = []
    for loc in locations:
        if loc.coordinates is None:
            continue
        distance = calculate_distance(
            center_lat, center_lng, loc.coordinates.lat, loc.coordinates.lng
        )
        if distance <= radius_km:
            nearby.append(loc)
    return nearby


def location_to_string(location: Location) -> str:
    return location.name


def string_to_location(text: str, country: str = "India") -> Location:
    """Wrap free text into a record with a synthesized `temp-<n>` id.

    Raises:
        ValueError: If the text is blank.
    """
    return Location(
        id=f"temp-{next(_temp_ids)}",
        name=text.strip(),
        country=country,
        is_popular=False,
    )


def locations_to_strings(locations: Iterable[Location]) -> List[str]:
    return [location_to_string(loc) for loc in locations]


def strings_to_locations(texts: Iterable[str], country: str = "India") -> List[Location]:
    """Wrap free-text names into records with positional `temp-<index>` ids."""
    return [
        Location(id=f"temp-{index}", name=text.strip(), country=country, is_popular=False)
        for index, text in enumerate(texts)
    ]


def debounce(wait_seconds: float) -> Callable[[Callable[..., Any]], Callable[..., None]]:
    """Delay calls until `wait_seconds` pass without a new call.

    Only the last call of a burst runs, on a timer thread. The wrapped
    function exposes `cancel()` to drop a pending call.

    Example:
        @debounce(0.3)
        def on_keystroke(text):
            resolver.search(text)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., None]:
        lock = threading.Lock()
        pending: List[threading.Timer] = []

        def cancel() -> None:
            with lock:
                while pending:
                    pending.pop().cancel()

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> None:
            timer = threading.Timer(wait_seconds, func, args=args, kwargs=kwargs)
            timer.daemon = True
            with lock:
                while pending:
                    pending.pop().cancel()
                pending.append(timer)
            timer.start()

        wrapper.cancel = cancel  # type: ignore[attr-defined]
        return wrapper

    return decorator
