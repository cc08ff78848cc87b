"""Command-line entry point.

Usage:
    python -m location_resolver search mum --country India --limit 5
    python -m location_resolver popular --country "United States"
    python -m location_resolver countries
    python -m location_resolver init-db
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, List, Optional

from .config import get_config
from .container import Container
from .logging_setup import configure_logging
from .ports.database import LocationDatabasePort
from .ports.gazetteer import GazetteerPort
from .services import LocationResolverService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="location_resolver",
        description="Resolve partial place names into ranked locations.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search locations by partial name")
    search.add_argument("query")
    search.add_argument("--country", default=None, help="Country name (default from config)")
    search.add_argument("--limit", type=int, default=None)
    search.add_argument("--no-coordinates", action="store_true")

    popular = sub.add_parser("popular", help="List popular cities of a country")
    popular.add_argument("--country", default=None)
    popular.add_argument("--limit", type=int, default=None)

    sub.add_parser("countries", help="List countries")
    sub.add_parser("init-db", help="Create the schema and seed it from the gazetteer")

    return parser


def _dump(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(config.observability)
    container = Container.create_default(config)

    if args.command == "init-db":
        database = container.resolve(LocationDatabasePort)
        inserted = database.seed_from_gazetteer(container.resolve(GazetteerPort))
        _dump({"inserted": inserted})
        return 0

    resolver: LocationResolverService = container.resolve(LocationResolverService)

    if args.command == "search":
        result = resolver.search(
            args.query,
            country=args.country,
            limit=args.limit,
            include_coordinates=not args.no_coordinates,
        )
        _dump(result.as_dict())
    elif args.command == "popular":
        cities = resolver.get_popular_cities(country=args.country, limit=args.limit)
        _dump([city.as_dict() for city in cities])
    elif args.command == "countries":
        _dump([country.as_dict() for country in resolver.get_countries()])

    return 0


if __name__ == "__main__":
    sys.exit(main())
