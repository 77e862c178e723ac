"""Command-line access to destination search and listings."""

from __future__ import annotations

import argparse
import logging
import sys

from wandernest.config import configure_logging, load_settings
from wandernest.engine import SearchEngine
from wandernest.errors import WanderNestError
from wandernest.search.listing import (
    BUDGET_LEVELS,
    CONTINENTS,
    DURATIONS,
    LOCATION_TYPES,
    SEASONS,
    TRAVEL_TYPES,
    ListingFilters,
    SortMode,
    run_listing,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wandernest", description="WanderNest destination search")
    parser.add_argument("--local", action="store_true", help="Load API keys from keyring before the environment")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Show autocomplete suggestions for a query")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None, help="Maximum suggestions (default from settings)")
    search.add_argument("--scores", action="store_true", help="Print match scores")

    listing = sub.add_parser("list", help="Browse destinations with filters, sorting and pages")
    listing.add_argument("--query", default="")
    listing.add_argument("--continent", default=CONTINENTS[0], choices=CONTINENTS)
    listing.add_argument("--travel-type", default=TRAVEL_TYPES[0], choices=TRAVEL_TYPES)
    listing.add_argument("--budget", default=BUDGET_LEVELS[0], choices=BUDGET_LEVELS)
    listing.add_argument("--season", default=SEASONS[0], choices=SEASONS)
    listing.add_argument("--duration", default=DURATIONS[0], choices=DURATIONS)
    listing.add_argument("--location-type", default=LOCATION_TYPES[0], choices=LOCATION_TYPES)
    listing.add_argument("--sort", default=SortMode.POPULARITY.value, choices=[m.value for m in SortMode])
    listing.add_argument("--page", type=int, default=1)

    return parser.parse_args(argv)


def _format_record(record) -> str:
    return f"{record.name}, {record.country} ({record.continent})  ★ {record.rating}  {record.price}"


def run_search(engine: SearchEngine, args: argparse.Namespace) -> int:
    limit = args.limit or engine.settings.suggestion_limit
    matches = engine.suggestion_index.search(args.query, limit=limit)
    if not matches:
        print(f'No destinations found for "{args.query}"')
        print("Try searching for a city, country, or region")
        return 1

    for position, match in enumerate(matches, start=1):
        line = f"{position}. {_format_record(match.record)}"
        if args.scores:
            line += f"  [score {match.score:.6f}]"
        print(line)
    return 0


def run_list(engine: SearchEngine, args: argparse.Namespace) -> int:
    filters = ListingFilters(
        continent=args.continent,
        travel_type=args.travel_type,
        budget=args.budget,
        season=args.season,
        duration=args.duration,
        location_type=args.location_type,
    )
    page = run_listing(
        engine.listing_index,
        query=args.query,
        filters=filters,
        sort=args.sort,
        page=args.page,
        page_size=engine.settings.page_size,
    )
    if page.total_count == 0:
        print("No destinations match these filters")
        return 1
    if page.is_empty:
        print(f"Page {page.page} is out of range (1-{page.total_pages})")
        return 1

    for record in page.items:
        print(_format_record(record))
    print(f"\nPage {page.page} of {page.total_pages} ({page.total_count} destinations)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(local_mode=args.local, debug=args.debug or None)
        configure_logging(settings.log_level)
        engine = SearchEngine.from_settings(settings)
    except WanderNestError as e:
        logger.error("%s", e)
        return 2

    if args.command == "search":
        return run_search(engine, args)
    return run_list(engine, args)


if __name__ == "__main__":
    sys.exit(main())
