"""Paths for the views a search box can navigate to."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, quote, urlsplit

DESTINATIONS_PATH = "/destinations"
SEARCH_PATH = "/search"


def destination_path(destination_id: int) -> str:
    return f"{DESTINATIONS_PATH}/{destination_id}"


def search_path(query: str) -> str:
    """Results view for a free-text query, e.g. ``/search?q=new%20york``."""
    return f"{SEARCH_PATH}?q={quote(query, safe='')}"


@dataclass(frozen=True)
class Route:
    view: str  # "destination", "search", "destinations" or "unknown"
    destination_id: int | None = None
    query: str | None = None


def parse_path(path: str) -> Route:
    """Resolve a navigation path back into the view it points at."""
    parts = urlsplit(path)
    segments = [s for s in parts.path.split("/") if s]

    if parts.path.rstrip("/") == SEARCH_PATH:
        query = parse_qs(parts.query).get("q", [""])[0]
        return Route(view="search", query=query)

    if segments and segments[0] == DESTINATIONS_PATH.strip("/"):
        if len(segments) == 1:
            return Route(view="destinations")
        if len(segments) == 2 and segments[1].isdigit():
            return Route(view="destination", destination_id=int(segments[1]))

    return Route(view="unknown")
