"""Free-text search results for the ``/search?q=`` view."""

from __future__ import annotations

from dataclasses import dataclass

from wandernest.models import DestinationRecord, ImageResult, MatchResult
from wandernest.services.unsplash import UnsplashService

from .index import FuzzyIndex


@dataclass(frozen=True)
class SearchResults:
    query: str
    matches: tuple[MatchResult, ...]

    @property
    def best(self) -> DestinationRecord | None:
        return self.matches[0].record if self.matches else None

    @property
    def records(self) -> list[DestinationRecord]:
        return [match.record for match in self.matches]

    def __len__(self) -> int:
        return len(self.matches)


def resolve_search(index: FuzzyIndex, query: str, limit: int | None = None) -> SearchResults:
    query = (query or "").strip()
    return SearchResults(query=query, matches=tuple(index.search(query, limit)))


def place_images(service: UnsplashService, results: SearchResults) -> list[ImageResult]:
    """
    Images for a results view: the best catalog match's name and country when
    there is one, retrying with the bare name if that finds nothing.
    """
    best = results.best
    if best is None:
        return service.search_images(results.query)

    images = service.search_images(best.to_image_query())
    if not images and best.to_image_query() != best.name:
        images = service.search_images(best.name)
    return images
