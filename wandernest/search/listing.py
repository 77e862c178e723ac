"""Filter, sort and paginate destinations for browse views."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

from wandernest.events import EventEmitter
from wandernest.models import DestinationRecord, extract_price

from .index import FuzzyIndex

logger = logging.getLogger(__name__)

PAGE_SIZE = 12

ALL_CONTINENTS = "All Continents"
ALL_TYPES = "All Types"
ALL_BUDGETS = "All Budgets"
ALL_SEASONS = "All Seasons"
ALL_DURATIONS = "All Durations"

CONTINENTS = [ALL_CONTINENTS, "Asia", "Europe", "North America", "South America", "Africa", "Oceania"]
TRAVEL_TYPES = [
    ALL_TYPES, "Beach", "Cultural", "Urban", "Adventure", "Nature",
    "Luxury", "History", "Food", "Spiritual", "Pilgrimage",
]
BUDGET_LEVELS = [ALL_BUDGETS, "Low", "Medium", "High"]
SEASONS = [ALL_SEASONS, "Dec - Feb", "Mar - May", "Jun - Aug", "Sep - Nov"]
DURATIONS = [ALL_DURATIONS, "Weekend", "1 Week", "2+ Weeks"]
LOCATION_TYPES = [
    ALL_TYPES, "Country", "City", "Region", "Neighborhood", "Temple",
    "Monument", "Natural Wonder", "Attraction",
]


class SortMode(str, Enum):
    POPULARITY = "popularity"
    RATING = "rating"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    NAME = "name"


class ListingFilters(BaseModel):
    """Categorical filters; each default sentinel means "no constraint"."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    continent: str = ALL_CONTINENTS
    travel_type: str = ALL_TYPES
    budget: str = ALL_BUDGETS
    season: str = ALL_SEASONS
    duration: str = ALL_DURATIONS
    location_type: str = ALL_TYPES

    def is_active(self) -> bool:
        return self != ListingFilters()

    def matches(self, record: DestinationRecord) -> bool:
        if self.continent != ALL_CONTINENTS and record.continent != self.continent:
            return False
        if self.travel_type != ALL_TYPES and self.travel_type not in record.travel_type:
            return False
        if self.budget != ALL_BUDGETS and record.budget_level.value != self.budget:
            return False
        if self.season != ALL_SEASONS:
            # "Dec - Feb" matches any season label mentioning "Dec".
            season_start = self.season.split(" - ")[0]
            if season_start not in record.best_season:
                return False
        if self.duration != ALL_DURATIONS and self.duration not in record.duration:
            return False
        if self.location_type != ALL_TYPES:
            if not record.location_type:
                return False
            if record.location_type.lower() != self.location_type.lower():
                return False
        return True


def filter_destinations(
    records: Iterable[DestinationRecord], filters: ListingFilters
) -> list[DestinationRecord]:
    return [record for record in records if filters.matches(record)]


_SORT_KEYS: dict[SortMode, tuple[Callable[[DestinationRecord], object], bool]] = {
    SortMode.POPULARITY: (lambda r: r.rating, True),
    SortMode.RATING: (lambda r: r.rating, True),
    # Records without a price read as 0 but always sort after priced ones.
    SortMode.PRICE_LOW: (lambda r: (not r.has_price(), extract_price(r.price)), False),
    SortMode.PRICE_HIGH: (lambda r: (r.has_price(), extract_price(r.price)), True),
    SortMode.NAME: (lambda r: (r.name.casefold(), r.name), False),
}


def sort_destinations(
    records: Iterable[DestinationRecord], mode: SortMode | str = SortMode.POPULARITY
) -> list[DestinationRecord]:
    """Return a new list in ``mode`` order. Sorting is stable for equal keys."""
    key, reverse = _SORT_KEYS[SortMode(mode)]
    return sorted(records, key=key, reverse=reverse)


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


@dataclass(frozen=True)
class ListingPage:
    items: tuple[DestinationRecord, ...]
    page: int
    total_pages: int
    total_count: int

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(
    records: Sequence[DestinationRecord], page: int, page_size: int = PAGE_SIZE
) -> ListingPage:
    """
    Slice one 1-indexed page out of ``records``.

    Pages outside ``[1, total_pages]`` come back empty; clamping is the
    caller's job.
    """
    pages = total_pages(len(records), page_size)
    if page < 1:
        items: tuple[DestinationRecord, ...] = ()
    else:
        start = (page - 1) * page_size
        items = tuple(records[start:start + page_size])
    return ListingPage(items=items, page=page, total_pages=pages, total_count=len(records))


def candidate_destinations(
    index: FuzzyIndex, query: str, catalog: Iterable[DestinationRecord] | None = None
) -> list[DestinationRecord]:
    """Fuzzy matches for a non-empty query, otherwise the whole catalog."""
    if query is not None and query.strip():
        return index.search_records(query)
    return list(index.records if catalog is None else catalog)


def run_listing(
    index: FuzzyIndex,
    query: str = "",
    filters: ListingFilters | None = None,
    sort: SortMode | str = SortMode.POPULARITY,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> ListingPage:
    """Search, filter, sort and paginate in one pass."""
    candidates = candidate_destinations(index, query)
    filtered = filter_destinations(candidates, filters or ListingFilters())
    ordered = sort_destinations(filtered, sort)
    return paginate(ordered, page, page_size)


class ListingEvent(Enum):
    CHANGE = "change"  # (ListingPage)


class ListingView:
    """
    Stateful browse view: owns the query, filters, sort and current page.

    Changing the query, any filter or the sort returns to page 1. Explicit
    page requests are clamped to the available pages.
    """

    def __init__(self, index: FuzzyIndex, page_size: int = PAGE_SIZE):
        self.index = index
        self.page_size = page_size
        self.events = EventEmitter()
        self.query = ""
        self.filters = ListingFilters()
        self.sort = SortMode.POPULARITY
        self.page_number = 1
        self._ordered: list[DestinationRecord] = []
        self._recompute()

    def _recompute(self) -> None:
        candidates = candidate_destinations(self.index, self.query)
        filtered = filter_destinations(candidates, self.filters)
        self._ordered = sort_destinations(filtered, self.sort)
        logger.debug(
            "Listing query=%r filters=%s sort=%s -> %d results",
            self.query, self.filters.model_dump(), self.sort.value, len(self._ordered),
        )

    def _changed(self) -> None:
        self.events.emit(ListingEvent.CHANGE, self.current_page())

    @property
    def results(self) -> list[DestinationRecord]:
        return list(self._ordered)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self._ordered), self.page_size)

    def current_page(self) -> ListingPage:
        return paginate(self._ordered, self.page_number, self.page_size)

    def set_query(self, query: str) -> None:
        self.query = query
        self.page_number = 1
        self._recompute()
        self._changed()

    def set_filters(self, filters: ListingFilters | None = None, **changes) -> None:
        """
        Replace the filters, or update individual ones by field name.

        Raises:
            pydantic.ValidationError: For unknown filter names or non-string values
        """
        base = filters or self.filters
        if changes:
            base = ListingFilters.model_validate({**base.model_dump(), **changes})
        self.filters = base
        self.page_number = 1
        self._recompute()
        self._changed()

    def set_sort(self, sort: SortMode | str) -> None:
        self.sort = SortMode(sort)
        self.page_number = 1
        self._recompute()
        self._changed()

    def go_to_page(self, page: int) -> ListingPage:
        pages = self.total_pages
        self.page_number = min(max(1, page), pages) if pages > 0 else 1
        self._changed()
        return self.current_page()

    def next_page(self) -> ListingPage:
        return self.go_to_page(self.page_number + 1)

    def previous_page(self) -> ListingPage:
        return self.go_to_page(self.page_number - 1)

    def has_active_filters(self) -> bool:
        return self.filters.is_active() or self.query != ""

    def reset(self) -> None:
        self.query = ""
        self.filters = ListingFilters()
        self.page_number = 1
        self._recompute()
        self._changed()
