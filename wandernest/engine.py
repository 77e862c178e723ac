"""Wires the catalog, both fuzzy indexes and the search settings together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from wandernest.config import SearchSettings, Settings
from wandernest.search.autocomplete import AutocompleteController
from wandernest.search.index import AUTOCOMPLETE_KEYS, LISTING_KEYS, FuzzyIndex, IndexKey
from wandernest.search.listing import ListingView
from wandernest.storage.catalog import DestinationCatalog

logger = logging.getLogger(__name__)


def build_index(
    catalog: DestinationCatalog, keys: tuple[IndexKey, ...], settings: SearchSettings
) -> FuzzyIndex:
    return FuzzyIndex(
        catalog,
        keys,
        threshold=settings.threshold,
        distance=settings.distance,
        min_match_char_length=settings.min_match_char_length,
    )


@dataclass
class SearchEngine:
    catalog: DestinationCatalog
    suggestion_index: FuzzyIndex
    listing_index: FuzzyIndex
    settings: SearchSettings

    @classmethod
    def create(
        cls, catalog: DestinationCatalog, settings: SearchSettings | None = None
    ) -> "SearchEngine":
        settings = settings or SearchSettings()
        return cls(
            catalog=catalog,
            suggestion_index=build_index(catalog, AUTOCOMPLETE_KEYS, settings),
            listing_index=build_index(catalog, LISTING_KEYS, settings),
            settings=settings,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchEngine":
        if settings.catalog_path is not None:
            catalog = DestinationCatalog.from_json(settings.catalog_path)
        else:
            catalog = DestinationCatalog.bundled()
        return cls.create(catalog, settings.search)

    def autocomplete(self, **kwargs) -> AutocompleteController:
        """New controller for one search box; kwargs go to AutocompleteController."""
        kwargs.setdefault("limit", self.settings.suggestion_limit)
        return AutocompleteController(self.suggestion_index, **kwargs)

    def listing_view(self) -> ListingView:
        return ListingView(self.listing_index, page_size=self.settings.page_size)
