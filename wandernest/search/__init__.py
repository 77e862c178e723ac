from .bitap import BitapOptions, BitapPattern, BitapResult
from .index import AUTOCOMPLETE_KEYS, LISTING_KEYS, FuzzyIndex, IndexKey
from .autocomplete import (
    AutocompleteController,
    AutocompleteEvent,
    AutocompleteState,
    AutocompleteStatus,
    Key,
)
from .listing import (
    PAGE_SIZE,
    ListingFilters,
    ListingPage,
    ListingView,
    SortMode,
    filter_destinations,
    paginate,
    run_listing,
    sort_destinations,
)

__all__ = [
    "BitapOptions",
    "BitapPattern",
    "BitapResult",
    "AUTOCOMPLETE_KEYS",
    "LISTING_KEYS",
    "FuzzyIndex",
    "IndexKey",
    "AutocompleteController",
    "AutocompleteEvent",
    "AutocompleteState",
    "AutocompleteStatus",
    "Key",
    "PAGE_SIZE",
    "ListingFilters",
    "ListingPage",
    "ListingView",
    "SortMode",
    "filter_destinations",
    "paginate",
    "run_listing",
    "sort_destinations",
]
