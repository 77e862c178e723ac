from .destination import (
    PRICE_PATTERN,
    extract_price,
    BudgetLevel,
    DestinationRecord,
    MatchResult,
    ImageResult,
)
from .preferences import UserPreferences, ChatMessage

__all__ = [
    "PRICE_PATTERN",
    "extract_price",
    "BudgetLevel",
    "DestinationRecord",
    "MatchResult",
    "ImageResult",
    "UserPreferences",
    "ChatMessage",
]
