"""Destination models for the searchable travel catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PRICE_PATTERN = re.compile(r"\$(\d+)")


def extract_price(price: str) -> int:
    """First integer following a ``$`` in a price label; 0 when there is none."""
    match = PRICE_PATTERN.search(price)
    return int(match.group(1)) if match else 0


class BudgetLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class DestinationRecord(BaseModel):
    """A single destination in the catalog. Records are immutable once loaded."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: int
    name: str = Field(min_length=1)
    country: str
    continent: str
    description: str
    category: str
    travel_type: tuple[str, ...] = ()  # e.g. ("Beach", "Nature")
    top_attractions: tuple[str, ...] = ()
    budget_level: BudgetLevel
    best_season: str  # e.g. "Dec - Feb"
    duration: str  # e.g. "Weekend", "1 Week"
    location_type: str | None = None
    rating: float = Field(ge=0.0, le=5.0)
    price: str  # e.g. "From $89/night"
    is_hidden_gem: bool = False
    is_verified: bool = False

    @field_validator("travel_type", mode="before")
    @classmethod
    def dedupe_travel_type(cls, v):
        """Travel types behave as a set; keep the first occurrence of each tag."""
        if isinstance(v, str):
            return (v,)
        if isinstance(v, (list, tuple, set, frozenset)):
            seen = set()
            unique = []
            for tag in v:
                if tag not in seen:
                    seen.add(tag)
                    unique.append(tag)
            return tuple(unique)
        return v

    @field_validator("budget_level", mode="before")
    @classmethod
    def normalize_budget_level(cls, v):
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    def price_amount(self) -> int:
        """Return the first dollar amount embedded in the price label, or 0."""
        return extract_price(self.price)

    def has_price(self) -> bool:
        return PRICE_PATTERN.search(self.price) is not None

    def to_image_query(self) -> str:
        """Build the image search query used for cards and detail views."""
        if self.country and self.country != self.name:
            return f"{self.name} {self.country}"
        return self.name


@dataclass(frozen=True)
class MatchResult:
    """A catalog record paired with its fuzzy match score (lower is better)."""

    record: DestinationRecord
    score: float


class ImageResult(BaseModel):
    """An image returned by the image search collaborator."""

    url: str
    alt: str
    photographer: str = "Unsplash"
    photographer_url: str = "https://unsplash.com"
