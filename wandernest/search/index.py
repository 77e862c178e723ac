"""Weighted multi-field fuzzy index over the destination catalog."""

from __future__ import annotations

import logging
import math
import re
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import get_args

from wandernest.errors import IndexConfigError
from wandernest.models import DestinationRecord, MatchResult

from .bitap import BitapOptions, BitapPattern

logger = logging.getLogger(__name__)

EPSILON = sys.float_info.epsilon
TOKEN_PATTERN = re.compile(r"[^ ]+")

# Longer queries are truncated before matching.
MAX_QUERY_LENGTH = 256


@dataclass(frozen=True)
class IndexKey:
    """A record field to index and its relative influence on the score."""

    name: str
    weight: float = 1.0


AUTOCOMPLETE_KEYS: tuple[IndexKey, ...] = (
    IndexKey("name", 3.0),
    IndexKey("country", 2.0),
    IndexKey("description", 1.0),
    IndexKey("top_attractions", 1.5),
    IndexKey("category", 1.0),
)

LISTING_KEYS: tuple[IndexKey, ...] = AUTOCOMPLETE_KEYS + (IndexKey("travel_type", 1.2),)


def field_norm(value: str) -> float:
    """Shorter fields count for more: 1 / sqrt(token count), rounded to 3 places."""
    tokens = len(TOKEN_PATTERN.findall(value))
    return round(1 / math.sqrt(tokens), 3)


def _is_text_field(annotation) -> bool:
    if annotation is str:
        return True
    args = get_args(annotation)
    return bool(args) and all(arg is str or arg is Ellipsis or arg is type(None) for arg in args)


@dataclass(frozen=True)
class _IndexedValue:
    key: int
    text: str
    norm: float


class FuzzyIndex:
    """
    Approximate-match index over a fixed set of destination records.

    Every indexed field value is matched with bitap. A field matches when its
    score is within ``threshold``; each match is normalised to that window and
    combined with the field's weight and length norm, so matches on short,
    heavy fields (name, country) dominate matches buried in descriptions.
    """

    def __init__(
        self,
        records: Iterable[DestinationRecord],
        keys: Sequence[IndexKey] = AUTOCOMPLETE_KEYS,
        *,
        threshold: float = 0.3,
        distance: int = 100,
        min_match_char_length: int = 2,
    ):
        self.keys = self._validate_keys(keys)
        if not 0.0 <= threshold <= 1.0:
            raise IndexConfigError(f"threshold must be between 0 and 1, got {threshold}")
        if distance < 0:
            raise IndexConfigError(f"distance must not be negative, got {distance}")
        if min_match_char_length < 1:
            raise IndexConfigError(
                f"min_match_char_length must be at least 1, got {min_match_char_length}"
            )

        self.threshold = threshold
        self.min_match_char_length = min_match_char_length
        self.options = BitapOptions(
            threshold=threshold,
            distance=distance,
            min_match_char_length=min_match_char_length,
        )

        total_weight = sum(key.weight for key in self.keys)
        self._weights = [key.weight / total_weight for key in self.keys]

        self.records: tuple[DestinationRecord, ...] = tuple(records)
        self._entries = [self._index_record(record) for record in self.records]
        logger.debug(
            "Built fuzzy index over %d records with keys %s",
            len(self.records),
            ", ".join(f"{k.name}={k.weight}" for k in self.keys),
        )

    @staticmethod
    def _validate_keys(keys: Sequence[IndexKey]) -> tuple[IndexKey, ...]:
        keys = tuple(keys)
        if not keys:
            raise IndexConfigError("At least one index key is required")

        fields = DestinationRecord.model_fields
        seen = set()
        for key in keys:
            if key.name not in fields:
                raise IndexConfigError(f"Unknown destination field {key.name!r}")
            if not _is_text_field(fields[key.name].annotation):
                raise IndexConfigError(f"Field {key.name!r} is not a text field")
            if key.name in seen:
                raise IndexConfigError(f"Field {key.name!r} is indexed more than once")
            if not isinstance(key.weight, (int, float)) or not math.isfinite(key.weight) or key.weight <= 0:
                raise IndexConfigError(
                    f"Weight for {key.name!r} must be a positive number, got {key.weight!r}"
                )
            seen.add(key.name)
        return keys

    def _index_record(self, record: DestinationRecord) -> list[_IndexedValue]:
        values = []
        for key_idx, key in enumerate(self.keys):
            raw = getattr(record, key.name)
            items = (raw,) if isinstance(raw, str) or raw is None else raw
            for item in items:
                if item is None or not item.strip():
                    continue
                values.append(_IndexedValue(key=key_idx, text=item.lower(), norm=field_norm(item)))
        return values

    def _score_record(self, pattern: BitapPattern, entries: list[_IndexedValue]) -> float | None:
        total = 1.0
        matched = False
        for entry in entries:
            result = pattern.search_in(entry.text)
            if not result.is_match:
                continue
            matched = True
            closeness = min(1.0, result.score / self.threshold) if self.threshold else 0.0
            total *= (closeness or EPSILON) ** (self._weights[entry.key] * entry.norm)

        if not matched:
            return None
        return self.threshold * total

    def search(self, query: str, limit: int | None = None) -> list[MatchResult]:
        """
        Rank records by fuzzy relevance to ``query``.

        Args:
            query: Free text; queries shorter than the minimum match length
                (after stripping) return no results
            limit: Optional maximum number of results

        Returns:
            Matches sorted by ascending score, ties in catalog order
        """
        if not isinstance(query, str):
            return []
        query = query.strip()[:MAX_QUERY_LENGTH]
        if len(query) < self.min_match_char_length:
            return []

        pattern = BitapPattern(query, self.options)
        results = []
        for record, entries in zip(self.records, self._entries):
            score = self._score_record(pattern, entries)
            if score is not None:
                results.append(MatchResult(record=record, score=score))

        results.sort(key=lambda m: m.score)
        if limit is not None:
            results = results[:max(0, limit)]
        return results

    def search_records(self, query: str, limit: int | None = None) -> list[DestinationRecord]:
        """Same as search() but returns only the records."""
        return [match.record for match in self.search(query, limit)]

    def __len__(self) -> int:
        return len(self.records)
