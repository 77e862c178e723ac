"""Read-only destination catalog loaded once at startup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from pydantic import ValidationError

from wandernest.errors import CatalogError
from wandernest.models import DestinationRecord

logger = logging.getLogger(__name__)

BUNDLED_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "destinations.json"


class DestinationCatalog:
    """Ordered, immutable collection of destination records."""

    def __init__(self, records: Iterable[DestinationRecord | Mapping]):
        loaded: list[DestinationRecord] = []
        by_id: dict[int, DestinationRecord] = {}

        for position, raw in enumerate(records):
            record = self._coerce(raw, position)
            if record.id in by_id:
                raise CatalogError(
                    f"Duplicate destination id {record.id} "
                    f"({by_id[record.id].name!r} and {record.name!r})"
                )
            by_id[record.id] = record
            loaded.append(record)

        self._records: tuple[DestinationRecord, ...] = tuple(loaded)
        self._by_id = by_id
        logger.info("Loaded destination catalog with %d records", len(self._records))

    @staticmethod
    def _coerce(raw: DestinationRecord | Mapping, position: int) -> DestinationRecord:
        if isinstance(raw, DestinationRecord):
            return raw
        if not isinstance(raw, Mapping):
            raise CatalogError(
                f"Catalog entry {position} must be a mapping, got {type(raw).__name__}"
            )
        try:
            return DestinationRecord.model_validate(raw)
        except ValidationError as e:
            label = raw.get("name") or raw.get("id") or position
            raise CatalogError(f"Invalid catalog entry {label!r}: {e}") from e

    @classmethod
    def from_json(cls, path: Path | str) -> "DestinationCatalog":
        """
        Load a catalog from a JSON file holding a list of destination objects.

        Args:
            path: Path to the JSON file

        Returns:
            The loaded catalog

        Raises:
            CatalogError: If the file is missing, unreadable or holds invalid records
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Could not read catalog from {path}: {e}") from e

        if not isinstance(data, list):
            raise CatalogError(f"Catalog file {path} must contain a JSON list")
        return cls(data)

    @classmethod
    def bundled(cls) -> "DestinationCatalog":
        """Load the sample catalog shipped with the package."""
        return cls.from_json(BUNDLED_CATALOG_PATH)

    @property
    def records(self) -> tuple[DestinationRecord, ...]:
        return self._records

    def get(self, destination_id: int) -> DestinationRecord | None:
        return self._by_id.get(destination_id)

    def __iter__(self) -> Iterator[DestinationRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, destination_id: object) -> bool:
        return destination_id in self._by_id
