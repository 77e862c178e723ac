"""Shared fixtures for WanderNest tests."""

import itertools

import pytest

from wandernest.models import DestinationRecord
from wandernest.storage import DestinationCatalog

_ids = itertools.count(1000)


def build_record(**overrides) -> DestinationRecord:
    """Build a destination with neutral defaults; override any field by name."""
    data = {
        "id": next(_ids),
        "name": "Placeholder",
        "country": "Nowhere",
        "continent": "Europe",
        "description": "Quiet spot",
        "category": "Nature",
        "travel_type": ("Nature",),
        "top_attractions": (),
        "budget_level": "Medium",
        "best_season": "Jun - Aug",
        "duration": "1 Week",
        "location_type": "City",
        "rating": 4.0,
        "price": "From $100/night",
    }
    data.update(overrides)
    return DestinationRecord(**data)


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture(scope="session")
def bundled_catalog():
    return DestinationCatalog.bundled()
