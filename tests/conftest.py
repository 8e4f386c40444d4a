"""Pytest fixtures."""

from pathlib import Path

import pytest

from hotel_rater.config import get_rating_profile, load_config
from hotel_rater.rating.engine import RatingEngine

ROOT = Path(__file__).resolve().parent.parent
AS_OF_YEAR = 2026


@pytest.fixture
def config() -> dict:
    """Per-room rating configuration shipped with the repo."""
    return load_config(ROOT / "config.yaml")


@pytest.fixture
def loss_cost_config() -> dict:
    """Legacy loss-cost configuration shipped with the repo."""
    return load_config(ROOT / "config.loss_cost.yaml")


@pytest.fixture
def profile(config):
    return get_rating_profile(config)


@pytest.fixture
def engine(profile) -> RatingEngine:
    """Per-room engine pinned to a fixed year."""
    return RatingEngine(profile=profile, as_of_year=AS_OF_YEAR)


@pytest.fixture
def loss_cost_engine(loss_cost_config) -> RatingEngine:
    return RatingEngine(profile=get_rating_profile(loss_cost_config), as_of_year=AS_OF_YEAR)


@pytest.fixture
def fl_coastal_property() -> dict:
    """Full-service coastal Florida hotel with pool and restaurant."""
    return {
        "room_count": 200,
        "stories": 8,
        "year_built": 2010,
        "construction_type": "Masonry Non-Combustible",
        "sprinklered": True,
        "state": "FL",
        "location_zone": "coastal",
        "roof_age": 8,
        "protection_class": 4,
        "service_type": "full-service",
        "amenities": {"pool": True, "restaurant": True},
    }
