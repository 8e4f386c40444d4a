"""Tests for umbrella / excess premium."""

import pytest

from hotel_rater.config import get_umbrella_tables
from hotel_rater.exceptions import ConfigurationError
from hotel_rater.models import Property
from hotel_rater.rating.umbrella import (
    amenity_surcharges,
    calculate_loss_cost_umbrella,
    calculate_umbrella,
    resolve_limit_base_premium,
)


class TestLimitTiers:
    """Tests for flat and incremental limit tiers."""

    def test_flat_tier(self, profile) -> None:
        assert resolve_limit_base_premium("$25M", 100, profile.umbrella) == 100 * 200

    def test_incremental_tier_stacks_on_base(self, profile) -> None:
        assert resolve_limit_base_premium("$100M", 200, profile.umbrella) == 200 * (220 + 65)

    def test_two_level_stacking(self, profile) -> None:
        assert resolve_limit_base_premium("$125M", 200, profile.umbrella) == 200 * (220 + 65 + 10)

    def test_unknown_tier_raises(self, profile) -> None:
        with pytest.raises(ConfigurationError):
            resolve_limit_base_premium("$7M", 100, profile.umbrella)


class TestAmenitySurcharges:
    """Tests for per-room amenity surcharges."""

    def test_bar_liquor_replaces_restaurant(self, profile) -> None:
        prop = Property.from_dict({"amenities": {"pool": True, "restaurant": True}, "has_bar_liquor": True})
        surcharges = amenity_surcharges(prop, profile.umbrella)
        assert "restaurant" not in surcharges
        assert surcharges == {"pool": 2500, "bar_liquor": 4500}

    def test_restaurant_without_bar(self, profile) -> None:
        prop = Property.from_dict({"amenities": {"restaurant": True}, "has_valet": True})
        assert amenity_surcharges(prop, profile.umbrella) == {"restaurant": 3500, "valet": 1500}

    def test_none(self, profile) -> None:
        assert amenity_surcharges(Property.from_dict({}), profile.umbrella) == {}


class TestCalculateUmbrella:
    """Tests for the full umbrella calculation."""

    def test_defaults(self, profile) -> None:
        u = calculate_umbrella(Property.from_dict({}), profile.umbrella)
        assert u.limit == "$10M"
        assert u.base_premium == 15_000
        assert u.litigation_factor == 1.0
        assert u.fleet_factor == 1.0
        assert u.sir_factor == 1.0
        assert u.umbrella_premium == 15_000

    def test_surcharge_total_with_bar_liquor(self, profile) -> None:
        prop = Property.from_dict({"amenities": {"restaurant": True}, "has_bar_liquor": True})
        u = calculate_umbrella(prop, profile.umbrella)
        assert u.surcharge_total == u.surcharges["bar_liquor"] == 4500
        assert u.premium_before_modifiers == 15_000 + 4500

    def test_modifiers_multiply(self, profile) -> None:
        prop = Property.from_dict(
            {
                "umbrella_limit": "$25M",
                "litigation_environment": "high",
                "fleet_size": 10,
                "umbrella_sir": "$100K",
            }
        )
        u = calculate_umbrella(prop, profile.umbrella)
        assert u.base_premium == 20_000
        assert u.litigation_factor == 1.15
        assert u.fleet_factor == 1.05
        assert u.sir_factor == 0.80
        assert u.umbrella_premium == round(20_000 * 1.15 * 1.05 * 0.80)

    def test_unknown_keys_fall_back(self, profile) -> None:
        prop = Property.from_dict({"umbrella_limit": "$7M", "litigation_environment": "extreme", "umbrella_sir": "$1"})
        u = calculate_umbrella(prop, profile.umbrella)
        assert u.limit == "$10M"
        assert u.litigation_factor == 1.0
        assert u.sir_factor == 1.0

    def test_large_fleet(self, profile) -> None:
        u = calculate_umbrella(Property.from_dict({"fleet_size": 40}), profile.umbrella)
        assert u.fleet_factor == 1.10


class TestLossCostUmbrella:
    def test_factor_on_property_plus_gl(self) -> None:
        u = calculate_loss_cost_umbrella(20_000, 5_000, 0.12)
        assert u.umbrella_premium == 3000
        assert u.limit is None


class TestUmbrellaConfig:
    """Tests for umbrella tier validation."""

    def _config(self, tiers: dict, default: str = "$10M") -> dict:
        return {
            "umbrella": {
                "default_limit": default,
                "max_incremental_depth": 2,
                "limit_tiers": tiers,
                "fleet_modifiers": [{"max": float("inf"), "modifier": 1.0}],
            }
        }

    def test_cycle_rejected(self) -> None:
        tiers = {
            "$10M": {"per_room": 150},
            "$A": {"base_limit": "$B", "incremental_per_room": 1},
            "$B": {"base_limit": "$A", "incremental_per_room": 1},
        }
        with pytest.raises(ConfigurationError):
            get_umbrella_tables(self._config(tiers))

    def test_unknown_base_rejected(self) -> None:
        tiers = {"$10M": {"per_room": 150}, "$X": {"base_limit": "$Y", "incremental_per_room": 1}}
        with pytest.raises(ConfigurationError):
            get_umbrella_tables(self._config(tiers))

    def test_depth_limit(self) -> None:
        tiers = {
            "$10M": {"per_room": 150},
            "$20M": {"base_limit": "$10M", "incremental_per_room": 1},
            "$30M": {"base_limit": "$20M", "incremental_per_room": 1},
            "$40M": {"base_limit": "$30M", "incremental_per_room": 1},
        }
        with pytest.raises(ConfigurationError):
            get_umbrella_tables(self._config(tiers))

    def test_default_must_exist(self) -> None:
        with pytest.raises(ConfigurationError):
            get_umbrella_tables(self._config({"$25M": {"per_room": 200}}, default="$10M"))
