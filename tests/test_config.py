"""Tests for configuration loading."""

import pytest

from hotel_rater.config import get_lookup_settings, get_rating_profile, load_config
from hotel_rater.exceptions import ConfigurationError
from hotel_rater.rating.tables import LossCostProfile, PerRoomProfile


class TestLoadConfig:
    """Tests for config file resolution."""

    def test_default_config_loads(self) -> None:
        cfg = load_config()
        assert cfg["profile"] == "per_room"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_env_var(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "alt.yaml"
        path.write_text("profile: loss_cost\nversion: test\n")
        monkeypatch.setenv("HOTEL_RATER_CONFIG", str(path))
        assert load_config()["version"] == "test"

    def test_non_mapping_rejected(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestRatingProfile:
    """Tests for profile selection."""

    def test_per_room(self, config) -> None:
        profile = get_rating_profile(config)
        assert isinstance(profile, PerRoomProfile)
        assert profile.property_rates.base_rates["Frame"] == 0.38
        assert profile.geography.geo_tiers["FL"]["twia"] == 2.10
        assert "FL" in profile.geography.coastal_states
        assert profile.coinsurance_factors[0] == 1.50
        assert profile.modifiers.protection_class[10] == 1.35

    def test_loss_cost(self, loss_cost_config) -> None:
        profile = get_rating_profile(loss_cost_config)
        assert isinstance(profile, LossCostProfile)
        assert profile.loss_cost.loss_cost_multiplier == 1.35
        assert not hasattr(profile, "property_rates")

    def test_unknown_profile(self, config) -> None:
        with pytest.raises(ConfigurationError):
            get_rating_profile({**config, "profile": "per_sqft"})

    def test_empty_bracket_list_is_fatal(self, config) -> None:
        with pytest.raises(ConfigurationError):
            get_rating_profile({**config, "roof_age_modifiers": []})

    def test_unsorted_brackets_are_fatal(self, config) -> None:
        rows = [{"max": 20, "modifier": 1.1}, {"max": 10, "modifier": 1.0}]
        with pytest.raises(ConfigurationError):
            get_rating_profile({**config, "stories_modifiers": rows})

    def test_bad_table_value(self, config) -> None:
        with pytest.raises(ConfigurationError):
            get_rating_profile({**config, "wind_tier_modifiers": {"Tier 1": "high"}})

    def test_brand_order_preserved(self, profile) -> None:
        assert [tier for tier, _ in profile.brands.tiers][:2] == ["luxury", "upper_upscale"]


class TestLookupSettings:
    def test_from_config(self, config) -> None:
        settings = get_lookup_settings(config)
        assert settings.max_images == 5
        assert settings.image_timeout_seconds == 8.0
        assert settings.min_image_bytes == 5000

    def test_defaults(self) -> None:
        assert get_lookup_settings({}).web_search_max_uses == 10
