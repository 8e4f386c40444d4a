"""Tests for property coercion and defaults."""

from hotel_rater.models import Amenities, Property, canonical_choice, coerce_flag, coerce_int, coerce_number


class TestCoercion:
    """Tests for input coercion helpers."""

    def test_coerce_number_defaults(self) -> None:
        assert coerce_number(None, 100) == 100
        assert coerce_number(0, 100) == 100
        assert coerce_number("abc", 100) == 100
        assert coerce_number(True, 100) == 100
        assert coerce_number(float("nan"), 100) == 100

    def test_coerce_number_parses_strings(self) -> None:
        assert coerce_number("1,200", 100) == 1200
        assert coerce_number(" 45 ", 100) == 45

    def test_coerce_int_truncates_then_defaults(self) -> None:
        assert coerce_int(120.9, 100) == 120
        assert coerce_int("7", 100) == 7
        assert coerce_int(0.5, 100) == 100
        assert coerce_int(-5, 100) == 100
        assert coerce_int("-0.2", 100) == 100

    def test_coerce_flag(self) -> None:
        assert coerce_flag("no", True) is False
        assert coerce_flag("Yes", False) is True
        assert coerce_flag(None, True) is True
        assert coerce_flag(0, True) is False
        assert coerce_flag("maybe", True) is True

    def test_canonical_choice(self) -> None:
        choices = ("Frame", "Fire Resistive")
        assert canonical_choice("fire  resistive", choices, "Frame") == "Fire Resistive"
        assert canonical_choice("", choices, "Frame") == "Frame"
        assert canonical_choice("Log Cabin", choices, "Frame") == "Log Cabin"


class TestProperty:
    """Tests for Property.from_dict."""

    def test_empty_record_gets_defaults(self) -> None:
        prop = Property.from_dict({})
        assert prop.room_count == 100
        assert prop.stories == 3
        assert prop.year_built == 2000
        assert prop.construction_type == "Masonry Non-Combustible"
        assert prop.square_footage == 50000
        assert prop.sprinklered is True
        assert prop.roof_age == 10
        assert prop.protection_class == 4
        assert prop.location_type == "suburban"
        assert prop.location_zone == "inland"
        assert prop.wind_tier == "Inland"
        assert prop.flood_zone == "X"
        assert prop.named_storm_deductible == "2%"
        assert prop.coinsurance_percent == 80
        assert prop.amenities == Amenities()
        assert prop.umbrella_limit is None
        assert prop.fleet_size == 0

    def test_none_record(self) -> None:
        assert Property.from_dict(None) == Property()

    def test_zero_and_garbage_fall_back(self) -> None:
        prop = Property.from_dict({"room_count": 0, "stories": "n/a", "year_built": None})
        assert prop.room_count == 100
        assert prop.stories == 3
        assert prop.year_built == 2000

    def test_fractional_and_negative_counts_fall_back(self) -> None:
        prop = Property.from_dict({"room_count": 0.5, "stories": -5, "roof_age": -1, "protection_class": 0.9})
        assert prop.room_count == 100
        assert prop.stories == 3
        assert prop.roof_age == 10
        assert prop.protection_class == 4

    def test_normalizes_text_fields(self) -> None:
        prop = Property.from_dict(
            {
                "state": " fl ",
                "construction_type": "joisted masonry",
                "location_zone": "TWIA",
                "umbrella_limit": "$25m",
                "umbrella_sir": "$50k",
                "litigation_environment": "Very-High",
            }
        )
        assert prop.state == "FL"
        assert prop.construction_type == "Joisted Masonry"
        assert prop.location_zone == "twia"
        assert prop.umbrella_limit == "$25M"
        assert prop.umbrella_sir == "$50K"
        assert prop.litigation_environment == "very-high"

    def test_named_storm_deductible_forms(self) -> None:
        assert Property.from_dict({"named_storm_deductible": 5}).named_storm_deductible == "5%"
        assert Property.from_dict({"named_storm_deductible": "5"}).named_storm_deductible == "5%"
        assert Property.from_dict({"named_storm_deductible": "10%"}).named_storm_deductible == "10%"

    def test_zero_coinsurance_and_fleet_are_kept(self) -> None:
        prop = Property.from_dict({"coinsurance_percent": 0, "fleet_size": 0})
        assert prop.coinsurance_percent == 0
        assert prop.fleet_size == 0

    def test_amenity_flags_coerced(self) -> None:
        prop = Property.from_dict({"amenities": {"pool": "true", "restaurant": 1, "spa": "no"}})
        assert prop.amenities.pool is True
        assert prop.amenities.restaurant is True
        assert prop.amenities.spa is False
