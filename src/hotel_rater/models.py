"""Data models for hotel properties and rating results."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

CONSTRUCTION_TYPES: tuple[str, ...] = (
    "Frame",
    "Joisted Masonry",
    "Non-Combustible",
    "Masonry Non-Combustible",
    "Modified Fire Resistive",
    "Fire Resistive",
)
SERVICE_TYPES: tuple[str, ...] = (
    "full-service",
    "select-service",
    "limited-service",
    "extended-stay",
)
LOCATION_TYPES: tuple[str, ...] = ("urban", "suburban", "rural", "resort-coastal")
LOCATION_ZONES: tuple[str, ...] = ("inland", "coastal", "twia")
WIND_TIERS: tuple[str, ...] = ("Inland", "Tier 1", "Tier 2", "Tier 3", "Tier 4", "Tier 5")
FLOOD_ZONES: tuple[str, ...] = ("X", "X-shaded", "AE", "A", "AH", "AO", "VE", "V")
LITIGATION_ENVIRONMENTS: tuple[str, ...] = ("low", "moderate", "high", "very-high")
AMENITY_NAMES: tuple[str, ...] = (
    "pool",
    "restaurant",
    "fitness_center",
    "spa",
    "business_center",
    "meeting_space",
)
CONFIDENCE_LEVELS: tuple[str, ...] = ("high", "medium", "low")

DEFAULT_ROOM_COUNT = 100
DEFAULT_STORIES = 3
DEFAULT_YEAR_BUILT = 2000
DEFAULT_CONSTRUCTION = "Masonry Non-Combustible"
DEFAULT_SQUARE_FOOTAGE = 50000.0
DEFAULT_ROOF_AGE = 10
DEFAULT_PROTECTION_CLASS = 4
DEFAULT_LOCATION_TYPE = "suburban"
DEFAULT_LOCATION_ZONE = "inland"
DEFAULT_WIND_TIER = "Inland"
DEFAULT_FLOOD_ZONE = "X"
DEFAULT_NAMED_STORM_DEDUCTIBLE = "2%"
DEFAULT_COINSURANCE = 80

_TRUE_STRINGS = {"1", "true", "t", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "f", "no", "n", "off", ""}


def _number(value: Any) -> float | None:
    """Parse a finite number, or None for missing/non-numeric input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).replace(",", "").strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_number(value: Any, default: float) -> float:
    """Missing, zero and non-numeric values all collapse to ``default``."""
    number = _number(value)
    if number is None or number == 0:
        return default
    return number


def coerce_int(value: Any, default: int) -> int:
    """Positive whole count; anything that truncates to zero or below is ``default``."""
    number = _number(value)
    if number is None:
        return default
    count = int(number)
    return count if count > 0 else default


def coerce_flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return default


def canonical_choice(value: Any, choices: tuple[str, ...], default: str | None) -> str | None:
    """Match ``value`` case-insensitively against a closed vocabulary.

    Unrecognized non-blank values are kept verbatim so that every table lookup
    downstream takes its own fallback path.
    """
    if value is None:
        return default
    text = " ".join(str(value).split())
    if not text:
        return default
    lowered = text.lower()
    for choice in choices:
        if choice.lower() == lowered:
            return choice
    return text


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _deductible(value: Any) -> str:
    """Normalize a named storm deductible to the ``"N%"`` key form."""
    number = _number(value)
    if number is not None and not isinstance(value, str):
        return f"{number:g}%"
    text = _text(value).replace(" ", "")
    if not text:
        return DEFAULT_NAMED_STORM_DEDUCTIBLE
    if not text.endswith("%") and _number(text) is not None:
        return f"{text}%"
    return text


@dataclass
class Amenities:
    """On-site amenities that drive liability and umbrella surcharges."""

    pool: bool = False
    restaurant: bool = False
    fitness_center: bool = False
    spa: bool = False
    business_center: bool = False
    meeting_space: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Amenities:
        if not isinstance(data, Mapping):
            return cls()
        return cls(**{name: coerce_flag(data.get(name), False) for name in AMENITY_NAMES})

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


@dataclass
class PhotoAnalysis:
    """Vision-derived observations attached to a looked-up property."""

    roof_type: str | None = None
    exterior_material: str | None = None
    estimated_condition: str | None = None
    photo_notes: str | None = None
    images_analyzed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Property:
    """Hotel property description, fully defaulted.

    Built with :meth:`from_dict`, which never fails: missing, zero or
    non-numeric numbers fall back to their documented defaults.
    """

    room_count: int = DEFAULT_ROOM_COUNT
    stories: int = DEFAULT_STORIES
    year_built: int = DEFAULT_YEAR_BUILT
    construction_type: str = DEFAULT_CONSTRUCTION
    square_footage: float = DEFAULT_SQUARE_FOOTAGE
    sprinklered: bool = True
    state: str = ""
    brand: str = ""
    service_type: str | None = None
    roof_age: int = DEFAULT_ROOF_AGE
    protection_class: int = DEFAULT_PROTECTION_CLASS
    location_type: str = DEFAULT_LOCATION_TYPE
    location_zone: str = DEFAULT_LOCATION_ZONE
    wind_tier: str = DEFAULT_WIND_TIER
    flood_zone: str = DEFAULT_FLOOD_ZONE
    named_storm_deductible: str = DEFAULT_NAMED_STORM_DEDUCTIBLE
    coinsurance_percent: int = DEFAULT_COINSURANCE
    amenities: Amenities = field(default_factory=Amenities)
    # Umbrella inputs; None means "use the configured default".
    umbrella_limit: str | None = None
    umbrella_sir: str | None = None
    fleet_size: int = 0
    litigation_environment: str | None = None
    has_valet: bool = False
    has_bar_liquor: bool = False
    has_resort_activities: bool = False
    # Descriptive fields carried through from a lookup.
    property_name: str = ""
    full_address: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Property:
        """Build a Property from a partial record, applying defaults."""
        d: Mapping[str, Any] = data if isinstance(data, Mapping) else {}

        fleet = _number(d.get("fleet_size"))
        coinsurance = _number(d.get("coinsurance_percent"))

        return cls(
            room_count=coerce_int(d.get("room_count"), DEFAULT_ROOM_COUNT),
            stories=coerce_int(d.get("stories"), DEFAULT_STORIES),
            year_built=coerce_int(d.get("year_built"), DEFAULT_YEAR_BUILT),
            construction_type=canonical_choice(
                d.get("construction_type"), CONSTRUCTION_TYPES, DEFAULT_CONSTRUCTION
            ) or DEFAULT_CONSTRUCTION,
            square_footage=coerce_number(d.get("square_footage"), DEFAULT_SQUARE_FOOTAGE),
            sprinklered=coerce_flag(d.get("sprinklered"), True),
            state=_text(d.get("state")).upper(),
            brand=_text(d.get("brand")),
            service_type=canonical_choice(d.get("service_type"), SERVICE_TYPES, None),
            roof_age=coerce_int(d.get("roof_age"), DEFAULT_ROOF_AGE),
            protection_class=coerce_int(d.get("protection_class"), DEFAULT_PROTECTION_CLASS),
            location_type=canonical_choice(
                d.get("location_type"), LOCATION_TYPES, DEFAULT_LOCATION_TYPE
            ) or DEFAULT_LOCATION_TYPE,
            location_zone=canonical_choice(
                d.get("location_zone"), LOCATION_ZONES, DEFAULT_LOCATION_ZONE
            ) or DEFAULT_LOCATION_ZONE,
            wind_tier=canonical_choice(d.get("wind_tier"), WIND_TIERS, DEFAULT_WIND_TIER)
            or DEFAULT_WIND_TIER,
            flood_zone=canonical_choice(d.get("flood_zone"), FLOOD_ZONES, DEFAULT_FLOOD_ZONE)
            or DEFAULT_FLOOD_ZONE,
            named_storm_deductible=_deductible(d.get("named_storm_deductible")),
            coinsurance_percent=int(coinsurance) if coinsurance is not None else DEFAULT_COINSURANCE,
            amenities=Amenities.from_dict(d.get("amenities")),
            umbrella_limit=_text(d.get("umbrella_limit")).upper() or None,
            umbrella_sir=_text(d.get("umbrella_sir")).upper() or None,
            fleet_size=int(fleet) if fleet is not None else 0,
            litigation_environment=canonical_choice(
                d.get("litigation_environment"), LITIGATION_ENVIRONMENTS, None
            ),
            has_valet=coerce_flag(d.get("has_valet"), False),
            has_bar_liquor=coerce_flag(d.get("has_bar_liquor"), False),
            has_resort_activities=coerce_flag(d.get("has_resort_activities"), False),
            property_name=_text(d.get("property_name")),
            full_address=_text(d.get("full_address")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LookupSettings:
    """Property lookup parameters (from config)."""

    model: str = "claude-sonnet-4-5-20250929"
    search_max_tokens: int = 1500
    vision_max_tokens: int = 1024
    web_search_max_uses: int = 10
    max_images: int = 5
    image_timeout_seconds: float = 8.0
    min_image_bytes: int = 5000
    max_image_bytes: int = 10_000_000


@dataclass(frozen=True)
class RatingResult:
    """Fully itemized premium quote for one property.

    Every intermediate figure is kept for display and audit. Effective-rate
    fields are informational and recomputed from rounded totals.
    """

    profile: str
    config_version: str
    market_note: str
    as_of_year: int

    # Resolved inputs
    room_count: int
    square_footage: float
    building_age: int
    construction_type: str
    service_type: str
    brand_tier: str | None
    state: str
    sprinklered: bool

    # TIV
    building_value: int
    contents_value: int
    business_income_value: int
    total_insurable_value: int

    # Rates
    loss_cost_per_100: float | None
    lcm: float | None
    base_rate_per_100: float
    sprinkler_factor: float

    # Property modifiers
    age_factor: float
    stories_factor: float
    roof_factor: float
    protection_class_factor: float
    location_type_factor: float
    brand_tier_factor: float
    geo_modifier: float
    location_zone_applied: bool
    wind_tier_factor: float
    flood_zone_factor: float
    named_storm_factor: float
    coinsurance_factor: float
    amenities_factor: float
    combined_modifier: float

    building_rate: float
    contents_rate: float
    bi_rate: float

    # Property premium
    building_premium: int
    contents_premium: int
    business_income_premium: int
    equipment_breakdown_premium: int
    property_premium: int
    effective_property_rate: float

    # General liability
    room_revenue: int
    gl_rate: float
    gl_base_premium: int
    fb_revenue: int
    gl_restaurant_component: int
    liquor_revenue: int
    gl_liquor_component: int
    resort_activities_revenue: int
    gl_resort_activities_component: int
    general_liability_premium: int

    # Umbrella / excess
    umbrella_limit: str | None
    umbrella_base_premium: int
    umbrella_surcharges: dict[str, int]
    umbrella_surcharge_total: int
    umbrella_premium_before_modifiers: int
    litigation_factor: float
    fleet_factor: float
    sir_factor: float
    umbrella_excess_premium: int

    # Flood
    flood_zone: str
    flood_premium: int

    # Totals
    total_estimated_premium: int
    premium_per_room: int
    premium_per_sf: float

    warnings: list[str]
    risk_grade: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
