"""Typed rating tables built from configuration.

A configuration file selects exactly one profile: ``per_room`` (current
model) or ``loss_cost`` (legacy square-footage model). Each profile carries
only its own tables; the two are never mixed in one calculation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Mapping, Union

from .brackets import Bracket
from .brands import BrandCatalog


@dataclass(frozen=True)
class ModifierTables:
    """Modifiers shared by both profiles."""

    building_age: tuple[Bracket, ...]
    roof_age: tuple[Bracket, ...]
    stories: tuple[Bracket, ...]
    protection_class: Mapping[int, float]
    default_protection_class: int
    geographic: Mapping[str, float]
    default_geo_modifier: float


@dataclass(frozen=True)
class WarningThresholds:
    cat_zone_states: frozenset[str]
    old_roof_age: float
    high_protection_class: int
    high_tiv: float
    non_sprinklered_warning: bool
    high_rise_stories: int
    combustible_constructions: frozenset[str]


@dataclass(frozen=True)
class PropertyRates:
    """Per-room direct rates per $100 of value."""

    base_rates: Mapping[str, float]
    default_construction: str
    non_sprinklered_surcharge: float
    contents_rate_multiplier: float
    bi_rate_multiplier: float
    equipment_breakdown: Mapping[str, float]
    default_equipment_breakdown: float

    def base_rate(self, construction_type: str) -> float:
        rate = self.base_rates.get(construction_type)
        if rate is None:
            rate = self.base_rates.get(self.default_construction, 0.0)
        return float(rate)


@dataclass(frozen=True)
class PerRoomTiv:
    building_cost_per_room: Mapping[str, float]
    default_building_cost_per_room: float
    contents_per_room: Mapping[str, float]
    default_contents_per_room: float
    business_income_per_room: Mapping[str, float]
    default_business_income_per_room: float


@dataclass(frozen=True)
class GeographyTiers:
    """Zone-based geography for designated catastrophe states."""

    geo_tiers: Mapping[str, Mapping[str, float]]
    coastal_geo_overrides: Mapping[str, Mapping[str, float]]
    coastal_states: frozenset[str]


@dataclass(frozen=True)
class CoastalTerms:
    wind_tier_modifiers: Mapping[str, float]
    default_wind_tier: str
    flood_zone_modifiers: Mapping[str, float]
    default_flood_zone: str
    named_storm_credits: Mapping[str, float]
    default_named_storm_deductible: str
    flood_premium_estimates: Mapping[str, float]


@dataclass(frozen=True)
class GeneralLiabilityRates:
    """GL rates per $1,000 of revenue and revenue assumptions."""

    rate_with_pool: float
    rate_without_pool: float
    restaurant_rate: float
    liquor_rate: float
    fb_revenue_percent: float
    liquor_sales_percent: float
    resort_activities_rate: float
    resort_activities_revenue_percent: float
    room_revenue_per_room: Mapping[str, float]
    default_room_revenue_per_room: float


@dataclass(frozen=True)
class UmbrellaTier:
    """An umbrella limit tier: flat per-room, or incremental on a base tier."""

    name: str
    label: str = ""
    per_room: float | None = None
    base_limit: str | None = None
    incremental_per_room: float | None = None

    @property
    def is_incremental(self) -> bool:
        return self.base_limit is not None


@dataclass(frozen=True)
class UmbrellaTables:
    limit_tiers: Mapping[str, UmbrellaTier]
    default_limit: str
    max_incremental_depth: int
    amenity_surcharges: Mapping[str, float]
    litigation_modifiers: Mapping[str, float]
    default_litigation: str
    fleet_modifiers: tuple[Bracket, ...]
    sir_options: Mapping[str, float]
    default_sir: str


@dataclass(frozen=True)
class LossCostTables:
    """Legacy ISO-style loss cost and square-footage tables."""

    sprinklered_loss_costs: Mapping[str, float]
    non_sprinklered_loss_costs: Mapping[str, float]
    default_loss_cost: float
    loss_cost_multiplier: float
    building_cost_per_sf: Mapping[str, float]
    default_building_cost_per_sf: float
    age_adjustments: tuple[Bracket, ...]
    contents_per_room: float
    business_income_per_room: float
    amenity_modifiers: Mapping[str, float]
    gl_per_room: float
    liquor_per_room: float
    umbrella_factor: float


@dataclass(frozen=True)
class PerRoomProfile:
    """Current model: per-room TIV, direct admitted rates, room-revenue GL."""

    name: ClassVar[str] = "per_room"

    version: str
    market_note: str
    modifiers: ModifierTables
    warnings: WarningThresholds
    risk_grades: tuple[Bracket, ...]
    brands: BrandCatalog
    property_rates: PropertyRates
    tiv: PerRoomTiv
    geography: GeographyTiers
    coastal: CoastalTerms
    general_liability: GeneralLiabilityRates
    umbrella: UmbrellaTables
    location_type_modifiers: Mapping[str, float] = field(default_factory=dict)
    default_location_type: str = "suburban"
    coinsurance_factors: Mapping[int, float] = field(default_factory=dict)
    default_coinsurance: int = 80


@dataclass(frozen=True)
class LossCostProfile:
    """Legacy model: square-footage TIV, loss cost x LCM, flat amenity GL."""

    name: ClassVar[str] = "loss_cost"

    version: str
    market_note: str
    modifiers: ModifierTables
    warnings: WarningThresholds
    risk_grades: tuple[Bracket, ...]
    brands: BrandCatalog
    loss_cost: LossCostTables


RatingProfile = Union[PerRoomProfile, LossCostProfile]
