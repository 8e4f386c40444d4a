"""Property premium: base rate, sprinkler adjustment and the modifier stack.

Per-room profile, per bucket:

    building rate = base rate x sprinkler factor x product(modifiers)
    contents rate = building rate x contents multiplier
    BI rate       = building rate x BI multiplier
    premium       = round(value / 100 x rate)

Equipment breakdown is a flat amount by service type scaled only by the
building-age factor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..models import DEFAULT_WIND_TIER, Property
from .brackets import resolve_bracket
from .money import round_currency
from .tables import CoastalTerms, GeographyTiers, LossCostProfile, ModifierTables, PerRoomProfile
from .tiv import TivBreakdown


@dataclass(frozen=True)
class GeographyFactors:
    """Resolved geography term plus coastal wind/flood/named-storm factors."""

    geo_modifier: float
    location_zone_applied: bool = False
    wind_tier_factor: float = 1.0
    flood_zone_factor: float = 1.0
    named_storm_factor: float = 1.0


@dataclass(frozen=True)
class PropertyModifiers:
    age_factor: float
    stories_factor: float
    roof_factor: float
    protection_class_factor: float
    geography: GeographyFactors
    location_type_factor: float = 1.0
    brand_tier_factor: float = 1.0
    coinsurance_factor: float = 1.0

    @property
    def combined(self) -> float:
        g = self.geography
        return math.prod(
            (
                self.age_factor,
                self.stories_factor,
                self.roof_factor,
                self.protection_class_factor,
                self.location_type_factor,
                self.brand_tier_factor,
                self.coinsurance_factor,
                g.geo_modifier,
                g.wind_tier_factor,
                g.flood_zone_factor,
                g.named_storm_factor,
            )
        )


@dataclass(frozen=True)
class PropertyPremiumBreakdown:
    base_rate_per_100: float
    sprinkler_factor: float
    modifiers: PropertyModifiers
    building_rate: float
    contents_rate: float
    bi_rate: float
    building_premium: int
    contents_premium: int
    business_income_premium: int
    equipment_breakdown_premium: int = 0
    loss_cost_per_100: float | None = None
    lcm: float | None = None
    # Set when the premium is rounded once over the whole TIV.
    total_premium: int | None = None

    @property
    def property_premium(self) -> int:
        if self.total_premium is not None:
            return self.total_premium
        return (
            self.building_premium
            + self.contents_premium
            + self.business_income_premium
            + self.equipment_breakdown_premium
        )


def resolve_geography(
    prop: Property,
    modifiers: ModifierTables,
    tiers: GeographyTiers,
    coastal: CoastalTerms,
) -> GeographyFactors:
    """Resolve the geography term; the three paths are mutually exclusive.

    1. 3-tier states select by location zone (inland/coastal/twia).
    2. 2-tier states select by zone with twia priced as coastal.
    3. Everything else takes the flat state modifier, plus the wind tier
       factor when the state is coastal.

    Tiered states never also take a wind tier factor.
    """
    state = prop.state
    zone = prop.location_zone
    default_geo = modifiers.default_geo_modifier

    if state in tiers.geo_tiers:
        table = tiers.geo_tiers[state]
        geo = table.get(zone, table.get("inland", default_geo))
        zone_applied = True
    elif state in tiers.coastal_geo_overrides:
        table = tiers.coastal_geo_overrides[state]
        key = "coastal" if zone == "twia" else zone
        geo = table.get(key, table.get("inland", default_geo))
        zone_applied = True
    else:
        geo = modifiers.geographic.get(state, default_geo)
        zone_applied = False

    is_coastal = state in tiers.coastal_states

    wind = 1.0
    if is_coastal and not zone_applied:
        wind = coastal.wind_tier_modifiers.get(
            prop.wind_tier, coastal.wind_tier_modifiers.get(coastal.default_wind_tier, 1.0)
        )

    flood = 1.0
    named_storm = 1.0
    if is_coastal and prop.wind_tier != DEFAULT_WIND_TIER:
        flood = coastal.flood_zone_modifiers.get(
            prop.flood_zone, coastal.flood_zone_modifiers.get(coastal.default_flood_zone, 1.0)
        )
        named_storm = coastal.named_storm_credits.get(
            prop.named_storm_deductible,
            coastal.named_storm_credits.get(coastal.default_named_storm_deductible, 1.0),
        )

    return GeographyFactors(
        geo_modifier=float(geo),
        location_zone_applied=zone_applied,
        wind_tier_factor=float(wind),
        flood_zone_factor=float(flood),
        named_storm_factor=float(named_storm),
    )


def _protection_class_factor(protection_class: int, modifiers: ModifierTables) -> float:
    table = modifiers.protection_class
    return float(table.get(protection_class, table.get(modifiers.default_protection_class, 1.0)))


def resolve_property_modifiers(
    prop: Property,
    building_age: int,
    brand_tier: str | None,
    profile: PerRoomProfile,
) -> PropertyModifiers:
    """Each modifier resolved independently; multiplied together later."""
    m = profile.modifiers
    location_types = profile.location_type_modifiers
    coinsurance = profile.coinsurance_factors
    return PropertyModifiers(
        age_factor=float(resolve_bracket(m.building_age, building_age)),
        stories_factor=float(resolve_bracket(m.stories, prop.stories)),
        roof_factor=float(resolve_bracket(m.roof_age, prop.roof_age)),
        protection_class_factor=_protection_class_factor(prop.protection_class, m),
        geography=resolve_geography(prop, m, profile.geography, profile.coastal),
        location_type_factor=float(
            location_types.get(prop.location_type, location_types.get(profile.default_location_type, 1.0))
        ),
        brand_tier_factor=profile.brands.property_multiplier(brand_tier),
        coinsurance_factor=float(
            coinsurance.get(prop.coinsurance_percent, coinsurance.get(profile.default_coinsurance, 1.0))
        ),
    )


def calculate_property_premium(
    prop: Property,
    tiv: TivBreakdown,
    building_age: int,
    service_type: str,
    brand_tier: str | None,
    profile: PerRoomProfile,
) -> PropertyPremiumBreakdown:
    """Per-room profile property premium."""
    rates = profile.property_rates
    base_rate = rates.base_rate(prop.construction_type)
    sprinkler_factor = 1.0 if prop.sprinklered else 1.0 + rates.non_sprinklered_surcharge

    modifiers = resolve_property_modifiers(prop, building_age, brand_tier, profile)
    building_rate = base_rate * sprinkler_factor * modifiers.combined
    contents_rate = building_rate * rates.contents_rate_multiplier
    bi_rate = building_rate * rates.bi_rate_multiplier

    equipment = rates.equipment_breakdown.get(service_type, rates.default_equipment_breakdown)

    return PropertyPremiumBreakdown(
        base_rate_per_100=base_rate,
        sprinkler_factor=sprinkler_factor,
        modifiers=modifiers,
        building_rate=building_rate,
        contents_rate=contents_rate,
        bi_rate=bi_rate,
        building_premium=round_currency(tiv.building_value / 100 * building_rate),
        contents_premium=round_currency(tiv.contents_value / 100 * contents_rate),
        business_income_premium=round_currency(tiv.business_income_value / 100 * bi_rate),
        equipment_breakdown_premium=round_currency(equipment * modifiers.age_factor),
    )


def calculate_loss_cost_property_premium(
    prop: Property,
    tiv: TivBreakdown,
    building_age: int,
    profile: LossCostProfile,
) -> PropertyPremiumBreakdown:
    """Legacy property premium: loss cost x LCM applied to the whole TIV.

    Only age, stories, roof, flat geography and protection class modify the
    rate; there is no contents/BI tiering and no equipment breakdown. The
    premium is rounded once over total TIV; bucket premiums are itemized
    for display and need not sum to it exactly.
    """
    lc = profile.loss_cost
    m = profile.modifiers
    table = lc.sprinklered_loss_costs if prop.sprinklered else lc.non_sprinklered_loss_costs
    loss_cost = float(table.get(prop.construction_type, lc.default_loss_cost))
    rate = loss_cost * lc.loss_cost_multiplier

    modifiers = PropertyModifiers(
        age_factor=float(resolve_bracket(m.building_age, building_age)),
        stories_factor=float(resolve_bracket(m.stories, prop.stories)),
        roof_factor=float(resolve_bracket(m.roof_age, prop.roof_age)),
        protection_class_factor=_protection_class_factor(prop.protection_class, m),
        geography=GeographyFactors(geo_modifier=float(m.geographic.get(prop.state, m.default_geo_modifier))),
    )
    modified_rate = rate * modifiers.combined

    return PropertyPremiumBreakdown(
        base_rate_per_100=rate,
        sprinkler_factor=1.0,
        modifiers=modifiers,
        building_rate=modified_rate,
        contents_rate=modified_rate,
        bi_rate=modified_rate,
        building_premium=round_currency(tiv.building_value / 100 * modified_rate),
        contents_premium=round_currency(tiv.contents_value / 100 * modified_rate),
        business_income_premium=round_currency(tiv.business_income_value / 100 * modified_rate),
        loss_cost_per_100=loss_cost,
        lcm=lc.loss_cost_multiplier,
        total_premium=round_currency(tiv.total_insurable_value / 100 * modified_rate),
    )
