"""Hotel rating engine."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, List, Mapping

from ..config import get_rating_profile, load_config
from ..logging import get_logger
from ..models import Property, RatingResult
from .brands import BrandCatalog
from .grading import build_warnings, risk_grade
from .liability import LiabilityBreakdown, calculate_general_liability, calculate_loss_cost_general_liability
from .money import round_currency, round_rate
from .property_premium import (
    PropertyPremiumBreakdown,
    calculate_loss_cost_property_premium,
    calculate_property_premium,
)
from .tables import LossCostProfile, RatingProfile
from .tiv import TivBreakdown, estimate_tiv, estimate_tiv_by_square_footage
from .umbrella import UmbrellaBreakdown, calculate_loss_cost_umbrella, calculate_umbrella

log = get_logger(__name__)


class RatingEngine:
    """
    Deterministic, config-driven hotel premium estimator.
    Property -> TIV -> per-bucket premiums -> totals -> warnings/grade.

    The engine holds no mutable state; one instance can rate any number of
    properties, concurrently if needed.
    """

    def __init__(
        self,
        profile: RatingProfile | None = None,
        config: Mapping[str, Any] | None = None,
        brand_catalog: BrandCatalog | None = None,
        as_of_year: int | None = None,
    ) -> None:
        if profile is None:
            profile = get_rating_profile(config if config is not None else load_config())
        self.profile = profile
        self.brands = brand_catalog or profile.brands
        self.as_of_year = as_of_year

    def rate(self, data: Property | Mapping[str, Any] | None) -> RatingResult:
        """Rate one property. Never fails on a partial or empty record."""
        prop = data if isinstance(data, Property) else Property.from_dict(data)
        year = self.as_of_year or date.today().year
        building_age = year - prop.year_built
        tier = self.brands.resolve_tier(prop.brand)
        service_type = prop.service_type or self.brands.service_type_for_tier(tier)

        if isinstance(self.profile, LossCostProfile):
            tables = self.profile.loss_cost
            tiv = estimate_tiv_by_square_footage(
                prop.square_footage, prop.room_count, prop.construction_type, building_age, tables
            )
            property_b = calculate_loss_cost_property_premium(prop, tiv, building_age, self.profile)
            gl_b = calculate_loss_cost_general_liability(prop, tables)
            umbrella_b = calculate_loss_cost_umbrella(
                property_b.property_premium, gl_b.general_liability_premium, tables.umbrella_factor
            )
            flood_premium = 0
        else:
            tiv = estimate_tiv(prop.room_count, service_type, self.profile.tiv)
            property_b = calculate_property_premium(prop, tiv, building_age, service_type, tier, self.profile)
            gl_b = calculate_general_liability(prop, service_type, self.profile.general_liability)
            umbrella_b = calculate_umbrella(prop, self.profile.umbrella)
            flood_premium = round_currency(self.profile.coastal.flood_premium_estimates.get(prop.flood_zone, 0.0))

        result = self._assemble(
            prop, year, building_age, service_type, tier, tiv, property_b, gl_b, umbrella_b, flood_premium
        )
        log.debug(
            "rating.calculated",
            profile=self.profile.name,
            rooms=prop.room_count,
            total=result.total_estimated_premium,
            grade=result.risk_grade,
        )
        return result

    def rate_many(self, items: Iterable[Property | Mapping[str, Any]]) -> List[RatingResult]:
        """Rate multiple properties."""
        return [self.rate(item) for item in items]

    def _assemble(
        self,
        prop: Property,
        year: int,
        building_age: int,
        service_type: str,
        tier: str | None,
        tiv: TivBreakdown,
        property_b: PropertyPremiumBreakdown,
        gl_b: LiabilityBreakdown,
        umbrella_b: UmbrellaBreakdown,
        flood_premium: int,
    ) -> RatingResult:
        """Flatten the stage outputs into one result record."""
        total_tiv = tiv.total_insurable_value
        property_premium = property_b.property_premium
        gl_premium = gl_b.general_liability_premium
        total = property_premium + gl_premium + umbrella_b.umbrella_premium + flood_premium

        mods = property_b.modifiers
        geo = mods.geography
        # Informational only: derived from rounded totals.
        effective_rate = round_rate(property_premium / total_tiv * 100) if total_tiv else 0.0
        square_footage = prop.square_footage or 1

        return RatingResult(
            profile=self.profile.name,
            config_version=self.profile.version,
            market_note=self.profile.market_note,
            as_of_year=year,
            room_count=prop.room_count,
            square_footage=prop.square_footage,
            building_age=building_age,
            construction_type=prop.construction_type,
            service_type=service_type,
            brand_tier=tier,
            state=prop.state,
            sprinklered=prop.sprinklered,
            building_value=tiv.building_value,
            contents_value=tiv.contents_value,
            business_income_value=tiv.business_income_value,
            total_insurable_value=total_tiv,
            loss_cost_per_100=property_b.loss_cost_per_100,
            lcm=property_b.lcm,
            base_rate_per_100=property_b.base_rate_per_100,
            sprinkler_factor=property_b.sprinkler_factor,
            age_factor=mods.age_factor,
            stories_factor=mods.stories_factor,
            roof_factor=mods.roof_factor,
            protection_class_factor=mods.protection_class_factor,
            location_type_factor=mods.location_type_factor,
            brand_tier_factor=mods.brand_tier_factor,
            geo_modifier=geo.geo_modifier,
            location_zone_applied=geo.location_zone_applied,
            wind_tier_factor=geo.wind_tier_factor,
            flood_zone_factor=geo.flood_zone_factor,
            named_storm_factor=geo.named_storm_factor,
            coinsurance_factor=mods.coinsurance_factor,
            amenities_factor=gl_b.amenities_factor,
            combined_modifier=mods.combined,
            building_rate=property_b.building_rate,
            contents_rate=property_b.contents_rate,
            bi_rate=property_b.bi_rate,
            building_premium=property_b.building_premium,
            contents_premium=property_b.contents_premium,
            business_income_premium=property_b.business_income_premium,
            equipment_breakdown_premium=property_b.equipment_breakdown_premium,
            property_premium=property_premium,
            effective_property_rate=effective_rate,
            room_revenue=gl_b.room_revenue,
            gl_rate=gl_b.gl_rate,
            gl_base_premium=gl_b.gl_base_premium,
            fb_revenue=gl_b.fb_revenue,
            gl_restaurant_component=gl_b.gl_restaurant_component,
            liquor_revenue=gl_b.liquor_revenue,
            gl_liquor_component=gl_b.gl_liquor_component,
            resort_activities_revenue=gl_b.resort_activities_revenue,
            gl_resort_activities_component=gl_b.gl_resort_activities_component,
            general_liability_premium=gl_premium,
            umbrella_limit=umbrella_b.limit,
            umbrella_base_premium=umbrella_b.base_premium,
            umbrella_surcharges=dict(umbrella_b.surcharges),
            umbrella_surcharge_total=umbrella_b.surcharge_total,
            umbrella_premium_before_modifiers=umbrella_b.premium_before_modifiers,
            litigation_factor=umbrella_b.litigation_factor,
            fleet_factor=umbrella_b.fleet_factor,
            sir_factor=umbrella_b.sir_factor,
            umbrella_excess_premium=umbrella_b.umbrella_premium,
            flood_zone=prop.flood_zone,
            flood_premium=flood_premium,
            total_estimated_premium=total,
            premium_per_room=round_currency(total / max(prop.room_count, 1)),
            premium_per_sf=round_rate(total / square_footage, 2),
            warnings=build_warnings(prop, total_tiv, self.profile.warnings),
            risk_grade=risk_grade(total, prop.room_count, self.profile.risk_grades),
        )
