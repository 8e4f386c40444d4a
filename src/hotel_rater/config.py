"""Configuration loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigurationError
from .models import LookupSettings
from .rating.brackets import parse_brackets
from .rating.brands import BrandCatalog, BrandDefaults
from .rating.tables import (
    CoastalTerms,
    GeneralLiabilityRates,
    GeographyTiers,
    LossCostProfile,
    LossCostTables,
    ModifierTables,
    PerRoomProfile,
    PerRoomTiv,
    PropertyRates,
    RatingProfile,
    UmbrellaTables,
    UmbrellaTier,
    WarningThresholds,
)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file.

    Resolution order: explicit path, ``HOTEL_RATER_CONFIG`` env var, the
    repository's ``config.yaml``.
    """
    if config_path:
        path = Path(config_path)
    elif os.environ.get("HOTEL_RATER_CONFIG"):
        path = Path(os.environ["HOTEL_RATER_CONFIG"])
    else:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a mapping: {path}")
    return data


def _section(config: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = config.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a mapping")
    return value


def _float_map(raw: Any, name: str) -> dict[str, float]:
    """String-keyed table of floats."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{name} must be a mapping")
    try:
        return {str(k): float(v) for k, v in raw.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name}: {e}") from e


def _int_key_map(raw: Any, name: str) -> dict[int, float]:
    """Integer-keyed table of floats (protection class, coinsurance)."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{name} must be a mapping")
    try:
        return {int(k): float(v) for k, v in raw.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name}: {e}") from e


def _zone_tables(raw: Any, name: str) -> dict[str, dict[str, float]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{name} must be a mapping")
    return {str(state).upper(): _float_map(zones, f"{name}.{state}") for state, zones in raw.items()}


def _states(raw: Any) -> frozenset[str]:
    return frozenset(str(s).upper() for s in (raw or []))


def get_brand_catalog(config: Mapping[str, Any]) -> BrandCatalog:
    """Extract the brand catalog, preserving declaration order."""
    br = _section(config, "brands")
    tiers_cfg = br.get("tiers", {}) or {}
    tiers = tuple(
        (str(tier), tuple(str(name) for name in (names or [])))
        for tier, names in tiers_cfg.items()
    )
    defaults: list[BrandDefaults] = []
    for brand, d in (br.get("defaults", {}) or {}).items():
        if not isinstance(d, dict):
            continue
        defaults.append(
            BrandDefaults(
                brand=str(brand),
                service_type=d.get("service_type"),
                construction_type=d.get("construction_type"),
                stories=int(d["stories"]) if d.get("stories") else None,
                room_count=int(d["room_count"]) if d.get("room_count") else None,
                amenities={str(k): bool(v) for k, v in (d.get("amenities") or {}).items()},
            )
        )
    return BrandCatalog(
        tiers=tiers,
        full_service_tiers=frozenset(str(t) for t in br.get("full_service_tiers", []) or []),
        property_multipliers=_float_map(br.get("property_multipliers"), "brands.property_multipliers"),
        defaults=tuple(defaults),
        default_service_type=str(config.get("default_service_type", "select-service")),
    )


def get_modifier_tables(config: Mapping[str, Any]) -> ModifierTables:
    """Extract the modifier tables shared by every profile."""
    geo = _section(config, "geography")
    return ModifierTables(
        building_age=parse_brackets(config.get("building_age_modifiers"), "building_age_modifiers"),
        roof_age=parse_brackets(config.get("roof_age_modifiers"), "roof_age_modifiers"),
        stories=parse_brackets(config.get("stories_modifiers"), "stories_modifiers"),
        protection_class=_int_key_map(config.get("protection_class_modifiers"), "protection_class_modifiers"),
        default_protection_class=int(config.get("default_protection_class", 4)),
        geographic={k.upper(): v for k, v in _float_map(geo.get("modifiers"), "geography.modifiers").items()},
        default_geo_modifier=float(geo.get("default_modifier", 1.0)),
    )


def get_warning_thresholds(config: Mapping[str, Any]) -> WarningThresholds:
    """Extract underwriting warning thresholds."""
    w = _section(config, "warnings")
    return WarningThresholds(
        cat_zone_states=_states(w.get("cat_zone_states")),
        old_roof_age=float(w.get("old_roof_age", 15)),
        high_protection_class=int(w.get("high_protection_class", 8)),
        high_tiv=float(w.get("high_tiv", 50_000_000)),
        non_sprinklered_warning=bool(w.get("non_sprinklered_warning", True)),
        high_rise_stories=int(w.get("high_rise_stories", 10)),
        combustible_constructions=frozenset(
            w.get("combustible_constructions", ["Frame", "Joisted Masonry"]) or []
        ),
    )


def get_umbrella_tables(config: Mapping[str, Any]) -> UmbrellaTables:
    """Extract umbrella tables and validate incremental tier chains."""
    u = _section(config, "umbrella")
    tiers: dict[str, UmbrellaTier] = {}
    for name, t in (u.get("limit_tiers", {}) or {}).items():
        if not isinstance(t, dict):
            raise ConfigurationError(f"umbrella.limit_tiers.{name} must be a mapping")
        per_room = t.get("per_room")
        base_limit = t.get("base_limit")
        if base_limit is not None or per_room == "incremental":
            if base_limit is None or t.get("incremental_per_room") is None:
                raise ConfigurationError(
                    f"umbrella.limit_tiers.{name}: incremental tier needs base_limit and incremental_per_room"
                )
            tiers[str(name)] = UmbrellaTier(
                name=str(name),
                label=str(t.get("label", name)),
                base_limit=str(base_limit),
                incremental_per_room=float(t["incremental_per_room"]),
            )
        else:
            try:
                tiers[str(name)] = UmbrellaTier(name=str(name), label=str(t.get("label", name)), per_room=float(per_room))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"umbrella.limit_tiers.{name}: per_room must be a number") from e

    if not tiers:
        raise ConfigurationError("umbrella.limit_tiers must define at least one tier")

    max_depth = int(u.get("max_incremental_depth", 2))
    for name in tiers:
        _check_tier_chain(tiers, name, max_depth)

    default_limit = str(u.get("default_limit", next(iter(tiers))))
    if default_limit not in tiers:
        raise ConfigurationError(f"umbrella.default_limit '{default_limit}' is not a configured tier")

    return UmbrellaTables(
        limit_tiers=tiers,
        default_limit=default_limit,
        max_incremental_depth=max_depth,
        amenity_surcharges=_float_map(u.get("amenity_surcharges"), "umbrella.amenity_surcharges"),
        litigation_modifiers=_float_map(u.get("litigation_modifiers"), "umbrella.litigation_modifiers"),
        default_litigation=str(u.get("default_litigation", "moderate")),
        fleet_modifiers=parse_brackets(u.get("fleet_modifiers"), "umbrella.fleet_modifiers"),
        sir_options=_float_map(u.get("sir_options"), "umbrella.sir_options"),
        default_sir=str(u.get("default_sir", "$25K")),
    )


def _check_tier_chain(tiers: Mapping[str, UmbrellaTier], name: str, max_depth: int) -> None:
    """An incremental chain must reach a flat tier, without cycles, within max_depth."""
    seen = {name}
    tier = tiers[name]
    depth = 0
    while tier.is_incremental:
        depth += 1
        if depth > max_depth:
            raise ConfigurationError(f"umbrella tier {name}: incremental chain deeper than {max_depth}")
        base = tier.base_limit
        if base not in tiers:
            raise ConfigurationError(f"umbrella tier {name}: unknown base_limit {base}")
        if base in seen:
            raise ConfigurationError(f"umbrella tier {name}: incremental chain loops at {base}")
        seen.add(base)
        tier = tiers[base]


def _get_per_room_profile(config: Mapping[str, Any]) -> PerRoomProfile:
    prop = _section(config, "property")
    tiv = _section(config, "tiv")
    geo = _section(config, "geography")
    gl = _section(config, "general_liability")

    base_rates = _float_map(prop.get("base_rates"), "property.base_rates")
    if not base_rates:
        raise ConfigurationError("property.base_rates must not be empty")

    return PerRoomProfile(
        version=str(config.get("version", "")),
        market_note=str(config.get("market_note", "")),
        modifiers=get_modifier_tables(config),
        warnings=get_warning_thresholds(config),
        risk_grades=parse_brackets(config.get("risk_grades"), "risk_grades", value_key="grade", value_type=str),
        brands=get_brand_catalog(config),
        property_rates=PropertyRates(
            base_rates=base_rates,
            default_construction=str(prop.get("default_construction", "Masonry Non-Combustible")),
            non_sprinklered_surcharge=float(prop.get("non_sprinklered_surcharge", 0.60)),
            contents_rate_multiplier=float(prop.get("contents_rate_multiplier", 1.68)),
            bi_rate_multiplier=float(prop.get("bi_rate_multiplier", 1.38)),
            equipment_breakdown=_float_map(prop.get("equipment_breakdown"), "property.equipment_breakdown"),
            default_equipment_breakdown=float(prop.get("default_equipment_breakdown", 0)),
        ),
        tiv=PerRoomTiv(
            building_cost_per_room=_float_map(tiv.get("building_cost_per_room"), "tiv.building_cost_per_room"),
            default_building_cost_per_room=float(tiv.get("default_building_cost_per_room", 0)),
            contents_per_room=_float_map(tiv.get("contents_per_room"), "tiv.contents_per_room"),
            default_contents_per_room=float(tiv.get("default_contents_per_room", 0)),
            business_income_per_room=_float_map(tiv.get("business_income_per_room"), "tiv.business_income_per_room"),
            default_business_income_per_room=float(tiv.get("default_business_income_per_room", 0)),
        ),
        geography=GeographyTiers(
            geo_tiers=_zone_tables(geo.get("geo_tiers"), "geography.geo_tiers"),
            coastal_geo_overrides=_zone_tables(geo.get("coastal_geo_overrides"), "geography.coastal_geo_overrides"),
            coastal_states=_states(geo.get("coastal_states")),
        ),
        coastal=CoastalTerms(
            wind_tier_modifiers=_float_map(config.get("wind_tier_modifiers"), "wind_tier_modifiers"),
            default_wind_tier=str(config.get("default_wind_tier", "Inland")),
            flood_zone_modifiers=_float_map(config.get("flood_zone_modifiers"), "flood_zone_modifiers"),
            default_flood_zone=str(config.get("default_flood_zone", "X")),
            named_storm_credits=_float_map(
                config.get("named_storm_deductible_credits"), "named_storm_deductible_credits"
            ),
            default_named_storm_deductible=str(config.get("default_named_storm_deductible", "2%")),
            flood_premium_estimates=_float_map(config.get("flood_premium_estimates"), "flood_premium_estimates"),
        ),
        general_liability=GeneralLiabilityRates(
            rate_with_pool=float(gl.get("rate_with_pool", 0)),
            rate_without_pool=float(gl.get("rate_without_pool", 0)),
            restaurant_rate=float(gl.get("restaurant_rate", 0)),
            liquor_rate=float(gl.get("liquor_rate", 0)),
            fb_revenue_percent=float(gl.get("fb_revenue_percent", 0)),
            liquor_sales_percent=float(gl.get("liquor_sales_percent", 0)),
            resort_activities_rate=float(gl.get("resort_activities_rate", 0)),
            resort_activities_revenue_percent=float(gl.get("resort_activities_revenue_percent", 0)),
            room_revenue_per_room=_float_map(gl.get("room_revenue_per_room"), "general_liability.room_revenue_per_room"),
            default_room_revenue_per_room=float(gl.get("default_room_revenue_per_room", 0)),
        ),
        umbrella=get_umbrella_tables(config),
        location_type_modifiers=_float_map(config.get("location_type_modifiers"), "location_type_modifiers"),
        default_location_type=str(config.get("default_location_type", "suburban")),
        coinsurance_factors=_int_key_map(config.get("coinsurance_factors"), "coinsurance_factors"),
        default_coinsurance=int(config.get("default_coinsurance", 80)),
    )


def _get_loss_cost_profile(config: Mapping[str, Any]) -> LossCostProfile:
    lc = _section(config, "loss_costs")
    tiv = _section(config, "tiv")
    liab = _section(config, "liability")
    return LossCostProfile(
        version=str(config.get("version", "")),
        market_note=str(config.get("market_note", "")),
        modifiers=get_modifier_tables(config),
        warnings=get_warning_thresholds(config),
        risk_grades=parse_brackets(config.get("risk_grades"), "risk_grades", value_key="grade", value_type=str),
        brands=get_brand_catalog(config),
        loss_cost=LossCostTables(
            sprinklered_loss_costs=_float_map(lc.get("sprinklered"), "loss_costs.sprinklered"),
            non_sprinklered_loss_costs=_float_map(lc.get("non_sprinklered"), "loss_costs.non_sprinklered"),
            default_loss_cost=float(lc.get("default_loss_cost", 0)),
            loss_cost_multiplier=float(lc.get("loss_cost_multiplier", 1.0)),
            building_cost_per_sf=_float_map(tiv.get("building_cost_per_sf"), "tiv.building_cost_per_sf"),
            default_building_cost_per_sf=float(tiv.get("default_building_cost_per_sf", 0)),
            age_adjustments=parse_brackets(tiv.get("age_adjustments"), "tiv.age_adjustments"),
            contents_per_room=float(tiv.get("contents_per_room", 0)),
            business_income_per_room=float(tiv.get("business_income_per_room", 0)),
            amenity_modifiers=_float_map(config.get("amenity_modifiers"), "amenity_modifiers"),
            gl_per_room=float(liab.get("gl_per_room", 0)),
            liquor_per_room=float(liab.get("liquor_per_room", 0)),
            umbrella_factor=float(liab.get("umbrella_factor", 0)),
        ),
    )


def get_rating_profile(config: Mapping[str, Any]) -> RatingProfile:
    """Build the typed rating profile selected by ``config['profile']``."""
    profile = str(config.get("profile", PerRoomProfile.name))
    if profile == PerRoomProfile.name:
        return _get_per_room_profile(config)
    if profile == LossCostProfile.name:
        return _get_loss_cost_profile(config)
    raise ConfigurationError(f"Unknown rating profile: {profile!r}")


def get_lookup_settings(config: Mapping[str, Any]) -> LookupSettings:
    """Extract property lookup settings from config."""
    lk = _section(config, "lookup")
    defaults = LookupSettings()
    return LookupSettings(
        model=str(lk.get("model", defaults.model)),
        search_max_tokens=int(lk.get("search_max_tokens", defaults.search_max_tokens)),
        vision_max_tokens=int(lk.get("vision_max_tokens", defaults.vision_max_tokens)),
        web_search_max_uses=int(lk.get("web_search_max_uses", defaults.web_search_max_uses)),
        max_images=int(lk.get("max_images", defaults.max_images)),
        image_timeout_seconds=float(lk.get("image_timeout_seconds", defaults.image_timeout_seconds)),
        min_image_bytes=int(lk.get("min_image_bytes", defaults.min_image_bytes)),
        max_image_bytes=int(lk.get("max_image_bytes", defaults.max_image_bytes)),
    )
