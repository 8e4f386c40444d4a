"""Umbrella / excess liability premium."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..exceptions import ConfigurationError
from ..models import Property
from .brackets import resolve_bracket
from .money import round_currency
from .tables import UmbrellaTables


@dataclass(frozen=True)
class UmbrellaBreakdown:
    """Umbrella premium with every intermediate kept for audit."""

    limit: str | None
    base_premium: int
    surcharges: dict[str, int] = field(default_factory=dict)
    premium_before_modifiers: int = 0
    litigation_factor: float = 1.0
    fleet_factor: float = 1.0
    sir_factor: float = 1.0
    umbrella_premium: int = 0

    @property
    def surcharge_total(self) -> int:
        return sum(self.surcharges.values())


def resolve_limit_base_premium(limit: str, room_count: int, tables: UmbrellaTables) -> float:
    """Base premium for a limit tier, following incremental tiers down to a flat one.

    ``$125M`` on ``$100M`` on flat ``$50M`` resolves to
    rooms x ($50M rate + $100M increment + $125M increment).
    """
    tier = tables.limit_tiers.get(limit)
    if tier is None:
        raise ConfigurationError(f"Unknown umbrella limit tier: {limit}")

    total = 0.0
    depth = 0
    while tier.is_incremental:
        total += room_count * (tier.incremental_per_room or 0.0)
        depth += 1
        base = tables.limit_tiers.get(tier.base_limit or "")
        if base is None or depth > tables.max_incremental_depth:
            raise ConfigurationError(f"Umbrella tier {limit} does not resolve to a flat tier")
        tier = base
    return total + room_count * (tier.per_room or 0.0)


def amenity_surcharges(prop: Property, tables: UmbrellaTables) -> dict[str, int]:
    """Per-room amenity surcharges.

    Pool is independent. Bar/liquor replaces restaurant (never both). Valet
    is independent.
    """
    rooms = prop.room_count
    rates = tables.amenity_surcharges
    out: dict[str, int] = {}
    if prop.amenities.pool:
        out["pool"] = round_currency(rooms * rates.get("pool", 0.0))
    if prop.has_bar_liquor:
        out["bar_liquor"] = round_currency(rooms * rates.get("bar_liquor", 0.0))
    elif prop.amenities.restaurant:
        out["restaurant"] = round_currency(rooms * rates.get("restaurant", 0.0))
    if prop.has_valet:
        out["valet"] = round_currency(rooms * rates.get("valet", 0.0))
    return out


def calculate_umbrella(prop: Property, tables: UmbrellaTables) -> UmbrellaBreakdown:
    """Tiered per-room base + amenity surcharges, then litigation x fleet x SIR."""
    limit = prop.umbrella_limit if prop.umbrella_limit in tables.limit_tiers else tables.default_limit
    base = round_currency(resolve_limit_base_premium(limit, prop.room_count, tables))
    surcharges = amenity_surcharges(prop, tables)
    before = base + sum(surcharges.values())

    litigation_key = prop.litigation_environment or tables.default_litigation
    litigation = float(tables.litigation_modifiers.get(litigation_key, 1.0))
    fleet = float(resolve_bracket(tables.fleet_modifiers, prop.fleet_size))
    sir_key = prop.umbrella_sir or tables.default_sir
    sir = float(tables.sir_options.get(sir_key, 1.0))

    return UmbrellaBreakdown(
        limit=limit,
        base_premium=base,
        surcharges=surcharges,
        premium_before_modifiers=before,
        litigation_factor=litigation,
        fleet_factor=fleet,
        sir_factor=sir,
        umbrella_premium=round_currency(before * litigation * fleet * sir),
    )


def calculate_loss_cost_umbrella(property_premium: int, gl_premium: int, umbrella_factor: float) -> UmbrellaBreakdown:
    """Legacy umbrella: a flat factor on property + GL."""
    premium = round_currency((property_premium + gl_premium) * umbrella_factor)
    return UmbrellaBreakdown(
        limit=None,
        base_premium=premium,
        premium_before_modifiers=premium,
        umbrella_premium=premium,
    )
