"""Total Insurable Value estimation."""

from __future__ import annotations

from dataclasses import dataclass

from .brackets import resolve_bracket
from .money import round_currency
from .tables import LossCostTables, PerRoomTiv


@dataclass(frozen=True)
class TivBreakdown:
    """Building, contents and business income values.

    Each bucket is rounded on its own; the total is the sum of the rounded
    buckets.
    """

    building_value: int
    contents_value: int
    business_income_value: int
    age_adjustment: float = 1.0

    @property
    def total_insurable_value(self) -> int:
        return self.building_value + self.contents_value + self.business_income_value


def estimate_tiv(room_count: int, service_type: str, tables: PerRoomTiv) -> TivBreakdown:
    """Per-room TIV by service type.

    Age and construction affect the rate, not the value, in this model.
    Unrecognized service types use the configured default per-room values.
    """
    building_per_room = tables.building_cost_per_room.get(service_type, tables.default_building_cost_per_room)
    contents_per_room = tables.contents_per_room.get(service_type, tables.default_contents_per_room)
    bi_per_room = tables.business_income_per_room.get(service_type, tables.default_business_income_per_room)

    return TivBreakdown(
        building_value=round_currency(room_count * building_per_room),
        contents_value=round_currency(room_count * contents_per_room),
        business_income_value=round_currency(room_count * bi_per_room),
    )


def estimate_tiv_by_square_footage(
    square_footage: float,
    room_count: int,
    construction_type: str,
    building_age: int,
    tables: LossCostTables,
) -> TivBreakdown:
    """Legacy TIV: building from square footage, depreciated by age band."""
    cost_per_sf = tables.building_cost_per_sf.get(construction_type, tables.default_building_cost_per_sf)
    age_adjustment = float(resolve_bracket(tables.age_adjustments, building_age))

    return TivBreakdown(
        building_value=round_currency(square_footage * cost_per_sf * age_adjustment),
        contents_value=round_currency(room_count * tables.contents_per_room),
        business_income_value=round_currency(room_count * tables.business_income_per_room),
        age_adjustment=age_adjustment,
    )
