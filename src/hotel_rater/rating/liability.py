"""General liability premium.

GL is one all-in line. Restaurant, liquor and resort-activity surcharges are
sub-components added into it, never separate top-level premiums.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models import AMENITY_NAMES, Property
from .money import round_currency
from .tables import GeneralLiabilityRates, LossCostTables


@dataclass(frozen=True)
class LiabilityBreakdown:
    room_revenue: int
    gl_rate: float
    gl_base_premium: int
    fb_revenue: int = 0
    gl_restaurant_component: int = 0
    liquor_revenue: int = 0
    gl_liquor_component: int = 0
    resort_activities_revenue: int = 0
    gl_resort_activities_component: int = 0
    amenities_factor: float = 1.0

    @property
    def general_liability_premium(self) -> int:
        return (
            self.gl_base_premium
            + self.gl_restaurant_component
            + self.gl_liquor_component
            + self.gl_resort_activities_component
        )


def calculate_general_liability(
    prop: Property,
    service_type: str,
    rates: GeneralLiabilityRates,
) -> LiabilityBreakdown:
    """GL from estimated room revenue, rated per $1,000."""
    per_room = rates.room_revenue_per_room.get(service_type, rates.default_room_revenue_per_room)
    room_revenue = prop.room_count * per_room

    gl_rate = rates.rate_with_pool if prop.amenities.pool else rates.rate_without_pool
    gl_base = round_currency(room_revenue / 1000 * gl_rate)

    fb_revenue = 0.0
    liquor_revenue = 0.0
    restaurant_component = 0
    liquor_component = 0
    if prop.amenities.restaurant:
        fb_revenue = room_revenue * rates.fb_revenue_percent
        liquor_revenue = fb_revenue * rates.liquor_sales_percent
        restaurant_component = round_currency(fb_revenue / 1000 * rates.restaurant_rate)
        liquor_component = round_currency(liquor_revenue / 1000 * rates.liquor_rate)

    activities_revenue = 0.0
    activities_component = 0
    if prop.has_resort_activities:
        activities_revenue = room_revenue * rates.resort_activities_revenue_percent
        activities_component = round_currency(activities_revenue / 1000 * rates.resort_activities_rate)

    return LiabilityBreakdown(
        room_revenue=round_currency(room_revenue),
        gl_rate=gl_rate,
        gl_base_premium=gl_base,
        fb_revenue=round_currency(fb_revenue),
        gl_restaurant_component=restaurant_component,
        liquor_revenue=round_currency(liquor_revenue),
        gl_liquor_component=liquor_component,
        resort_activities_revenue=round_currency(activities_revenue),
        gl_resort_activities_component=activities_component,
    )


def calculate_loss_cost_general_liability(prop: Property, tables: LossCostTables) -> LiabilityBreakdown:
    """Legacy GL: flat per-room rate loaded by additive amenity factors.

    Liquor liability (restaurant present) is folded into the single GL line.
    """
    amenities = prop.amenities.to_dict()
    factor = 1.0
    for name in AMENITY_NAMES:
        if amenities.get(name):
            factor += tables.amenity_modifiers.get(name, 0.0)

    gl_base = round_currency(prop.room_count * tables.gl_per_room * factor)
    liquor = round_currency(prop.room_count * tables.liquor_per_room) if prop.amenities.restaurant else 0

    return LiabilityBreakdown(
        room_revenue=0,
        gl_rate=tables.gl_per_room,
        gl_base_premium=gl_base,
        gl_liquor_component=liquor,
        amenities_factor=factor,
    )
