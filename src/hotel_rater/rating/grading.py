"""Underwriting warnings and letter risk grade."""

from __future__ import annotations

from typing import Sequence

from ..models import Property
from .brackets import Bracket, resolve_bracket_entry
from .tables import WarningThresholds


def build_warnings(
    prop: Property,
    total_insurable_value: float,
    thresholds: WarningThresholds,
) -> list[str]:
    """Evaluate every warning independently, in fixed order.

    Zero or more may fire; output order is evaluation order.
    """
    warnings: list[str] = []

    if prop.state in thresholds.cat_zone_states:
        warnings.append(
            f"{prop.state} is a catastrophe-exposed state. Wind, hail and named storm terms "
            "will drive pricing and capacity."
        )
    if prop.location_zone == "twia":
        warnings.append(
            "Property is in the TWIA windstorm zone. Wind coverage may need to be placed "
            "through the state windstorm pool."
        )
    if prop.roof_age >= thresholds.old_roof_age:
        warnings.append(
            f"Roof age of {prop.roof_age} years. Many carriers settle older roofs at ACV; "
            "request a roof inspection."
        )
    if prop.protection_class >= thresholds.high_protection_class:
        warnings.append(
            f"Protection class {prop.protection_class} indicates limited fire protection."
        )
    if thresholds.non_sprinklered_warning and not prop.sprinklered:
        warnings.append("Building is not sprinklered. Expect a significant surcharge and limited markets.")
    if total_insurable_value > thresholds.high_tiv:
        warnings.append(
            f"Total insurable value of ${total_insurable_value:,.0f} exceeds "
            f"${thresholds.high_tiv:,.0f}. A layered or shared program may be required."
        )
    if prop.construction_type in thresholds.combustible_constructions:
        warnings.append(f"{prop.construction_type} construction is combustible. Markets are restricted.")
    if prop.stories >= thresholds.high_rise_stories and not prop.sprinklered:
        warnings.append(
            f"{prop.stories}-story building without sprinklers. High-rise fire exposure is uninsurable "
            "in most admitted markets."
        )

    return warnings


def risk_grade(total_premium: float, room_count: int, grades: Sequence[Bracket]) -> str:
    """Letter grade keyed on premium per room, formatted ``"<letter> - <label>"``.

    Bracket upper bounds are inclusive. Room counts below 1 are treated as 1.
    """
    per_room = total_premium / max(room_count, 1)
    entry = resolve_bracket_entry(grades, per_room)
    return f"{entry.value} - {entry.label}"
