"""Currency rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_currency(amount: float) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(Decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_rate(rate: float, places: int = 4) -> float:
    """Round an informational rate for display."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(rate).quantize(quantum, rounding=ROUND_HALF_UP))
