"""Brand tier and brand default resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _brand_matches(query: str, key: str) -> bool:
    """Case-insensitive containment in either direction."""
    q = query.strip().lower()
    k = key.strip().lower()
    if not q or not k:
        return False
    return k in q or q in k


@dataclass(frozen=True)
class BrandDefaults:
    """Typical characteristics of a brand's properties."""

    brand: str
    service_type: str | None = None
    construction_type: str | None = None
    stories: int | None = None
    room_count: int | None = None
    amenities: Mapping[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key in ("service_type", "construction_type", "stories", "room_count"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.amenities:
            out["amenities"] = dict(self.amenities)
        return out


@dataclass(frozen=True)
class BrandCatalog:
    """Read-only brand tables.

    Iteration order of ``tiers`` (and of the brands inside each tier) is the
    matching tie-break: the first entry that matches wins.
    """

    tiers: tuple[tuple[str, tuple[str, ...]], ...] = ()
    full_service_tiers: frozenset[str] = frozenset()
    property_multipliers: Mapping[str, float] = field(default_factory=dict)
    defaults: tuple[BrandDefaults, ...] = ()
    default_service_type: str = "select-service"

    def resolve_tier(self, brand: str | None) -> str | None:
        """Return the tier of the first catalog brand matching ``brand``."""
        if not brand or not brand.strip():
            return None
        for tier, names in self.tiers:
            for name in names:
                if _brand_matches(brand, name):
                    return tier
        return None

    def resolve_defaults(self, brand: str | None) -> BrandDefaults | None:
        """Return defaults for the first catalog brand matching ``brand``."""
        if not brand or not brand.strip():
            return None
        for entry in self.defaults:
            if _brand_matches(brand, entry.brand):
                return entry
        return None

    def service_type_for_tier(self, tier: str | None) -> str:
        """Full-service tiers default to full-service, all others to select-service."""
        if tier is None:
            return self.default_service_type
        return "full-service" if tier in self.full_service_tiers else "select-service"

    def property_multiplier(self, tier: str | None) -> float:
        if tier is None:
            return 1.0
        return float(self.property_multipliers.get(tier, 1.0))


def apply_brand_defaults(record: Mapping[str, Any], catalog: BrandCatalog) -> dict[str, Any]:
    """Fill fields missing from ``record`` with the brand's typical values.

    Fields already present (and non-empty) are never overwritten. Amenities
    are merged key by key.
    """
    out = dict(record)
    defaults = catalog.resolve_defaults(str(out.get("brand") or ""))
    if defaults is None:
        return out

    for key, value in defaults.to_dict().items():
        if key == "amenities":
            current = out.get("amenities") if isinstance(out.get("amenities"), Mapping) else {}
            merged = dict(value)
            merged.update({k: v for k, v in current.items() if v is not None})
            out["amenities"] = merged
        elif out.get(key) in (None, "", 0):
            out[key] = value
    return out
