"""Export rating results to CSV and JSON."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models import RatingResult


def _serialize(obj: Any) -> Any:
    """JSON serializer for datetime and other objects."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


CSV_FIELDS = [
    "room_count",
    "state",
    "construction_type",
    "service_type",
    "brand_tier",
    "total_insurable_value",
    "property_premium",
    "general_liability_premium",
    "umbrella_limit",
    "umbrella_excess_premium",
    "flood_premium",
    "total_estimated_premium",
    "premium_per_room",
    "risk_grade",
    "warnings",
]


def export_csv(results: list[RatingResult], path: Path | str) -> None:
    """Export a quote summary per result to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["quote", *CSV_FIELDS])
        writer.writeheader()
        for i, r in enumerate(results, 1):
            row = {name: getattr(r, name) for name in CSV_FIELDS}
            row["quote"] = i
            row["brand_tier"] = r.brand_tier or ""
            row["umbrella_limit"] = r.umbrella_limit or ""
            row["warnings"] = " | ".join(r.warnings)
            writer.writerow(row)


def export_json(results: list[RatingResult], path: Path | str) -> None:
    """Export full rating details to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "run_at": datetime.utcnow().isoformat(),
        "count": len(results),
        "results": [r.to_dict() for r in results],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_serialize)
