"""Parse and normalize language-model property responses."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from ..exceptions import LookupParseError
from ..models import AMENITY_NAMES, CONFIDENCE_LEVELS, PhotoAnalysis, coerce_flag

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

# Fields the search step may return; anything else is dropped.
PROPERTY_FIELDS = (
    "property_name",
    "full_address",
    "brand",
    "room_count",
    "stories",
    "year_built",
    "construction_type",
    "square_footage",
    "lot_size",
    "sprinklered",
    "state",
    "amenities",
    "confidence_level",
    "data_sources",
)


def response_text(content: Any) -> str:
    """Concatenate the text blocks of a messages response."""
    parts = []
    for block in content or []:
        if getattr(block, "type", None) == "text":
            parts.append(block.text)
    return "".join(parts)


def extract_json_object(text: str) -> dict[str, Any]:
    """Return the outermost ``{...}`` in ``text`` as a dict.

    Models sometimes wrap JSON in prose or code fences; the first ``{`` to
    the last ``}`` is taken.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise LookupParseError()
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise LookupParseError() from e
    if not isinstance(data, dict):
        raise LookupParseError()
    return data


def pop_image_urls(data: dict[str, Any], limit: int) -> list[str]:
    """Remove ``image_urls`` from ``data`` and return up to ``limit`` http(s) URLs."""
    raw = data.pop("image_urls", None)
    if not isinstance(raw, list):
        return []
    urls = [u.strip() for u in raw if isinstance(u, str) and u.strip().lower().startswith(("http://", "https://"))]
    return urls[:limit]


def normalize_property(data: Mapping[str, Any]) -> dict[str, Any]:
    """Keep known fields and tidy their shape.

    Values are not coerced to numbers here; the rating side does that.
    """
    out: dict[str, Any] = {}
    for key in PROPERTY_FIELDS:
        value = data.get(key)
        if value is None or value == "":
            continue
        out[key] = value

    if isinstance(out.get("state"), str):
        out["state"] = out["state"].strip().upper()

    amenities = out.get("amenities")
    if isinstance(amenities, Mapping):
        out["amenities"] = {name: coerce_flag(amenities.get(name), False) for name in AMENITY_NAMES}
    else:
        out.pop("amenities", None)

    confidence = str(out.get("confidence_level", "")).strip().lower()
    if confidence in CONFIDENCE_LEVELS:
        out["confidence_level"] = confidence
    else:
        out.pop("confidence_level", None)

    sources = out.get("data_sources")
    if isinstance(sources, list):
        out["data_sources"] = [str(s) for s in sources if s]
    else:
        out.pop("data_sources", None)

    return out


def merge_vision(record: dict[str, Any], vision: Mapping[str, Any], images_analyzed: int) -> dict[str, Any]:
    """Merge vision findings into a looked-up record.

    Stories and construction type seen in photos override the text search.
    A pool seen in photos is added; nothing seen in photos removes an amenity.
    """
    out = dict(record)
    if vision.get("stories"):
        out["stories"] = vision["stories"]
    if vision.get("construction_type"):
        out["construction_type"] = vision["construction_type"]

    out["photo_analysis"] = PhotoAnalysis(
        roof_type=vision.get("roof_type") or None,
        exterior_material=vision.get("exterior_material") or None,
        estimated_condition=vision.get("estimated_condition") or None,
        photo_notes=vision.get("photo_notes") or None,
        images_analyzed=images_analyzed,
    ).to_dict()

    visible = vision.get("visible_amenities")
    if isinstance(visible, Mapping) and coerce_flag(visible.get("pool"), False):
        amenities = dict(out.get("amenities") or {})
        if not amenities.get("pool"):
            amenities["pool"] = True
            out["amenities"] = amenities
    return out
