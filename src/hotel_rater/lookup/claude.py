"""Property lookup via Claude web search, refined by Claude vision.

Step 1 asks the model to search the web and return a JSON property record
plus exterior photo URLs. Step 2 fetches those photos and asks the model to
check story count and construction type against them.
"""

from __future__ import annotations

import os
from typing import Any

import anthropic
import httpx

from ..exceptions import (
    LookupAuthenticationError,
    LookupParseError,
    LookupRateLimitError,
    PropertyLookupError,
)
from ..logging import get_logger
from ..models import CONSTRUCTION_TYPES, LookupSettings
from ..rating.brands import BrandCatalog, apply_brand_defaults
from .base import LookupResult, PropertyLookup
from .images import FetchedImage, fetch_images
from .parsing import extract_json_object, merge_vision, normalize_property, pop_image_urls, response_text

log = get_logger(__name__)

_CONSTRUCTION_CHOICES = ", ".join(f'"{c}"' for c in reversed(CONSTRUCTION_TYPES))

SEARCH_PROMPT = """You are a commercial real estate data assistant. Search the web for the hotel below and return its building data as JSON.

Hotel: "{query}"

Where to look, most reliable first:
1. LoopNet, CoStar and CREXi listings (square footage, year built, stories, construction).
2. County assessor / property appraiser records.
3. The brand's own site and travel sites for room count, amenities and photos.
4. Map and street view results for exterior photos.

Return one JSON object with:
- property_name (string)
- full_address (string)
- brand (string, e.g. "Marriott", "Hilton", "Independent")
- room_count (number)
- stories (number)
- year_built (number)
- construction_type (one of {construction_choices}; estimate from brand standards and age if not listed)
- square_footage (number; if not listed estimate 500-600 SF per room limited-service, 700-900 full-service)
- lot_size (number of acres, or null)
- sprinklered (boolean; assume true for major brands or buildings after 1990)
- state (two-letter US state code)
- amenities (object of booleans: pool, restaurant, fitness_center, spa, business_center, meeting_space)
- confidence_level ("high" if key figures come from listings or tax records, "medium" from brand/travel sites, "low" if mostly estimated)
- data_sources (array of the sources you actually used)
- image_urls (up to {max_images} URLs of exterior photos of the building)

Return ONLY the JSON object, no markdown."""

VISION_PROMPT = """You are a commercial property underwriter reviewing photos of a hotel.

Property: {property_name} at {full_address}
Text search estimate: {stories} stories, construction type {construction_type}

From the photos above, return one JSON object with:
- stories (number; count floors from window rows, ground floor and roof structures)
- construction_type (one of {construction_choices}; concrete or steel frame is Fire Resistive, masonry walls with concrete floors Masonry Non-Combustible, metal panels Non-Combustible, wood siding Frame)
- roof_type ("flat", "pitched", "hip", "mansard" or "mixed")
- exterior_material (e.g. "brick", "stucco", "EIFS", "glass curtain wall", "concrete", "metal panel", "wood siding", "stone veneer")
- visible_amenities (object of booleans: pool, parking_structure, porte_cochere, solar_panels, outdoor_dining)
- estimated_condition ("excellent", "good", "fair" or "poor")
- photo_notes (short notes on anything relevant to underwriting)

Return ONLY the JSON object, no markdown."""


def _retry_after(error: anthropic.APIStatusError) -> float | None:
    value = error.response.headers.get("retry-after")
    try:
        return float(value) if value else None
    except ValueError:
        return None


class ClaudePropertyLookup(PropertyLookup):
    """
    Property lookup backed by the Anthropic Messages API.
    Missing fields are filled from brand defaults when the brand is known.
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: LookupSettings | None = None,
        brand_catalog: BrandCatalog | None = None,
        client: anthropic.Anthropic | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or LookupSettings()
        self.brand_catalog = brand_catalog
        self.http_client = http_client
        if client is None:
            key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
            if not key:
                raise LookupAuthenticationError("ANTHROPIC_API_KEY is not set.")
            client = anthropic.Anthropic(api_key=key)
        self.client = client

    @property
    def source_name(self) -> str:
        return "claude"

    def lookup(self, query: str) -> LookupResult:
        query = (query or "").strip()
        if not query:
            raise PropertyLookupError("Please provide a hotel name and/or address.")

        log.info("lookup.search_started", query=query)
        data = extract_json_object(self._search(query))
        image_urls = pop_image_urls(data, self.settings.max_images)
        record = normalize_property(data)
        log.info("lookup.search_complete", query=query, image_urls=len(image_urls))

        images: list[FetchedImage] = []
        if image_urls:
            images = fetch_images(image_urls, self.settings, self.http_client)
            log.info("lookup.images_fetched", fetched=len(images), requested=len(image_urls))

        errors: list[str] = []
        if images:
            text = self._analyze_photos(record, images)
            try:
                vision = extract_json_object(text)
            except LookupParseError as e:
                # Unreadable vision output keeps the text-search record.
                errors.append(f"vision: {e}")
                log.info("lookup.vision_unparsed", error=str(e))
            else:
                record = merge_vision(record, vision, len(images))
                log.info("lookup.vision_merged", images_analyzed=len(images))

        if self.brand_catalog is not None:
            record = apply_brand_defaults(record, self.brand_catalog)

        log.info("lookup.complete", query=query, confidence=record.get("confidence_level"))
        return LookupResult(
            property=record,
            source=self.source_name,
            images_found=len(image_urls),
            images_analyzed=len(images),
            errors=errors,
        )

    def _search(self, query: str) -> str:
        prompt = SEARCH_PROMPT.format(
            query=query,
            construction_choices=_CONSTRUCTION_CHOICES,
            max_images=self.settings.max_images,
        )
        return self._create(
            max_tokens=self.settings.search_max_tokens,
            tools=[
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": self.settings.web_search_max_uses,
                }
            ],
            messages=[{"role": "user", "content": prompt}],
        )

    def _analyze_photos(self, record: dict[str, Any], images: list[FetchedImage]) -> str:
        content: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": img.media_type, "data": img.data},
            }
            for img in images
        ]
        content.append(
            {
                "type": "text",
                "text": VISION_PROMPT.format(
                    property_name=record.get("property_name", "unknown"),
                    full_address=record.get("full_address", "unknown address"),
                    stories=record.get("stories", "unknown"),
                    construction_type=record.get("construction_type", "unknown"),
                    construction_choices=_CONSTRUCTION_CHOICES,
                ),
            }
        )
        log.info("lookup.vision_started", images=len(images))
        return self._create(
            max_tokens=self.settings.vision_max_tokens,
            messages=[{"role": "user", "content": content}],
        )

    def _create(self, **kwargs: Any) -> str:
        """One Messages API call, with provider errors mapped to ours."""
        try:
            response = self.client.messages.create(model=self.settings.model, **kwargs)
        except anthropic.RateLimitError as e:
            raise LookupRateLimitError(retry_after=_retry_after(e)) from e
        except anthropic.AuthenticationError as e:
            raise LookupAuthenticationError() from e
        except anthropic.APIError as e:
            raise PropertyLookupError(f"Lookup provider error: {e}") from e
        return response_text(response.content)
