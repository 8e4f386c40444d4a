"""
FastAPI service for the hotel rater (thin API wrapper).

Endpoints:
- GET  /health
- POST /api/property-lookup   -> {"property": {...}}
- POST /api/calculate-rating  -> {"rating": {...}}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import get_lookup_settings, get_rating_profile, load_config
from .exceptions import (
    LookupAuthenticationError,
    LookupParseError,
    LookupRateLimitError,
    PropertyLookupError,
)
from .logging import get_logger
from .lookup import ClaudePropertyLookup, PropertyLookup
from .rating.engine import RatingEngine

log = get_logger(__name__)


class LookupRequest(BaseModel):
    query: Optional[str] = None


class RatingRequest(BaseModel):
    property: Optional[Dict[str, Any]] = None


def _error(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def create_app(
    engine: RatingEngine | None = None,
    lookup: PropertyLookup | None = None,
    config_path: Path | str | None = None,
) -> FastAPI:
    """Build the app. Collaborators are injectable for tests.

    Without an injected lookup, the Claude lookup is created on first use so
    that a missing API key only affects the lookup endpoint.
    """
    config = load_config(config_path) if engine is None or lookup is None else {}
    if engine is None:
        engine = RatingEngine(profile=get_rating_profile(config))

    app = FastAPI(title="Hotel Rater", version="0.1.0")
    state: Dict[str, Any] = {"lookup": lookup}

    def _get_lookup() -> PropertyLookup:
        if state["lookup"] is None:
            state["lookup"] = ClaudePropertyLookup(
                settings=get_lookup_settings(config),
                brand_catalog=engine.brands,
            )
        return state["lookup"]

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {
            "status": "ok",
            "profile": engine.profile.name,
            "config_version": engine.profile.version,
        }

    @app.post("/api/property-lookup")
    def property_lookup(req: LookupRequest):
        query = (req.query or "").strip()
        if not query:
            return _error(400, "Please provide a hotel name and/or address.")
        try:
            result = _get_lookup().lookup(query)
        except LookupRateLimitError as e:
            log.warning("api.lookup_rate_limited", retry_after=e.retry_after)
            headers = {"Retry-After": f"{e.retry_after:.0f}"} if e.retry_after else None
            return _error(429, f"{e} {e.retry_guidance}", headers)
        except LookupAuthenticationError as e:
            log.error("api.lookup_auth_failed", error=str(e))
            return _error(500, f"{e}")
        except LookupParseError as e:
            log.warning("api.lookup_unparsed", query=query)
            return _error(502, str(e))
        except PropertyLookupError as e:
            log.error("api.lookup_failed", query=query, error=str(e))
            return _error(502, str(e))
        return {"property": result.property}

    @app.post("/api/calculate-rating")
    def calculate_rating(req: RatingRequest):
        if req.property is None:
            return _error(400, "Property data is required.")
        rating = engine.rate(req.property)
        return {"rating": rating.to_dict()}

    return app
