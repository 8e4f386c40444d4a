"""Property lookup sources."""

from .base import LookupResult, PropertyLookup
from .claude import ClaudePropertyLookup
from .images import FetchedImage, fetch_images
from .parsing import extract_json_object, merge_vision, normalize_property

__all__ = [
    "LookupResult",
    "PropertyLookup",
    "ClaudePropertyLookup",
    "FetchedImage",
    "fetch_images",
    "extract_json_object",
    "merge_vision",
    "normalize_property",
]
