"""Custom exceptions for hotel_rater.

The rating engine itself never fails on malformed property input; these
cover configuration defects and the property lookup collaborator.
"""

from __future__ import annotations


class HotelRaterError(Exception):
    """Base exception for all hotel_rater errors."""


class ConfigurationError(HotelRaterError):
    """Rating configuration is structurally invalid (fatal at startup)."""


# --- Property lookup ---

class PropertyLookupError(HotelRaterError):
    """The property lookup collaborator could not produce a record."""


class LookupParseError(PropertyLookupError):
    """The model response could not be parsed into a property record."""

    def __init__(self, message: str = "Could not extract property data from the lookup response.") -> None:
        super().__init__(message)


class LookupRateLimitError(PropertyLookupError):
    """The upstream provider is throttling requests. Retry later."""

    def __init__(self, message: str = "Lookup provider rate limit reached.", retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    @property
    def retry_guidance(self) -> str:
        if self.retry_after:
            return f"Retry after {self.retry_after:.0f} seconds."
        return "Wait a minute and try again."


class LookupAuthenticationError(PropertyLookupError):
    """The upstream provider rejected the configured credentials."""

    def __init__(self, message: str = "Lookup provider rejected the API key. Check ANTHROPIC_API_KEY.") -> None:
        super().__init__(message)
