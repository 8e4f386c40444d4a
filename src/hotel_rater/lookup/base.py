"""Base interface for property lookup sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class LookupResult:
    """Result of a property lookup.

    ``property`` is a best-effort, possibly partial property record. It is
    rated as-is; missing fields take their documented defaults.
    """

    property: dict[str, Any]
    source: str
    images_found: int = 0
    images_analyzed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def confidence_level(self) -> str | None:
        return self.property.get("confidence_level")


class PropertyLookup(ABC):
    """
    Abstract interface for property lookup sources.
    Implementations: Claude web search + vision.
    """

    @abstractmethod
    def lookup(self, query: str) -> LookupResult:
        """
        Look up a hotel by free-text name and/or address.
        Raises PropertyLookupError subclasses on upstream failure.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this lookup source."""
        ...
