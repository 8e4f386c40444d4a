"""Step-function bracket lookup used by every banded modifier."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class Bracket:
    """One band: inputs up to and including ``threshold`` resolve to ``value``."""

    threshold: float
    value: Any
    label: str = ""


def resolve_bracket_entry(brackets: Sequence[Bracket], value: float) -> Bracket:
    """Return the first bracket whose threshold ``value`` does not exceed.

    Inputs above every threshold fall into the last (open-ended) bracket.
    Negative inputs are not rejected; they land in the lowest bracket.
    """
    if not brackets:
        raise ConfigurationError("Cannot resolve against an empty bracket list")
    for bracket in brackets:
        if value <= bracket.threshold:
            return bracket
    return brackets[-1]


def resolve_bracket(brackets: Sequence[Bracket], value: float) -> Any:
    """Return the value of the bracket ``value`` falls into."""
    return resolve_bracket_entry(brackets, value).value


def parse_brackets(
    raw: Any,
    name: str,
    value_key: str = "modifier",
    value_type: type = float,
) -> tuple[Bracket, ...]:
    """Build an ordered bracket tuple from config rows.

    Each row is ``{max: <threshold>, <value_key>: <value>, label: <text>}``.
    The list must be non-empty and ascending by threshold.
    """
    if not isinstance(raw, list) or not raw:
        raise ConfigurationError(f"{name}: bracket list must be a non-empty list")

    brackets: list[Bracket] = []
    previous = -math.inf
    for i, row in enumerate(raw):
        if not isinstance(row, dict) or "max" not in row or value_key not in row:
            raise ConfigurationError(f"{name}[{i}]: expected keys 'max' and '{value_key}'")
        try:
            threshold = float(row["max"])
            value = value_type(row[value_key])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{name}[{i}]: {e}") from e
        if threshold <= previous:
            raise ConfigurationError(f"{name}: thresholds must be strictly ascending (row {i})")
        previous = threshold
        brackets.append(Bracket(threshold=threshold, value=value, label=str(row.get("label", ""))))
    return tuple(brackets)
