"""Rating calculators for hotel property, liability and umbrella premiums."""

from .brackets import Bracket, parse_brackets, resolve_bracket, resolve_bracket_entry
from .brands import BrandCatalog, BrandDefaults, apply_brand_defaults
from .grading import build_warnings, risk_grade
from .liability import LiabilityBreakdown, calculate_general_liability, calculate_loss_cost_general_liability
from .money import round_currency, round_rate
from .property_premium import (
    GeographyFactors,
    PropertyModifiers,
    PropertyPremiumBreakdown,
    calculate_loss_cost_property_premium,
    calculate_property_premium,
    resolve_geography,
)
from .tables import LossCostProfile, PerRoomProfile, RatingProfile
from .tiv import TivBreakdown, estimate_tiv, estimate_tiv_by_square_footage
from .umbrella import UmbrellaBreakdown, amenity_surcharges, calculate_loss_cost_umbrella, calculate_umbrella

__all__ = [
    "Bracket",
    "parse_brackets",
    "resolve_bracket",
    "resolve_bracket_entry",
    "BrandCatalog",
    "BrandDefaults",
    "apply_brand_defaults",
    "build_warnings",
    "risk_grade",
    "LiabilityBreakdown",
    "calculate_general_liability",
    "calculate_loss_cost_general_liability",
    "round_currency",
    "round_rate",
    "GeographyFactors",
    "PropertyModifiers",
    "PropertyPremiumBreakdown",
    "calculate_loss_cost_property_premium",
    "calculate_property_premium",
    "resolve_geography",
    "LossCostProfile",
    "PerRoomProfile",
    "RatingProfile",
    "TivBreakdown",
    "estimate_tiv",
    "estimate_tiv_by_square_footage",
    "UmbrellaBreakdown",
    "amenity_surcharges",
    "calculate_loss_cost_umbrella",
    "calculate_umbrella",
]
