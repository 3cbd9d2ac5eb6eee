"""
Size-Based Overhead Skill

Overhead rate curves keyed on project size: tiered steps or smooth
eased interpolation, plus a bucketed breakdown of the amount.
"""

from .definition import (
    OverheadBreakdown,
    OverheadConfigurationError,
    OverheadMethod,
    OverheadRateResult,
    OverheadTier,
    SizeBasedOverheadResult,
)

from .impl import (
    SizeBasedOverheadCalculator,
    calculate_size_based_overhead,
    ease_in,
    get_size_based_overhead_rate,
    BOUNDARY_TOLERANCE,
    BREAKDOWN_SHARES,
    DEFAULT_FIXED_RATE,
    DEFAULT_OVERHEAD_TIERS,
)

__all__ = [
    # Classes
    "SizeBasedOverheadCalculator",
    # Models
    "OverheadBreakdown",
    "OverheadMethod",
    "OverheadRateResult",
    "OverheadTier",
    "SizeBasedOverheadResult",
    # Exceptions
    "OverheadConfigurationError",
    # Functions
    "calculate_size_based_overhead",
    "ease_in",
    "get_size_based_overhead_rate",
    # Constants
    "BOUNDARY_TOLERANCE",
    "BREAKDOWN_SHARES",
    "DEFAULT_FIXED_RATE",
    "DEFAULT_OVERHEAD_TIERS",
]
