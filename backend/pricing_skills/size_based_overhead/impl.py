"""
Size-Based Overhead - Implementation

Maps project size to an overhead rate with:
- Tiered lookup (step function over tier upper bounds)
- Smooth scaling (eased interpolation between neighbouring tiers)
- Fixed fallback for empty configurations and non-positive sizes
- Bucketed breakdown of the resulting amount

Tier configurations are immutable; use with_tiers() to derive a
calculator with different tiers.

Author: Pricing Engine Team
"""

import logging
import math
from typing import Iterable, Optional, Tuple

from .definition import (
    OverheadBreakdown,
    OverheadConfigurationError,
    OverheadMethod,
    OverheadRateResult,
    OverheadTier,
    SizeBasedOverheadResult,
)

logger = logging.getLogger(__name__)


DEFAULT_OVERHEAD_TIERS: Tuple[OverheadTier, ...] = (
    OverheadTier(max_size=50_000, rate=0.18, description="Small projects (<$50k)"),
    OverheadTier(max_size=200_000, rate=0.16, description="Medium projects ($50k-$200k)"),
    OverheadTier(max_size=500_000, rate=0.14, description="Large projects ($200k-$500k)"),
    OverheadTier(max_size=1_000_000, rate=0.12, description="Very large projects ($500k-$1M)"),
    OverheadTier(max_size=math.inf, rate=0.10, description="Mega projects (>$1M)"),
)

DEFAULT_FIXED_RATE = 0.15

# Bucket shares of an overhead amount; "other" takes the rounding remainder
BREAKDOWN_SHARES = {
    "administrative": 0.45,
    "equipment": 0.30,
    "insurance": 0.15,
    "other": 0.10,
}

# Sizes this close to a tier boundary resolve to the boundary's rate
BOUNDARY_TOLERANCE = 1.0

LARGE_PROJECT_THRESHOLD = 10_000_000
LOW_RATE_THRESHOLD = 0.05


def ease_in(t: float) -> float:
    """Quadratic ease-in on [0, 1]."""
    return t * t


class SizeBasedOverheadCalculator:
    """
    Overhead rate lookup over ordered size tiers.

    Usage:
        calculator = SizeBasedOverheadCalculator()
        result = calculator.calculate(base_cost=75_000)
        print(result.overhead_rate, result.method)
    """

    def __init__(
        self,
        tiers: Optional[Iterable[OverheadTier]] = None,
        default_rate: float = DEFAULT_FIXED_RATE,
    ):
        """
        Args:
            tiers: Tier configuration; defaults to DEFAULT_OVERHEAD_TIERS.
                Sorted ascending by max_size on construction.
            default_rate: Rate used when the configuration is empty.

        Raises:
            OverheadConfigurationError: On duplicate tier bounds or an
                invalid default rate.
        """
        source = DEFAULT_OVERHEAD_TIERS if tiers is None else tiers
        ordered = tuple(sorted(source, key=lambda t: t.max_size))
        bounds = [t.max_size for t in ordered]
        if len(set(bounds)) != len(bounds):
            raise OverheadConfigurationError("tier max_size values must be unique")
        if not 0 <= default_rate <= 1:
            raise OverheadConfigurationError(f"default rate {default_rate} outside [0, 1]")

        self._tiers = ordered
        self.default_rate = default_rate

    @property
    def tiers(self) -> Tuple[OverheadTier, ...]:
        return self._tiers

    def with_tiers(self, tiers: Iterable[OverheadTier]) -> "SizeBasedOverheadCalculator":
        """Return a new calculator using ``tiers``."""
        return SizeBasedOverheadCalculator(tiers=tiers, default_rate=self.default_rate)

    def calculate_rate(self, project_size: float, smooth: bool = True) -> OverheadRateResult:
        """
        Select the overhead rate for ``project_size``.

        Args:
            project_size: Project size in currency units.
            smooth: Interpolate between tiers instead of stepping.
        """
        if not self._tiers:
            return OverheadRateResult(
                rate=self.default_rate,
                method=OverheadMethod.FIXED,
                warnings=["No overhead tiers configured, using default rate"],
            )

        if project_size <= 0:
            smallest = self._tiers[0]
            return OverheadRateResult(
                rate=smallest.rate,
                tier=smallest,
                method=OverheadMethod.FIXED,
                warnings=["Project size must be greater than 0"],
            )

        warnings = []
        if project_size > LARGE_PROJECT_THRESHOLD:
            warnings.append(
                "Project size exceeds typical range - consider manual rate adjustment"
            )

        if smooth:
            rate, tier = self._smooth_rate(project_size)
            method = OverheadMethod.SMOOTH
        else:
            tier = self._tier_for(project_size)
            rate = tier.rate
            method = OverheadMethod.TIERED

        if rate < LOW_RATE_THRESHOLD:
            warnings.append("Overhead rate is very low - verify calculation accuracy")

        return OverheadRateResult(rate=rate, tier=tier, method=method, warnings=warnings)

    def calculate(
        self,
        base_cost: float,
        project_size: Optional[float] = None,
        use_smooth_scaling: bool = True,
    ) -> SizeBasedOverheadResult:
        """
        Apply the size-based rate to ``base_cost``.

        Args:
            base_cost: Cost the overhead is charged on.
            project_size: Size used for the tier lookup; defaults to base_cost.
            use_smooth_scaling: Interpolate between tiers.
        """
        size = base_cost if project_size is None else project_size
        selected = self.calculate_rate(size, smooth=use_smooth_scaling)
        amount = max(0.0, base_cost) * selected.rate

        logger.debug(
            f"Overhead for size {size:,.2f}: rate={selected.rate:.4f} "
            f"method={selected.method.value}"
        )
        return SizeBasedOverheadResult(
            project_size=size,
            overhead_rate=selected.rate,
            overhead_percentage=selected.rate * 100,
            overhead_amount=amount,
            method=selected.method,
            tier=selected.tier,
            breakdown=self.breakdown(amount),
            warnings=selected.warnings,
        )

    @staticmethod
    def breakdown(amount: float) -> OverheadBreakdown:
        """Split ``amount`` into buckets that sum exactly to it."""
        administrative = round(amount * BREAKDOWN_SHARES["administrative"], 2)
        equipment = round(amount * BREAKDOWN_SHARES["equipment"], 2)
        insurance = round(amount * BREAKDOWN_SHARES["insurance"], 2)
        allocated = administrative + equipment + insurance
        return OverheadBreakdown(
            administrative=administrative,
            equipment=equipment,
            insurance=insurance,
            other=amount - allocated,
        )

    def _tier_for(self, size: float) -> OverheadTier:
        for tier in self._tiers:
            if size < tier.max_size:
                return tier
        return self._tiers[-1]

    def _smooth_rate(self, size: float) -> Tuple[float, OverheadTier]:
        tiers = self._tiers
        upper_index = next(
            (i for i, tier in enumerate(tiers) if size < tier.max_size),
            len(tiers) - 1,
        )
        upper = tiers[upper_index]
        if upper_index == 0:
            return upper.rate, upper

        lower = tiers[upper_index - 1]
        if abs(size - lower.max_size) < BOUNDARY_TOLERANCE:
            return upper.rate, upper
        if math.isinf(upper.max_size):
            # Nothing to interpolate towards past the last finite bound
            return lower.rate, upper

        span = upper.max_size - lower.max_size
        t = max(0.0, min(1.0, (size - lower.max_size) / span))
        return lower.rate + (upper.rate - lower.rate) * ease_in(t), upper


def get_size_based_overhead_rate(
    project_size: float,
    smooth: bool = True,
    tiers: Optional[Iterable[OverheadTier]] = None,
) -> float:
    """Overhead rate for ``project_size`` using the given or default tiers."""
    return SizeBasedOverheadCalculator(tiers=tiers).calculate_rate(project_size, smooth).rate


def calculate_size_based_overhead(
    base_cost: float,
    project_size: Optional[float] = None,
    smooth: bool = True,
    tiers: Optional[Iterable[OverheadTier]] = None,
) -> SizeBasedOverheadResult:
    """Convenience wrapper around SizeBasedOverheadCalculator.calculate()."""
    return SizeBasedOverheadCalculator(tiers=tiers).calculate(
        base_cost, project_size=project_size, use_smooth_scaling=smooth
    )
