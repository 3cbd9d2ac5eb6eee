"""
Size-Based Overhead - Data Definitions

Pydantic models for overhead tiers, rate lookups and the cost
breakdown of an overhead amount.

Author: Pricing Engine Team
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OverheadMethod(str, Enum):
    """How the overhead rate was obtained."""
    FIXED = "fixed"
    TIERED = "tiered"
    SMOOTH = "smooth"


class OverheadTier(BaseModel):
    """
    Overhead rate applied to projects below ``max_size``.

    The last tier of a configuration usually has ``max_size=math.inf``.
    """

    model_config = ConfigDict(frozen=True)

    max_size: float = Field(..., gt=0, description="Exclusive upper bound of project size.")
    rate: float = Field(..., ge=0, le=1, description="Overhead rate as a fraction.")
    description: str = Field(default="", description="Human readable tier label.")


class OverheadRateResult(BaseModel):
    """Rate selected for a project size."""

    rate: float = Field(ge=0, le=1)
    tier: Optional[OverheadTier] = Field(
        default=None,
        description="Tier the size falls in (the upper tier when interpolating)."
    )
    method: OverheadMethod
    warnings: List[str] = Field(default_factory=list)


class OverheadBreakdown(BaseModel):
    """
    Split of an overhead amount into cost buckets.

    ``other`` absorbs the rounding remainder so the buckets always sum
    to the original amount.
    """

    administrative: float
    equipment: float
    insurance: float
    other: float

    @property
    def total(self) -> float:
        return self.administrative + self.equipment + self.insurance + self.other


class SizeBasedOverheadResult(BaseModel):
    """Overhead applied to a base cost."""

    project_size: float
    overhead_rate: float = Field(ge=0, le=1)
    overhead_percentage: float = Field(ge=0, le=100)
    overhead_amount: float = Field(ge=0)
    method: OverheadMethod
    tier: Optional[OverheadTier] = None
    breakdown: OverheadBreakdown
    warnings: List[str] = Field(default_factory=list)

    @property
    def tier_description(self) -> Optional[str]:
        return self.tier.description if self.tier else None


# Custom Exceptions

class OverheadConfigurationError(ValueError):
    """The tier configuration is unusable."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid overhead tier configuration: {reason}")
