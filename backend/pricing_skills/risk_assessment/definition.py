"""
Risk Assessment - Data Definitions

Pydantic models for multi-factor risk aggregation and the catalog
provider boundary.

Author: Pricing Engine Team
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, Field

from pricing_skills.risk_factor_scorer import (
    FactorScore,
    RiskCategoryDefinition,
    RiskFactorDefinition,
)


class RiskLevel(str, Enum):
    """
    Overall risk bands, ascending.

    - LOW: total score below 25
    - MEDIUM: 25 to below 50
    - HIGH: 50 to below 75
    - CRITICAL: 75 and above
    """
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CategoryScore(BaseModel):
    """Aggregated score of one category over the factors that had input."""

    category_name: str = Field(description="Category name.")
    weight: float = Field(ge=0, description="Category weight in the total.")
    score: float = Field(ge=0, le=100, description="Weighted average factor score.")
    weighted_score: float = Field(ge=0, description="score x weight / 100.")
    factor_count: int = Field(ge=0, description="Factors that contributed.")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RiskScoringResult(BaseModel):
    """
    Complete output of a risk assessment.

    ``is_fallback`` marks a result synthesised from the legacy scalar
    score because the factor catalog was unavailable.
    """

    total_risk_score: float = Field(
        ...,
        ge=0,
        le=100,
        description="Weighted overall risk score (0-100)."
    )
    risk_level: RiskLevel = Field(..., description="Band of the total score.")
    confidence: float = Field(
        ...,
        ge=0,
        le=1,
        description="Share of the catalog that received usable input."
    )
    category_scores: List[CategoryScore] = Field(default_factory=list)
    factor_scores: List[FactorScore] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    contingency_rate: float = Field(
        ...,
        ge=0,
        le=1,
        description="Baseline contingency for the risk level."
    )
    timestamp: datetime = Field(default_factory=_utcnow)
    factors_processed: int = Field(default=0, ge=0)
    factors_available: int = Field(default=0, ge=0)
    warnings: List[str] = Field(default_factory=list)
    is_fallback: bool = Field(default=False)

    def to_summary(self) -> str:
        """One-line summary for logs."""
        return (
            f"Risk {self.total_risk_score:.1f}/100 ({self.risk_level.value}) | "
            f"factors {self.factors_processed}/{self.factors_available} | "
            f"contingency {self.contingency_rate:.0%}"
        )


@runtime_checkable
class RiskFactorCatalog(Protocol):
    """Read-only lookup of risk categories and factors."""

    def list_categories(self) -> Sequence[RiskCategoryDefinition]:
        ...

    def get_factor(self, name: str) -> Optional[RiskFactorDefinition]:
        ...


# Custom Exceptions

class RiskAssessmentError(Exception):
    """Base error for the risk assessment skill."""
    pass


class RiskCatalogUnavailableError(RiskAssessmentError):
    """The factor catalog could not be read."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Risk factor catalog unavailable: {reason}")
