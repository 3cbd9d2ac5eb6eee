"""
Confidence Scoring - Data Definitions

Inputs and outputs for scoring how trustworthy an estimate is and the
price uncertainty band derived from it.

Author: Pricing Engine Team
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ConfidenceLevel(str, Enum):
    """Confidence bands, ascending."""
    VERY_LOW = "VERY_LOW"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class ConfidenceFactors(BaseModel):
    """
    Sparse 0-100 confidence inputs; every field is optional.

    Out-of-range values are accepted here and clamped by the scorer
    with a warning. ``variance_from_historical``, ``scope_complexity``,
    ``technical_uncertainty`` and ``market_volatility`` are adverse:
    higher values mean less confidence.
    """

    data_completeness: Optional[float] = Field(default=None, description="Share of required estimate data available.")
    data_accuracy: Optional[float] = Field(default=None, description="Trust in the accuracy of the inputs.")
    data_recency: Optional[float] = Field(default=None, description="How current the inputs are.")
    historical_accuracy: Optional[float] = Field(default=None, description="Past estimate accuracy for similar work.")
    estimate_frequency: Optional[float] = Field(default=None, description="How often this kind of work is estimated.")
    variance_from_historical: Optional[float] = Field(default=None, description="Deviation from historical norms.")
    scope_complexity: Optional[float] = Field(default=None, description="Complexity of the project scope.")
    technical_uncertainty: Optional[float] = Field(default=None, description="Open technical questions.")
    requirement_clarity: Optional[float] = Field(default=None, description="Clarity of the client requirements.")
    market_data_age: Optional[float] = Field(default=None, description="Freshness of the market data.")
    market_volatility: Optional[float] = Field(default=None, description="Current market volatility.")
    supplier_reliability: Optional[float] = Field(default=None, description="Reliability of supplier quotes.")

    def supplied(self) -> Dict[str, float]:
        """Only the factors that were actually provided."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class ConfidenceFactorScore(BaseModel):
    """Contribution of one factor to the overall score."""

    name: str
    raw_value: float
    effective_value: float = Field(ge=0, le=100, description="Clamped and, for adverse factors, inverted.")
    weight: float = Field(ge=0)
    inverted: bool = False


class UncertaintyRange(BaseModel):
    """Band of +/- multiplier around the price."""

    base_price: float
    lower_bound: float
    upper_bound: float
    multiplier: float = Field(ge=0, description="Half-width of the band as a fraction.")
    percentage: float = Field(ge=0, description="Half-width of the band in percent.")


class ConfidenceScoringResult(BaseModel):
    """Overall confidence assessment."""

    overall_score: float = Field(ge=0, le=100)
    confidence_level: ConfidenceLevel
    level_description: str = ""
    factor_scores: List[ConfidenceFactorScore] = Field(default_factory=list)
    factors_supplied: int = Field(default=0, ge=0)
    uncertainty_range: UncertaintyRange
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ConfidenceConfig(BaseModel):
    """Weights, level thresholds and uncertainty multipliers."""

    weights: Dict[str, float]
    thresholds: Dict[ConfidenceLevel, float] = Field(
        description="Inclusive upper score bound per level (VERY_HIGH has none)."
    )
    uncertainty_multipliers: Dict[ConfidenceLevel, float]


class ConfidenceConfigValidation(BaseModel):
    """Structured result of validate_confidence_config()."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
