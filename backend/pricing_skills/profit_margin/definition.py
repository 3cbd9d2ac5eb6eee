"""
Risk-Adjusted Profit Margin - Data Definitions

Configuration and result models for blending a base profit margin
with the project's risk profile.

Author: Pricing Engine Team
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from pricing_skills.risk_assessment import RiskLevel


class MarginBound(str, Enum):
    """Which configured bound a clamped margin hit."""
    MINIMUM = "minimum"
    MAXIMUM = "maximum"


class SecondaryTrigger(BaseModel):
    """
    Additive margin adjustment fired by a group of factor scores.

    A factor belongs to the trigger when its category name contains one
    of ``category_keywords`` or its own name contains one of
    ``name_keywords`` (case-insensitive). The trigger fires when the
    average score of its factors exceeds ``threshold`` and adds
    ``base_margin x (multiplier - 1)``.
    """

    name: str = Field(..., description="Machine name, e.g. 'technical_complexity'.")
    label: str = Field(..., description="Human readable label.")
    category_keywords: Tuple[str, ...] = Field(default_factory=tuple)
    name_keywords: Tuple[str, ...] = Field(default_factory=tuple)
    threshold: float = Field(..., description="Average factor score that must be exceeded.")
    multiplier: float = Field(..., description="Multiplier whose excess over 1 is added.")


class RiskLevelMultiplier(BaseModel):
    """Margin multiplier for one risk level."""

    multiplier: float
    description: str = ""


class ProfitMarginConfig(BaseModel):
    """
    Margin blending configuration.

    Values are deliberately unconstrained here; use
    validate_margin_config() to obtain structured errors.
    """

    base_margin: float = Field(default=20.0, description="Default base margin in percent.")
    min_margin: float = Field(default=5.0, description="Lowest allowed adjusted margin.")
    max_margin: float = Field(default=35.0, description="Highest allowed adjusted margin.")
    risk_multipliers: Dict[RiskLevel, RiskLevelMultiplier] = Field(default_factory=dict)
    triggers: List[SecondaryTrigger] = Field(default_factory=list)


class TriggerAdjustment(BaseModel):
    """Evaluation of one secondary trigger."""

    name: str
    label: str
    factor_score: Optional[float] = Field(
        default=None,
        description="Average score of matching factors; None when none matched."
    )
    threshold: float
    multiplier: float
    triggered: bool = False
    adjustment: float = Field(default=0.0, description="Margin points added.")


class ProfitMarginResult(BaseModel):
    """Outcome of a risk-adjusted margin calculation."""

    base_profit_margin: float
    adjusted_profit_margin: float
    margin_adjustment: float = Field(description="adjusted - base, in margin points.")
    adjustment_percentage: float = Field(description="Relative change versus base, in percent.")
    risk_level: RiskLevel
    risk_level_multiplier: float
    risk_level_adjustment: float = Field(description="Points contributed by the level multiplier.")
    trigger_adjustments: List[TriggerAdjustment] = Field(default_factory=list)
    explanation: str = ""
    warnings: List[str] = Field(default_factory=list)
    clamped_bound: Optional[MarginBound] = None

    @property
    def triggered(self) -> List[TriggerAdjustment]:
        return [t for t in self.trigger_adjustments if t.triggered]


class MarginConfigValidation(BaseModel):
    """Structured result of validate_margin_config()."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)


# Custom Exceptions

class MarginConfigurationError(ValueError):
    """A calculation was attempted with an invalid configuration."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Invalid profit margin configuration: " + "; ".join(errors))
