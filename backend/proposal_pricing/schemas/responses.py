from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from pricing_skills.confidence_scoring import ConfidenceScoringResult, UncertaintyRange
from pricing_skills.contingency import ContingencyRecommendation
from pricing_skills.market_analysis import BenchmarkResult, MarketConditions, PackageRecommendation
from pricing_skills.risk_assessment import RiskScoringResult
from pricing_skills.size_based_overhead import OverheadBreakdown, OverheadTier


CalculationMethod = Literal["enhanced", "legacy"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WarningKind(str, Enum):
    INPUT_VALIDATION = "input_validation"
    STAGE_DEGRADATION = "stage_degradation"


class StageStatus(str, Enum):
    COMPLETED = "completed"
    DEGRADED = "degraded"
    FAILED = "failed"


class CalculationWarning(BaseModel):
    """A recoverable problem surfaced on the result."""
    kind: WarningKind
    stage: str = Field(description="Pipeline stage that produced the warning")
    message: str


class StageEvent(BaseModel):
    """One executed pipeline stage."""
    name: str
    timestamp: datetime = Field(default_factory=utc_now)
    duration_ms: float = Field(default=0.0, ge=0)
    status: StageStatus = StageStatus.COMPLETED


class AuditTrail(BaseModel):
    """Ordered execution trace of a calculation."""
    calculation_sequence: list[str] = Field(default_factory=list, description="Stage names in execution order")
    stage_events: list[StageEvent] = Field(default_factory=list)
    risk_assessment_timestamp: datetime | None = None
    calculation_timestamp: datetime = Field(default_factory=utc_now)


class EnhancedCalculationResult(BaseModel):
    """Priced proposal with every sub-result and its audit trail."""
    # Amounts
    base_cost: float
    overhead_amount: float
    overhead_percentage: float
    profit_amount: float
    profit_margin: float
    risk_adjustment: float = 0.0
    contingency_amount: float = 0.0
    contingency_rate: float = 0.0
    total_cost: float

    # Mode and risk
    calculation_method: CalculationMethod
    risk_assessment: RiskScoringResult | None = None

    # Profit margin
    is_risk_adjusted_profit_margin: bool = False
    profit_margin_adjustment: float = 0.0

    # Overhead
    is_size_based_overhead: bool = False
    overhead_calculation_method: str = "fixed"
    overhead_tier: OverheadTier | None = None
    overhead_breakdown: OverheadBreakdown | None = None

    # Market
    market_conditions: MarketConditions | None = None
    market_benchmark: BenchmarkResult | None = None
    package_recommendations: PackageRecommendation | None = None
    contingency_recommendation: ContingencyRecommendation | None = None

    # Confidence
    is_confidence_scored: bool = False
    confidence_assessment: ConfidenceScoringResult | None = None
    uncertainty_range: UncertaintyRange

    # Scoring
    win_probability: float = Field(ge=0, le=100)
    cost_per_square_foot: float = 0.0
    confidence: float = Field(default=0.0, ge=0, le=1, description="Risk assessment confidence, 0 in legacy mode")

    # Trace
    calculation_id: str
    execution_time: float = Field(description="Wall-clock duration in milliseconds")
    audit_trail: AuditTrail

    # Diagnostics
    warnings: list[str] = Field(default_factory=list)
    warning_details: list[CalculationWarning] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list, description="Stage failures recovered with defaults")

    @property
    def calculation_sequence(self) -> list[str]:
        return self.audit_trail.calculation_sequence
