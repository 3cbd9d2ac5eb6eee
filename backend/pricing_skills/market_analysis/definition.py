"""
Market Analysis - Data Definitions

Historical market records, benchmark outputs, win probability
estimates, pricing packages and aggregate statistics.

Author: Pricing Engine Team
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MarketDataRecord(BaseModel):
    """One historical price reference point (append-only)."""

    model_config = ConfigDict(frozen=True)

    region: str = Field(..., min_length=1, description="Market region, e.g. 'Northeast'.")
    value: float = Field(..., description="Observed cost per unit.")
    unit: str = Field(default="per_sqft", description="Unit of value.")
    source: str = Field(default="internal", description="Where the figure came from.")
    effective_date: date = Field(..., description="Date the figure applies to.")
    notes: Optional[str] = None
    project_type: Optional[str] = Field(default=None, description="Project type, if known.")


class ProposalRecord(BaseModel):
    """Flattened historical proposal used for statistics."""

    model_config = ConfigDict(frozen=True)

    proposal_id: Optional[str] = None
    status: str = Field(..., description="draft, submitted, won, lost, ...")
    region: Optional[str] = None
    project_type: Optional[str] = None
    total_cost: float = Field(..., ge=0)
    square_footage: Optional[float] = Field(default=None, ge=0)
    profit_margin: Optional[float] = None
    created_at: Optional[date] = None

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower()


class MarketConditions(BaseModel):
    """Market signals for a region and material."""

    region: str
    material_type: str
    material_cost_trend: float = Field(description="Expected material cost change as a fraction.")
    labor_availability_score: float = Field(ge=0, le=100)
    regional_adjustment_factor: float = Field(gt=0)
    market_condition_score: float = Field(ge=0, le=100)
    notes: List[str] = Field(default_factory=list)


class BenchmarkCategory(str, Enum):
    """Where a candidate sits within the market distribution."""
    LOW = "low"
    COMPETITIVE = "competitive"
    HIGH = "high"


class BenchmarkResult(BaseModel):
    """Comparison of a candidate cost per unit against historical data."""

    candidate_value: float
    region: str
    project_type: Optional[str] = None
    market_average: float
    market_median: float
    market_std_dev: float = Field(ge=0, description="Population standard deviation.")
    percentile: float = Field(ge=0, le=100, description="Percentile rank of the candidate.")
    variance_from_average: float = Field(description="Percent difference from the average.")
    category: BenchmarkCategory
    confidence: float = Field(ge=0, le=1)
    sample_size: int = Field(ge=1)
    recent_sample_size: int = Field(ge=0)
    notes: List[str] = Field(default_factory=list)


class WinProbabilityMethod(str, Enum):
    MARKET = "market"
    RISK_ONLY = "risk_only"


class WinProbabilityEstimate(BaseModel):
    """Bounded 0-100 win probability."""

    probability: float = Field(ge=0, le=100)
    method: WinProbabilityMethod
    warnings: List[str] = Field(default_factory=list)


class PricingPackage(BaseModel):
    """One priced proposal variant."""

    name: str
    tier: str = Field(description="good, better or best")
    margin: float
    price: float
    estimated_win_probability: float = Field(ge=0, le=100)
    notes: List[str] = Field(default_factory=list)


class PackageRecommendation(BaseModel):
    """Package variants, or the errors that prevented them."""

    packages: List[PricingPackage] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class TrendBucket(BaseModel):
    """Summary of values in one group."""

    count: int = Field(ge=0)
    average: float
    minimum: float
    maximum: float


class MarketTrends(BaseModel):
    """Historical market values summarised along several axes."""

    overall: Optional[TrendBucket] = None
    by_region: Dict[str, TrendBucket] = Field(default_factory=dict)
    by_project_type: Dict[str, TrendBucket] = Field(default_factory=dict)
    by_month: Dict[str, TrendBucket] = Field(default_factory=dict)


class ProposalStats(BaseModel):
    """Aggregate statistics over historical proposals."""

    total_proposals: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    average_total_cost: Optional[float] = None
    average_cost_per_square_foot: Optional[float] = None
    average_profit_margin: Optional[float] = None
    average_cost_by_status: Dict[str, float] = Field(default_factory=dict)
    average_cost_by_region: Dict[str, float] = Field(default_factory=dict)
    average_cost_by_project_type: Dict[str, float] = Field(default_factory=dict)
    win_rate: Optional[float] = Field(
        default=None,
        description="won / (won + lost) as a percentage; None without decided proposals."
    )


# Custom Exceptions

class MarketAnalysisError(Exception):
    """Base error for the market analysis skill."""
    pass


class InsufficientMarketDataError(MarketAnalysisError):
    """No historical records match the benchmark filters."""

    def __init__(self, region: str, project_type: Optional[str] = None):
        self.region = region
        self.project_type = project_type
        scope = f"region '{region}'"
        if project_type:
            scope += f", project type '{project_type}'"
        super().__init__(f"No historical market data for {scope}")


class MarketDataSourceError(MarketAnalysisError):
    """The historical data collaborator failed."""

    def __init__(self, reason: str, original_error: Optional[Exception] = None):
        self.reason = reason
        self.original_error = original_error
        message = f"Market data source failed: {reason}"
        if original_error is not None:
            message += f" | Caused by: {type(original_error).__name__}: {str(original_error)[:200]}"
        super().__init__(message)
