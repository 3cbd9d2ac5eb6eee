from pydantic import BaseModel, Field

from pricing_skills.confidence_scoring import ConfidenceFactors
from pricing_skills.risk_factor_scorer import RiskFactorInput


class EnhancedCalculationInput(BaseModel):
    """Pricing request for one proposal."""
    base_cost: float = Field(..., ge=0, description="Direct project cost before overhead and profit")
    overhead_percentage: float = Field(default=15.0, ge=0, le=100, description="Fixed overhead used when size-based overhead is off")
    profit_margin: float = Field(default=20.0, ge=0, le=100, description="Base profit margin in percent")
    use_size_based_overhead: bool = Field(default=True, description="Derive overhead from project size tiers")
    use_smooth_scaling: bool = Field(default=True, description="Interpolate between overhead tiers")
    project_type: str | None = Field(default=None, description="Project type used to filter market data")
    square_footage: float | None = Field(default=None, ge=0, description="Project area, enables cost per square foot")
    building_height: float | None = Field(default=None, ge=0, description="Building height in feet")
    region: str | None = Field(default=None, description="Region for market conditions and benchmarking")
    material_type: str | None = Field(default=None, description="Primary material for market conditions")
    risk_factor_inputs: dict[str, RiskFactorInput] | None = Field(
        default=None,
        description="Risk factor name -> raw input; any entry selects the enhanced pipeline",
    )
    confidence_factors: ConfidenceFactors | None = Field(default=None, description="Sparse 0-100 confidence inputs")
    risk_score: float | None = Field(default=None, ge=0, le=10, description="Legacy scalar risk score")

    @property
    def is_enhanced(self) -> bool:
        return bool(self.risk_factor_inputs)
