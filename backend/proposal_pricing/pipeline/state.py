"""
Pricing graph state (PricingState) and helpers.
"""

import operator
from typing import Annotated, TypedDict
from uuid import uuid4

from pricing_skills.confidence_scoring import ConfidenceScoringResult, UncertaintyRange
from pricing_skills.contingency import ContingencyRecommendation
from pricing_skills.market_analysis import BenchmarkResult, MarketConditions, PackageRecommendation
from pricing_skills.profit_margin import ProfitMarginResult
from pricing_skills.risk_assessment import RiskScoringResult
from pricing_skills.risk_factor_scorer import RiskFactorInput
from pricing_skills.size_based_overhead import SizeBasedOverheadResult

from proposal_pricing.schemas.requests import EnhancedCalculationInput
from proposal_pricing.schemas.responses import CalculationMethod, CalculationWarning, StageEvent


class PricingState(TypedDict):
    calculation_id: str
    request: EnhancedCalculationInput
    mode: CalculationMethod
    # Validation
    risk_inputs: dict[str, RiskFactorInput]
    # Risk
    risk_result: RiskScoringResult | None
    fallback_used: bool
    risk_adjustment: float
    # Overhead
    overhead_result: SizeBasedOverheadResult | None
    overhead_amount: float
    overhead_percentage: float
    # Profit
    margin_result: ProfitMarginResult | None
    profit_margin: float
    profit_amount: float
    cost_with_profit: float
    # Market
    market_conditions: MarketConditions | None
    market_benchmark: BenchmarkResult | None
    package_recommendations: PackageRecommendation | None
    win_probability: float
    # Contingency
    contingency_result: ContingencyRecommendation | None
    contingency_rate: float
    contingency_amount: float
    total_cost: float
    # Confidence
    confidence_result: ConfidenceScoringResult | None
    uncertainty_range: UncertaintyRange | None
    # Accumulated by every stage
    warnings: Annotated[list[CalculationWarning], operator.add]
    stage_events: Annotated[list[StageEvent], operator.add]
    errors: Annotated[list[str], operator.add]


def new_calculation_id() -> str:
    return uuid4().hex


def create_initial_state(request: EnhancedCalculationInput, calculation_id: str | None = None) -> dict:
    """Build the input state for one pricing run; mode is fixed here."""
    return {
        "calculation_id": calculation_id or new_calculation_id(),
        "request": request,
        "mode": "enhanced" if request.is_enhanced else "legacy",
        "risk_inputs": {},
        "risk_result": None,
        "fallback_used": False,
        "risk_adjustment": 0.0,
        "overhead_result": None,
        "overhead_amount": 0.0,
        "overhead_percentage": request.overhead_percentage,
        "margin_result": None,
        "profit_margin": request.profit_margin,
        "profit_amount": 0.0,
        "cost_with_profit": request.base_cost,
        "market_conditions": None,
        "market_benchmark": None,
        "package_recommendations": None,
        "win_probability": 0.0,
        "contingency_result": None,
        "contingency_rate": 0.0,
        "contingency_amount": 0.0,
        "total_cost": request.base_cost,
        "confidence_result": None,
        "uncertainty_range": None,
        "warnings": [],
        "stage_events": [],
        "errors": [],
    }
