"""
Contingency Recommendation - Implementation

Pure combination of the risk assessment's baseline contingency with
market signals:

    rate = baseline
         + 0.5 x max(0, material_trend - 0.05)
         + (65 - labor) / 100 x 0.1            when labor < 65
         + max(0, regional_adjustment - 1) x 0.25
         + (60 - condition) / 100 x 0.1        when condition < 60

clamped to [0.05, 0.35].

Author: Pricing Engine Team
"""

from typing import Dict, List, Optional

from pricing_skills.market_analysis import MarketConditions
from pricing_skills.risk_assessment import RiskScoringResult

from .definition import ContingencyRecommendation


MIN_CONTINGENCY_RATE = 0.05
MAX_CONTINGENCY_RATE = 0.35

TREND_BASELINE = 0.05
TREND_SENSITIVITY = 0.5
LABOR_THRESHOLD = 65
LABOR_SENSITIVITY = 0.1
REGIONAL_SENSITIVITY = 0.25
CONDITION_THRESHOLD = 60
CONDITION_SENSITIVITY = 0.1

RAPID_TREND = 0.10
HIGH_FACTOR_SCORE = 60
MAX_FACTOR_RECOMMENDATIONS = 3

DEFAULT_RECOMMENDATION = (
    "No specific high-risk factors identified. Standard contingency applies."
)


def _factor_recommendation(factor_name: str) -> str:
    name = factor_name.lower()
    if "weather" in name:
        return "Consider weather protection measures for seasonal risks."
    if "material" in name:
        return "Identify alternative suppliers for material risk mitigation."
    if "labor" in name:
        return "Plan for labor shortages or secure backup crews."
    return f"Mitigate high risk in: {factor_name}."


def _market_adjustments(conditions: MarketConditions) -> Dict[str, float]:
    adjustments: Dict[str, float] = {}
    trend = max(0.0, conditions.material_cost_trend - TREND_BASELINE) * TREND_SENSITIVITY
    if trend > 0:
        adjustments["material_cost_trend"] = trend
    if conditions.labor_availability_score < LABOR_THRESHOLD:
        adjustments["labor_availability"] = (
            (LABOR_THRESHOLD - conditions.labor_availability_score) / 100 * LABOR_SENSITIVITY
        )
    regional = max(0.0, conditions.regional_adjustment_factor - 1) * REGIONAL_SENSITIVITY
    if regional > 0:
        adjustments["regional_adjustment"] = regional
    if conditions.market_condition_score < CONDITION_THRESHOLD:
        adjustments["market_condition"] = (
            (CONDITION_THRESHOLD - conditions.market_condition_score) / 100 * CONDITION_SENSITIVITY
        )
    return adjustments


def recommend_contingency(
    risk_assessment: RiskScoringResult,
    market_conditions: Optional[MarketConditions] = None,
) -> ContingencyRecommendation:
    """
    Recommend a contingency rate from risk and market signals.

    Args:
        risk_assessment: Supplies the baseline rate and factor scores.
        market_conditions: Optional market signals; without them the
            baseline stands (still clamped).
    """
    baseline = risk_assessment.contingency_rate
    adjustments = _market_adjustments(market_conditions) if market_conditions else {}
    raw_rate = baseline + sum(adjustments.values())
    rate = max(MIN_CONTINGENCY_RATE, min(MAX_CONTINGENCY_RATE, raw_rate))

    recommendations: List[str] = []
    high_factors = sorted(
        (f for f in risk_assessment.factor_scores if f.calculated_score > HIGH_FACTOR_SCORE),
        key=lambda f: f.calculated_score,
        reverse=True,
    )[:MAX_FACTOR_RECOMMENDATIONS]
    for factor in high_factors:
        recommendations.append(_factor_recommendation(factor.factor_name))

    if market_conditions is not None:
        if market_conditions.material_cost_trend > RAPID_TREND:
            recommendations.append(
                "Material costs are rising rapidly; consider locking in prices early."
            )
        if market_conditions.labor_availability_score < LABOR_THRESHOLD:
            recommendations.append(
                "Labor availability is low; plan for potential delays or higher costs."
            )
        if market_conditions.market_condition_score < CONDITION_THRESHOLD:
            recommendations.append(
                "Market conditions are challenging; consider additional contingency."
            )

    if not recommendations:
        recommendations.append(DEFAULT_RECOMMENDATION)

    parts = [
        f"Baseline {baseline:.1%} for {risk_assessment.risk_level.value} risk"
    ]
    for name, value in adjustments.items():
        parts.append(f"+{value:.2%} for {name.replace('_', ' ')}")
    if rate != raw_rate:
        parts.append(f"clamped to {rate:.1%}")
    parts.append(f"recommended contingency {rate:.1%}")

    return ContingencyRecommendation(
        recommended_rate=rate,
        baseline_rate=baseline,
        adjustments=adjustments,
        recommendations=recommendations,
        explanation="; ".join(parts) + ".",
    )
