"""
Unit tests for recommend_contingency().
"""

import pytest

from pricing_skills.contingency import (
    DEFAULT_RECOMMENDATION,
    MAX_CONTINGENCY_RATE,
    MIN_CONTINGENCY_RATE,
    recommend_contingency,
)
from pricing_skills.market_analysis import MarketConditions
from pricing_skills.risk_assessment import RiskAssessmentEngine, build_fallback_assessment
from pricing_skills.risk_factor_scorer import RiskFactorInput


def conditions(trend=0.03, labor=80, regional=1.0, condition=75):
    return MarketConditions(
        region="Midwest",
        material_type="glass",
        material_cost_trend=trend,
        labor_availability_score=labor,
        regional_adjustment_factor=regional,
        market_condition_score=condition,
    )


class TestBaseline:
    def test_baseline_without_market(self):
        result = recommend_contingency(build_fallback_assessment(3))

        assert result.recommended_rate == 0.10
        assert result.adjustments == {}
        assert result.recommendations == [DEFAULT_RECOMMENDATION]

    def test_calm_market_adds_nothing(self):
        result = recommend_contingency(build_fallback_assessment(1), conditions())
        assert result.recommended_rate == 0.05
        assert result.recommended_percentage == pytest.approx(5.0)


class TestMarketSignals:
    def test_each_signal_adds_its_share(self):
        result = recommend_contingency(
            build_fallback_assessment(3),
            conditions(trend=0.15, labor=45, regional=1.2, condition=40),
        )

        assert result.adjustments["material_cost_trend"] == pytest.approx(0.05)
        assert result.adjustments["labor_availability"] == pytest.approx(0.02)
        assert result.adjustments["regional_adjustment"] == pytest.approx(0.05)
        assert result.adjustments["market_condition"] == pytest.approx(0.02)
        assert result.recommended_rate == pytest.approx(0.24)
        assert result.recommendations == [
            "Material costs are rising rapidly; consider locking in prices early.",
            "Labor availability is low; plan for potential delays or higher costs.",
            "Market conditions are challenging; consider additional contingency.",
        ]

    def test_rate_is_clamped_to_maximum(self):
        result = recommend_contingency(build_fallback_assessment(9), conditions(trend=0.5))

        assert result.recommended_rate == MAX_CONTINGENCY_RATE
        assert "clamped to 35.0%" in result.explanation

    @pytest.mark.parametrize("legacy", [0, 2, 4, 6, 8, 10])
    def test_rate_always_within_bounds(self, legacy):
        result = recommend_contingency(
            build_fallback_assessment(legacy),
            conditions(trend=0.4, labor=0, regional=2.0, condition=0),
        )
        assert MIN_CONTINGENCY_RATE <= result.recommended_rate <= MAX_CONTINGENCY_RATE


class TestFactorRecommendations:
    def test_high_scoring_factors_get_targeted_advice(self):
        risk = RiskAssessmentEngine().assess({
            "Weather Delays": RiskFactorInput(value="Critical"),
            "Material Lead Times": RiskFactorInput(value=90),
        })

        result = recommend_contingency(risk)

        assert "Consider weather protection measures for seasonal risks." in result.recommendations
        assert "Identify alternative suppliers for material risk mitigation." in result.recommendations
        assert DEFAULT_RECOMMENDATION not in result.recommendations
