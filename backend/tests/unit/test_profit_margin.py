"""
Unit tests for RiskAdjustedProfitMarginCalculator.

Tests level multipliers, secondary triggers, clamping and
configuration validation.
"""

import pytest

from pricing_skills.profit_margin import (
    MarginBound,
    MarginConfigurationError,
    RiskAdjustedProfitMarginCalculator,
    RiskLevelMultiplier,
    calculate_risk_adjusted_margin,
    default_margin_config,
    validate_margin_config,
)
from pricing_skills.risk_assessment import CONTINGENCY_RATES, RiskLevel, RiskScoringResult
from pricing_skills.risk_factor_scorer import DataType, FactorScore, ScoringType


def factor(name: str, category: str, score: float) -> FactorScore:
    return FactorScore(
        factor_name=name,
        category_name=category,
        weight=25,
        input_value="test",
        calculated_score=score,
        weighted_score=score * 25 / 100,
        scoring_method=ScoringType.CATEGORICAL,
        data_type=DataType.CATEGORICAL,
    )


def assessment(level: RiskLevel, *factors: FactorScore) -> RiskScoringResult:
    return RiskScoringResult(
        total_risk_score={RiskLevel.LOW: 10, RiskLevel.MEDIUM: 40, RiskLevel.HIGH: 60, RiskLevel.CRITICAL: 90}[level],
        risk_level=level,
        confidence=0.5,
        factor_scores=list(factors),
        contingency_rate=CONTINGENCY_RATES[level],
    )


@pytest.fixture
def calculator():
    return RiskAdjustedProfitMarginCalculator()


class TestLevelMultipliers:
    """Without triggers the margin is base x multiplier exactly."""

    @pytest.mark.parametrize(
        "level,expected",
        [
            (RiskLevel.LOW, 16.0),
            (RiskLevel.MEDIUM, 20.0),
            (RiskLevel.HIGH, 26.0),
            (RiskLevel.CRITICAL, 32.0),
        ],
    )
    def test_multiplier_only(self, calculator, level, expected):
        result = calculator.calculate(assessment(level), base_margin=20)
        assert result.adjusted_profit_margin == 20 * default_margin_config().risk_multipliers[level].multiplier
        assert result.adjusted_profit_margin == pytest.approx(expected)
        assert result.triggered == []
        assert result.warnings == []

    def test_default_base_margin_from_config(self, calculator):
        result = calculator.calculate(assessment(RiskLevel.MEDIUM))
        assert result.base_profit_margin == 20.0

    def test_adjustment_fields(self, calculator):
        result = calculator.calculate(assessment(RiskLevel.HIGH), base_margin=20)
        assert result.margin_adjustment == pytest.approx(6.0)
        assert result.adjustment_percentage == pytest.approx(30.0)
        assert result.risk_level_multiplier == 1.3


class TestSecondaryTriggers:
    """Tests for keyword-matched secondary adjustments."""

    def test_technical_complexity_adds_fifteen_percent_of_base(self, calculator):
        risk = assessment(RiskLevel.HIGH, factor("Project Complexity", "Technical Risks", 80))
        result = calculator.calculate(risk, base_margin=20)

        assert result.adjusted_profit_margin == pytest.approx(26 + 3)
        assert [t.name for t in result.triggered] == ["technical_complexity"]
        assert "Technical complexity score 80 exceeds 70" in result.explanation

    def test_threshold_is_exclusive(self, calculator):
        risk = assessment(RiskLevel.MEDIUM, factor("Project Complexity", "Technical Risks", 70))
        result = calculator.calculate(risk, base_margin=20)
        assert result.triggered == []

    def test_trigger_score_is_average_of_matches(self, calculator):
        risk = assessment(
            RiskLevel.MEDIUM,
            factor("Weather Delays", "Schedule Risks", 100),
            factor("Permit Delays", "Schedule Risks", 30),
        )
        result = calculator.calculate(risk, base_margin=20)

        timeline = next(t for t in result.trigger_adjustments if t.name == "timeline_pressure")
        assert timeline.factor_score == pytest.approx(65)
        assert timeline.triggered
        assert timeline.adjustment == pytest.approx(4.0)

    def test_name_keywords_match_outside_category(self, calculator):
        risk = assessment(RiskLevel.MEDIUM, factor("Economic Conditions", "Financial Risks", 70))
        result = calculator.calculate(risk, base_margin=20)
        assert [t.name for t in result.triggered] == ["market_conditions"]
        assert result.adjusted_profit_margin == pytest.approx(21.0)

    def test_triggers_are_order_independent(self):
        risk = assessment(
            RiskLevel.MEDIUM,
            factor("Project Complexity", "Technical Risks", 90),
            factor("Deadline Pressure", "Schedule Risks", 90),
            factor("Client Relationship", "Client Risks", 90),
            factor("Market Competition", "Market Risks", 90),
        )
        config = default_margin_config()
        reversed_config = config.model_copy(update={"triggers": list(reversed(config.triggers))})

        forward = RiskAdjustedProfitMarginCalculator(config).calculate(risk, base_margin=10)
        backward = RiskAdjustedProfitMarginCalculator(reversed_config).calculate(risk, base_margin=10)

        assert forward.adjusted_profit_margin == backward.adjusted_profit_margin
        assert len(forward.triggered) == 4


class TestClamping:
    """The adjusted margin always lies within [min, max]."""

    def test_clamps_to_maximum_with_warning(self, calculator):
        risk = assessment(
            RiskLevel.CRITICAL,
            factor("Weather Delays", "Schedule Risks", 90),
            factor("Project Complexity", "Technical Risks", 80),
        )
        result = calculator.calculate(risk, base_margin=20)

        assert result.adjusted_profit_margin == 35.0
        assert result.clamped_bound == MarginBound.MAXIMUM
        assert result.warnings == [
            "Adjusted margin (39.0%) is above the maximum margin (35%). Using maximum margin."
        ]

    def test_clamps_to_minimum_with_warning(self, calculator):
        result = calculator.calculate(assessment(RiskLevel.LOW), base_margin=5)

        assert result.adjusted_profit_margin == 5.0
        assert result.clamped_bound == MarginBound.MINIMUM
        assert result.warnings == [
            "Adjusted margin (4.0%) is below the minimum margin (5%). Using minimum margin."
        ]

    @pytest.mark.parametrize("base", [0, 3, 10, 20, 30, 60, 100])
    @pytest.mark.parametrize("level", list(RiskLevel))
    def test_result_always_within_bounds(self, calculator, base, level):
        risk = assessment(level, factor("Project Complexity", "Technical Risks", 95))
        result = calculator.calculate(risk, base_margin=base)
        assert 5.0 <= result.adjusted_profit_margin <= 35.0


class TestConfigValidation:
    """Tests for validate_margin_config()."""

    def test_default_config_is_valid(self):
        validation = validate_margin_config(default_margin_config())
        assert validation.is_valid
        assert validation.errors == []

    def test_min_above_max(self):
        config = default_margin_config().model_copy(update={"min_margin": 30, "max_margin": 10})
        validation = validate_margin_config(config)
        assert not validation.is_valid
        assert "Minimum margin must be less than maximum margin" in validation.errors

    def test_out_of_range_values(self):
        config = default_margin_config().model_copy(update={"base_margin": 150})
        errors = validate_margin_config(config).errors
        assert "Base margin must be between 0 and 100" in errors
        assert "Base margin must be within the min/max range" in errors

    def test_non_positive_multiplier(self):
        config = default_margin_config()
        config.risk_multipliers[RiskLevel.HIGH] = RiskLevelMultiplier(multiplier=0, description="broken")
        assert "HIGH risk multiplier must be positive" in validate_margin_config(config).errors

    def test_calculate_rejects_invalid_config(self):
        config = default_margin_config().model_copy(update={"min_margin": 40})
        with pytest.raises(MarginConfigurationError):
            calculate_risk_adjusted_margin(assessment(RiskLevel.LOW), config=config)
