"""
Unit tests for the risk factor scorer and its formula compiler.

Covers categorical matching, numeric clamping and the constrained
formula language used by numeric factors.
"""

import math

import pytest

from pricing_skills.risk_factor_scorer import (
    CategoricalOption,
    DataType,
    FormulaEvaluationError,
    FormulaSyntaxError,
    RiskFactorDefinition,
    RiskFactorInput,
    RiskFactorScorer,
    ScoringType,
    compile_formula,
    validate_factor_input,
)
from pricing_skills.risk_assessment import DEFAULT_RISK_CATEGORIES, InMemoryRiskFactorCatalog


@pytest.fixture
def scorer():
    return RiskFactorScorer()


@pytest.fixture
def weather_factor():
    return InMemoryRiskFactorCatalog().get_factor("Weather Delays")


@pytest.fixture
def lead_time_factor():
    return InMemoryRiskFactorCatalog().get_factor("Material Lead Times")


def numeric_factor(scoring_type=ScoringType.LINEAR, formula=None, min_value=0.0, max_value=100.0):
    return RiskFactorDefinition(
        name="Test Factor",
        category_name="Test",
        weight=50,
        scoring_type=scoring_type,
        data_type=DataType.NUMERIC,
        min_value=min_value,
        max_value=max_value,
        formula=formula,
    )


class TestFormulaCompiler:
    """Tests for compile_formula()."""

    def test_linear_formula_binds_input_name(self):
        compiled = compile_formula("height * 0.8")
        assert compiled.evaluate(50) == pytest.approx(40.0)
        assert compiled.input_variables == frozenset({"height"})

    def test_clamp_formula(self):
        compiled = compile_formula("clamp((days - 7) * 1.5, 0, 100)")
        assert compiled.evaluate(45) == pytest.approx(57.0)
        assert compiled.evaluate(2) == 0.0
        assert compiled.evaluate(200) == 100.0

    def test_power_is_right_associative(self):
        assert compile_formula("2 ^ 3 ^ 2").evaluate(0) == pytest.approx(512.0)
        assert compile_formula("2 ** 3").evaluate(0) == pytest.approx(8.0)

    def test_unary_minus_binds_looser_than_power(self):
        assert compile_formula("-2 ^ 2").evaluate(0) == pytest.approx(-4.0)

    def test_math_prefix_and_score_assignment(self):
        compiled = compile_formula("score = Math.min(x * 2, 100)")
        assert compiled.evaluate(30) == pytest.approx(60.0)
        assert compiled.evaluate(80) == pytest.approx(100.0)

    def test_bounds_bind_to_factor_range(self):
        compiled = compile_formula("(value - min_value) / (max_value - min_value) * 100")
        assert compiled.evaluate(25, min_value=0, max_value=50) == pytest.approx(50.0)

    def test_missing_bound_raises_evaluation_error(self):
        with pytest.raises(FormulaEvaluationError):
            compile_formula("value / max_value").evaluate(10)

    def test_compiled_formulas_are_cached(self):
        assert compile_formula("x + 1") is compile_formula("x + 1")

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "(x + 1",
            "x + 1)",
            "eval(x)",
            "os.system(x)",
            "x; 1",
            "x +",
            "pow(x)",
            "Math.PI",
        ],
    )
    def test_invalid_formulas_raise_syntax_error(self, text):
        with pytest.raises(FormulaSyntaxError):
            compile_formula(text)

    @pytest.mark.parametrize(
        "text,value",
        [
            ("100 / x", 0),
            ("sqrt(x)", -4),
            ("pow(x, 0.5)", -8),
            ("x ^ 0.5", -8),
        ],
    )
    def test_domain_errors_raise_evaluation_error(self, text, value):
        with pytest.raises(FormulaEvaluationError):
            compile_formula(text).evaluate(value)

    def test_syntax_error_reports_position(self):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            compile_formula("x + $")
        assert exc_info.value.position == 4
        assert "x + $" in str(exc_info.value)


class TestCategoricalScoring:
    """Tests for CATEGORICAL factors."""

    def test_exact_label_is_case_insensitive(self, scorer, weather_factor):
        scored = scorer.score(weather_factor, "high risk (20-30 DAYS)")
        assert scored.score.calculated_score == 75
        assert scored.warnings == []

    def test_unique_prefix_matches(self, scorer, weather_factor):
        scored = scorer.score(weather_factor, "Medium")
        assert scored.score.calculated_score == 50
        assert not scored.degraded

    def test_integer_value_is_option_index(self, scorer, weather_factor):
        assert scorer.score(weather_factor, 4).score.calculated_score == 100
        assert scorer.score(weather_factor, 0).score.calculated_score == 10

    def test_unmatched_value_uses_neutral_score_with_warning(self, scorer, weather_factor):
        scored = scorer.score(weather_factor, "Hurricane season")
        assert scored.score.calculated_score == 50
        assert scored.degraded
        assert "does not match any option" in scored.warnings[0]

    def test_out_of_range_index_uses_neutral_score(self, scorer, weather_factor):
        scored = scorer.score(weather_factor, 9)
        assert scored.score.calculated_score == 50
        assert len(scored.warnings) == 1

    def test_factor_without_options_warns(self, scorer):
        factor = RiskFactorDefinition(
            name="Empty",
            category_name="Test",
            weight=10,
            scoring_type=ScoringType.CATEGORICAL,
            data_type=DataType.CATEGORICAL,
        )
        scored = scorer.score(factor, "anything")
        assert scored.score.calculated_score == 50
        assert "no options configured" in scored.warnings[0]

    def test_weighted_score_uses_factor_weight(self, scorer, weather_factor):
        scored = scorer.score(weather_factor, "Critical")
        assert scored.score.weighted_score == pytest.approx(100 * 35 / 100)


class TestNumericScoring:
    """Tests for LINEAR and EXPONENTIAL factors."""

    def test_formula_is_applied(self, scorer, lead_time_factor):
        scored = scorer.score(lead_time_factor, 45)
        assert scored.score.calculated_score == pytest.approx(57.0)
        assert scored.warnings == []

    def test_numeric_string_is_parsed(self, scorer, lead_time_factor):
        assert scorer.score(lead_time_factor, " 45 ").score.calculated_score == pytest.approx(57.0)

    def test_value_above_range_is_clamped_with_warning(self, scorer, lead_time_factor):
        scored = scorer.score(lead_time_factor, 120)
        assert scored.score.calculated_score == pytest.approx(100.0)
        assert "outside expected range [0, 90], clamped to 90" in scored.warnings[0]

    def test_formula_result_is_clamped_to_score_range(self, scorer):
        factor = numeric_factor(formula="x * 10")
        assert scorer.score(factor, 50).score.calculated_score == 100.0

    def test_boolean_is_rejected_for_numeric_factor(self, scorer, lead_time_factor):
        scored = scorer.score(lead_time_factor, True)
        assert scored.score.calculated_score == 50
        assert "expected a numeric value" in scored.warnings[0]

    def test_non_numeric_string_uses_neutral_score(self, scorer, lead_time_factor):
        scored = scorer.score(lead_time_factor, "soon")
        assert scored.score.calculated_score == 50
        assert scored.degraded

    def test_linear_without_formula_normalises(self, scorer):
        factor = numeric_factor(min_value=0, max_value=200)
        assert scorer.score(factor, 50).score.calculated_score == pytest.approx(25.0)

    def test_degenerate_range_gives_neutral(self, scorer):
        factor = numeric_factor(min_value=10, max_value=10)
        assert scorer.score(factor, 10).score.calculated_score == pytest.approx(50.0)

    def test_exponential_without_formula_uses_curve(self, scorer):
        factor = numeric_factor(scoring_type=ScoringType.EXPONENTIAL)
        expected = math.pow(0.5, 0.7) * 100
        assert scorer.score(factor, 50).score.calculated_score == pytest.approx(expected)

    def test_formula_error_degrades_to_neutral(self, scorer):
        factor = numeric_factor(formula="100 / x")
        scored = scorer.score(factor, 0)
        assert scored.score.calculated_score == 50
        assert "scoring formula failed" in scored.warnings[0]

    def test_invalid_formula_degrades_to_neutral(self, scorer):
        factor = numeric_factor(formula="import os")
        scored = scorer.score(factor, 10)
        assert scored.score.calculated_score == 50
        assert scored.degraded


class TestMissingValues:
    """A factor entry without a value scores neutral instead of failing."""

    def test_input_value_defaults_to_none(self):
        assert RiskFactorInput().value is None
        assert RiskFactorInput.model_validate({"value": None}).value is None

    @pytest.mark.parametrize("factor_name", ["Weather Delays", "Material Lead Times"])
    def test_missing_value_scores_neutral_with_warning(self, scorer, factor_name):
        factor = InMemoryRiskFactorCatalog().get_factor(factor_name)

        scored = scorer.score(factor, None)

        assert scored.score.calculated_score == 50
        assert scored.score.input_value is None
        assert scored.warnings == [f"{factor_name}: no value provided, using neutral score 50"]

    def test_missing_value_fails_validation(self, weather_factor, lead_time_factor):
        assert validate_factor_input(weather_factor, None)
        assert "finite number" in validate_factor_input(lead_time_factor, None)[0]


class TestDefaultCatalogScores:
    """Every seeded option and numeric bound scores inside [0, 100]."""

    def test_all_seeded_inputs_score_in_range(self, scorer):
        for category in DEFAULT_RISK_CATEGORIES:
            for factor in category.factors:
                if factor.scoring_type == ScoringType.CATEGORICAL:
                    values = [option.label for option in factor.options]
                else:
                    values = [factor.min_value, factor.max_value, factor.default_value]
                for value in values:
                    scored = scorer.score(factor, value)
                    assert 0 <= scored.score.calculated_score <= 100
                    assert scored.warnings == []


class TestValidateFactorInput:
    """Tests for validate_factor_input()."""

    def test_valid_values_have_no_errors(self, weather_factor, lead_time_factor):
        assert validate_factor_input(weather_factor, "Low") == []
        assert validate_factor_input(lead_time_factor, 30) == []

    def test_unknown_option_lists_labels(self, weather_factor):
        errors = validate_factor_input(weather_factor, "Sunny")
        assert len(errors) == 1
        assert "Minimal Risk (0-5 days)" in errors[0]

    def test_numeric_bounds_are_reported(self, lead_time_factor):
        assert "at most 90" in validate_factor_input(lead_time_factor, 91)[0]
        assert "at least 0" in validate_factor_input(lead_time_factor, -1)[0]
        assert "finite number" in validate_factor_input(lead_time_factor, "abc")[0]


class TestCategoricalOptionModel:
    def test_option_score_is_bounded(self):
        with pytest.raises(ValueError):
            CategoricalOption(label="Too high", score=120)
