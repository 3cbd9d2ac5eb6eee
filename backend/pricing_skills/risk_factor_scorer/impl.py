"""
Risk Factor Scorer - Implementation

Converts one raw factor input into a normalized 0-100 score:
- CATEGORICAL: option label (case-insensitive, unique prefix) or index lookup
- LINEAR / EXPONENTIAL: compiled formula evaluated against the bound value

Scoring problems never raise; they produce a warning and the neutral score.

Author: Pricing Engine Team
"""

import logging
import math
from typing import List, Optional, Tuple

from .definition import (
    CategoricalOption,
    FactorScore,
    FormulaError,
    RiskFactorDefinition,
    RiskFactorValue,
    ScoredFactor,
    ScoringType,
    is_finite_number,
)
from .formula import compile_formula

logger = logging.getLogger(__name__)


NEUTRAL_SCORE = 50.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0

# Curve exponent used when an exponential factor has no formula
EXPONENTIAL_CURVE = 0.7


def clamp_score(score: float) -> float:
    """Clamp a raw score into [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, score))


def normalize_to_scale(value: float, min_value: float, max_value: float) -> float:
    """Map ``value`` from [min_value, max_value] onto [0, 100]."""
    if max_value == min_value:
        return NEUTRAL_SCORE
    return clamp_score((value - min_value) / (max_value - min_value) * 100)


class RiskFactorScorer:
    """
    Scores a single risk factor.

    Usage:
        scorer = RiskFactorScorer()
        scored = scorer.score(factor, "High complexity")
        print(scored.score.calculated_score, scored.warnings)
    """

    def __init__(self, neutral_score: float = NEUTRAL_SCORE):
        self.neutral_score = neutral_score

    def score(
        self,
        factor: RiskFactorDefinition,
        value: Optional[RiskFactorValue],
        notes: Optional[str] = None,
    ) -> ScoredFactor:
        """
        Score ``value`` against ``factor``. A missing value scores neutral.

        Returns:
            ScoredFactor whose ``warnings`` explain any fallback to the
            neutral score.
        """
        if value is None:
            calculated = self.neutral_score
            warnings = [f"{factor.name}: no value provided, using neutral score {self.neutral_score:g}"]
        elif factor.scoring_type == ScoringType.CATEGORICAL:
            calculated, warnings = self._score_categorical(factor, value)
        elif factor.scoring_type == ScoringType.LINEAR:
            calculated, warnings = self._score_numeric(factor, value, exponential=False)
        elif factor.scoring_type == ScoringType.EXPONENTIAL:
            calculated, warnings = self._score_numeric(factor, value, exponential=True)
        else:
            calculated = self.neutral_score
            warnings = [f"{factor.name}: unsupported scoring type {factor.scoring_type}"]

        calculated = clamp_score(calculated)
        score = FactorScore(
            factor_name=factor.name,
            category_name=factor.category_name,
            weight=factor.weight,
            input_value=value,
            calculated_score=calculated,
            weighted_score=calculated * factor.weight / 100,
            scoring_method=factor.scoring_type,
            data_type=factor.data_type,
            notes=notes,
        )
        if warnings:
            logger.debug(f"Factor '{factor.name}' scored with warnings: {warnings}")
        return ScoredFactor(score=score, warnings=warnings)

    # Categorical

    def _score_categorical(
        self,
        factor: RiskFactorDefinition,
        value: RiskFactorValue,
    ) -> Tuple[float, List[str]]:
        if not factor.options:
            return self.neutral_score, [
                f"{factor.name}: no options configured, using neutral score {self.neutral_score:g}"
            ]

        option = self._match_option(factor.options, value)
        if option is None:
            return self.neutral_score, [
                f"{factor.name}: value {value!r} does not match any option, "
                f"using neutral score {self.neutral_score:g}"
            ]
        return option.score, []

    @staticmethod
    def _match_option(
        options: List[CategoricalOption],
        value: Optional[RiskFactorValue],
    ) -> Optional[CategoricalOption]:
        if isinstance(value, str):
            wanted = value.strip().lower()
            if not wanted:
                return None
            for option in options:
                if option.label.lower() == wanted:
                    return option
            prefixed = [o for o in options if o.label.lower().startswith(wanted)]
            if len(prefixed) == 1:
                return prefixed[0]
            return None

        if is_finite_number(value) and float(value).is_integer():
            index = int(value)
            if 0 <= index < len(options):
                return options[index]
        return None

    # Numeric

    def _score_numeric(
        self,
        factor: RiskFactorDefinition,
        value: RiskFactorValue,
        exponential: bool,
    ) -> Tuple[float, List[str]]:
        warnings: List[str] = []
        number = self._coerce_number(value)
        if number is None:
            return self.neutral_score, [
                f"{factor.name}: expected a numeric value but got {value!r}, "
                f"using neutral score {self.neutral_score:g}"
            ]

        low, high = factor.min_value, factor.max_value
        if (low is not None and number < low) or (high is not None and number > high):
            bounded = number
            if low is not None:
                bounded = max(low, bounded)
            if high is not None:
                bounded = min(high, bounded)
            warnings.append(
                f"{factor.name}: value {number:g} outside expected range "
                f"[{_fmt(low, '-inf')}, {_fmt(high, 'inf')}], clamped to {bounded:g}"
            )
            number = bounded

        if factor.formula:
            try:
                compiled = compile_formula(factor.formula)
                return compiled.evaluate(number, low, high), warnings
            except FormulaError as e:
                logger.warning(f"Formula failed for factor '{factor.name}': {e}")
                warnings.append(
                    f"{factor.name}: scoring formula failed ({e}), "
                    f"using neutral score {self.neutral_score:g}"
                )
                return self.neutral_score, warnings

        if low is None or high is None:
            warnings.append(
                f"{factor.name}: no formula or range configured, "
                f"using neutral score {self.neutral_score:g}"
            )
            return self.neutral_score, warnings

        normalized = normalize_to_scale(number, low, high)
        if exponential:
            return math.pow(normalized / 100, EXPONENTIAL_CURVE) * 100, warnings
        return normalized, warnings

    @staticmethod
    def _coerce_number(value: Optional[RiskFactorValue]) -> Optional[float]:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value) if math.isfinite(value) else None
        if isinstance(value, str):
            try:
                number = float(value.strip().rstrip("%"))
            except ValueError:
                return None
            return number if math.isfinite(number) else None
        return None


def _fmt(bound: Optional[float], unbounded: str) -> str:
    return unbounded if bound is None else f"{bound:g}"


def score_risk_factor(
    factor: RiskFactorDefinition,
    value: Optional[RiskFactorValue],
    notes: Optional[str] = None,
) -> ScoredFactor:
    """Convenience wrapper around RiskFactorScorer.score()."""
    return RiskFactorScorer().score(factor, value, notes)


def validate_factor_input(factor: RiskFactorDefinition, value: Optional[RiskFactorValue]) -> List[str]:
    """
    Check that ``value`` fits the factor's data type.

    Returns a list of problems; an empty list means the value is usable.
    """
    errors: List[str] = []
    if factor.scoring_type == ScoringType.CATEGORICAL:
        if RiskFactorScorer._match_option(factor.options, value) is None:
            labels = ", ".join(o.label for o in factor.options)
            errors.append(f"{factor.name}: value must be one of: {labels}")
        return errors

    number = RiskFactorScorer._coerce_number(value)
    if number is None:
        errors.append(f"{factor.name}: value must be a finite number")
        return errors
    if factor.min_value is not None and number < factor.min_value:
        errors.append(f"{factor.name}: value must be at least {factor.min_value:g}")
    if factor.max_value is not None and number > factor.max_value:
        errors.append(f"{factor.name}: value must be at most {factor.max_value:g}")
    return errors
