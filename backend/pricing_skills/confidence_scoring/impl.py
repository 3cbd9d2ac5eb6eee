"""
Confidence Scoring - Implementation

Weighted confidence over the factors actually supplied, optionally
enriched with two factors derived from the risk assessment, mapped to
a level and a +/- price uncertainty band.

Author: Pricing Engine Team
"""

import logging
import math
from typing import Dict, List, Optional

from pricing_skills.risk_assessment import RiskScoringResult

from .definition import (
    ConfidenceConfig,
    ConfidenceConfigValidation,
    ConfidenceFactorScore,
    ConfidenceFactors,
    ConfidenceLevel,
    ConfidenceScoringResult,
    UncertaintyRange,
)

logger = logging.getLogger(__name__)


CONFIDENCE_WEIGHTS: Dict[str, float] = {
    "data_completeness": 0.11,
    "data_accuracy": 0.09,
    "data_recency": 0.07,
    "historical_accuracy": 0.14,
    "estimate_frequency": 0.08,
    "variance_from_historical": 0.09,
    "scope_complexity": 0.08,
    "technical_uncertainty": 0.08,
    "requirement_clarity": 0.08,
    "market_data_age": 0.05,
    "market_volatility": 0.05,
    "supplier_reliability": 0.03,
    "risk_assessment_confidence": 0.05,
    "risk_factor_coverage": 0.03,
}

# Higher raw values of these factors mean lower confidence
ADVERSE_FACTORS = frozenset({
    "variance_from_historical",
    "scope_complexity",
    "technical_uncertainty",
    "market_volatility",
})

CONFIDENCE_THRESHOLDS: Dict[ConfidenceLevel, float] = {
    ConfidenceLevel.VERY_LOW: 20,
    ConfidenceLevel.LOW: 40,
    ConfidenceLevel.MEDIUM: 60,
    ConfidenceLevel.HIGH: 80,
}

UNCERTAINTY_MULTIPLIERS: Dict[ConfidenceLevel, float] = {
    ConfidenceLevel.VERY_LOW: 0.25,
    ConfidenceLevel.LOW: 0.15,
    ConfidenceLevel.MEDIUM: 0.10,
    ConfidenceLevel.HIGH: 0.05,
    ConfidenceLevel.VERY_HIGH: 0.02,
}

LEVEL_DESCRIPTIONS: Dict[ConfidenceLevel, str] = {
    ConfidenceLevel.VERY_LOW: "Very low confidence - significant uncertainty in estimate",
    ConfidenceLevel.LOW: "Low confidence - considerable uncertainty, use with caution",
    ConfidenceLevel.MEDIUM: "Medium confidence - moderate uncertainty, generally reliable",
    ConfidenceLevel.HIGH: "High confidence - low uncertainty, reliable estimate",
    ConfidenceLevel.VERY_HIGH: "Very high confidence - minimal uncertainty, highly reliable",
}

CRITICAL_FACTOR_SCORE = 20
WEAK_FACTOR_SCORE = 40

MAX_UNCERTAINTY_MULTIPLIER = UNCERTAINTY_MULTIPLIERS[ConfidenceLevel.VERY_LOW]


def default_confidence_config() -> ConfidenceConfig:
    return ConfidenceConfig(
        weights=dict(CONFIDENCE_WEIGHTS),
        thresholds=dict(CONFIDENCE_THRESHOLDS),
        uncertainty_multipliers=dict(UNCERTAINTY_MULTIPLIERS),
    )


def validate_confidence_config(config: ConfidenceConfig) -> ConfidenceConfigValidation:
    """Check weights, thresholds and multipliers without raising."""
    errors: List[str] = []
    for name, weight in config.weights.items():
        if weight <= 0:
            errors.append(f"Weight for '{name}' must be positive")
    total = math.fsum(config.weights.values())
    if not math.isclose(total, 1.0, abs_tol=1e-6):
        errors.append(f"Confidence weights must sum to 1.0 (got {total:.4f})")

    previous = 0.0
    for level in (ConfidenceLevel.VERY_LOW, ConfidenceLevel.LOW, ConfidenceLevel.MEDIUM, ConfidenceLevel.HIGH):
        threshold = config.thresholds.get(level)
        if threshold is None:
            errors.append(f"Threshold for {level.value} is missing")
            continue
        if threshold <= previous or threshold > 100:
            errors.append(f"Threshold for {level.value} must ascend within (0, 100]")
        previous = threshold

    for level in ConfidenceLevel:
        multiplier = config.uncertainty_multipliers.get(level)
        if multiplier is None or multiplier < 0:
            errors.append(f"Uncertainty multiplier for {level.value} must be non-negative")

    return ConfidenceConfigValidation(is_valid=not errors, errors=errors)


def _display_name(name: str) -> str:
    return name.replace("_", " ")


class ConfidenceScorer:
    """
    Aggregates confidence inputs into a score and uncertainty band.

    Usage:
        scorer = ConfidenceScorer()
        result = scorer.score(ConfidenceFactors(data_completeness=80), final_price=125_000)
        print(result.confidence_level, result.uncertainty_range.percentage)
    """

    def __init__(self, config: Optional[ConfidenceConfig] = None):
        self.config = config if config is not None else default_confidence_config()

    def classify(self, score: float) -> ConfidenceLevel:
        for level in (ConfidenceLevel.VERY_LOW, ConfidenceLevel.LOW, ConfidenceLevel.MEDIUM, ConfidenceLevel.HIGH):
            if score <= self.config.thresholds[level]:
                return level
        return ConfidenceLevel.VERY_HIGH

    def uncertainty_range(self, price: float, level: ConfidenceLevel) -> UncertaintyRange:
        multiplier = self.config.uncertainty_multipliers[level]
        return UncertaintyRange(
            base_price=price,
            lower_bound=price * (1 - multiplier),
            upper_bound=price * (1 + multiplier),
            multiplier=multiplier,
            percentage=multiplier * 100,
        )

    def score(
        self,
        factors: Optional[ConfidenceFactors],
        final_price: float,
        risk_assessment: Optional[RiskScoringResult] = None,
    ) -> ConfidenceScoringResult:
        """
        Score the supplied factors against ``final_price``.

        Missing factors are excluded rather than counted as zero. With
        nothing usable the result is VERY_LOW with the widest band.
        """
        warnings: List[str] = []
        raw: Dict[str, float] = dict(factors.supplied()) if factors is not None else {}

        if risk_assessment is not None and not risk_assessment.is_fallback:
            raw["risk_assessment_confidence"] = risk_assessment.confidence * 100
            if risk_assessment.factors_available:
                raw["risk_factor_coverage"] = min(
                    100.0,
                    risk_assessment.factors_processed / risk_assessment.factors_available * 100,
                )

        factor_scores: List[ConfidenceFactorScore] = []
        for name, value in raw.items():
            weight = self.config.weights.get(name)
            if weight is None:
                warnings.append(f"Unknown confidence factor '{name}' ignored")
                continue
            if not math.isfinite(value):
                warnings.append(f"Confidence factor '{_display_name(name)}' is not a finite number; ignored")
                continue
            clamped = max(0.0, min(100.0, value))
            if clamped != value:
                warnings.append(
                    f"Confidence factor '{_display_name(name)}' value {value:g} outside 0-100, "
                    f"clamped to {clamped:g}"
                )
            inverted = name in ADVERSE_FACTORS
            factor_scores.append(
                ConfidenceFactorScore(
                    name=name,
                    raw_value=value,
                    effective_value=100 - clamped if inverted else clamped,
                    weight=weight,
                    inverted=inverted,
                )
            )

        if not factor_scores:
            level = ConfidenceLevel.VERY_LOW
            warnings.append(
                "No confidence factors supplied; using maximum uncertainty range"
            )
            return ConfidenceScoringResult(
                overall_score=0.0,
                confidence_level=level,
                level_description=LEVEL_DESCRIPTIONS[level],
                uncertainty_range=self.uncertainty_range(final_price, level),
                recommendations=["Consider delaying estimate until more data is available"],
                warnings=warnings,
            )

        total_weight = math.fsum(f.weight for f in factor_scores)
        overall = math.fsum(f.effective_value * f.weight for f in factor_scores) / total_weight
        overall = max(0.0, min(100.0, overall))
        level = self.classify(overall)

        recommendations, factor_warnings = self._recommendations(factor_scores, overall)
        warnings.extend(factor_warnings)

        logger.info(
            f"Confidence {overall:.1f} ({level.value}) from {len(factor_scores)} factor(s)"
        )
        return ConfidenceScoringResult(
            overall_score=overall,
            confidence_level=level,
            level_description=LEVEL_DESCRIPTIONS[level],
            factor_scores=factor_scores,
            factors_supplied=len(factor_scores),
            uncertainty_range=self.uncertainty_range(final_price, level),
            recommendations=recommendations,
            warnings=warnings,
        )

    @staticmethod
    def _recommendations(factor_scores: List[ConfidenceFactorScore], overall: float):
        recommendations: List[str] = []
        warnings: List[str] = []
        for factor in factor_scores:
            verb = "Reduce" if factor.inverted else "Improve"
            label = _display_name(factor.name)
            if factor.effective_value <= CRITICAL_FACTOR_SCORE:
                recommendations.append(f"Critical: {verb} {label}")
                warnings.append(f"Very low confidence contribution from {label}")
            elif factor.effective_value <= WEAK_FACTOR_SCORE:
                recommendations.append(f"{verb} {label}")

        if overall < 30:
            recommendations.append("Consider delaying estimate until more data is available")
        elif overall < 50:
            recommendations.append("Add contingency buffer to account for uncertainty")
        elif overall > 80:
            recommendations.append("High confidence estimate - consider reducing contingency")
        return recommendations, warnings


def score_confidence(
    factors: Optional[ConfidenceFactors],
    final_price: float,
    risk_assessment: Optional[RiskScoringResult] = None,
) -> ConfidenceScoringResult:
    """Convenience wrapper around ConfidenceScorer.score()."""
    return ConfidenceScorer().score(factors, final_price, risk_assessment)


def max_uncertainty_range(price: float) -> UncertaintyRange:
    """Widest band, used when confidence could not be assessed."""
    return ConfidenceScorer().uncertainty_range(price, ConfidenceLevel.VERY_LOW)
