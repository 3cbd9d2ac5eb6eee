"""
Risk Assessment - Implementation

Aggregates factor scores into category scores and an overall risk
score with:
- Weighted averages over factors and categories that received input
- Fixed risk level bands and baseline contingency per level
- Coverage-based confidence
- Level and factor driven recommendations

If the catalog cannot be read the engine returns None so the caller
can fall back to legacy scoring; it never raises past assess().

Author: Pricing Engine Team
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from pricing_skills.risk_factor_scorer import (
    FactorScore,
    RiskCategoryDefinition,
    RiskFactorDefinition,
    RiskFactorInput,
    RiskFactorScorer,
)

from .catalog import InMemoryRiskFactorCatalog
from .definition import (
    CategoryScore,
    RiskFactorCatalog,
    RiskLevel,
    RiskScoringResult,
)

logger = logging.getLogger(__name__)


# Ascending (upper bound, level) bands over the total risk score
RISK_LEVEL_THRESHOLDS: Tuple[Tuple[float, RiskLevel], ...] = (
    (25.0, RiskLevel.LOW),
    (50.0, RiskLevel.MEDIUM),
    (75.0, RiskLevel.HIGH),
)

CONTINGENCY_RATES: Dict[RiskLevel, float] = {
    RiskLevel.LOW: 0.05,
    RiskLevel.MEDIUM: 0.10,
    RiskLevel.HIGH: 0.15,
    RiskLevel.CRITICAL: 0.20,
}

LEVEL_RECOMMENDATIONS: Dict[RiskLevel, Tuple[str, ...]] = {
    RiskLevel.LOW: (
        "Standard project management practices should be sufficient.",
    ),
    RiskLevel.MEDIUM: (
        "Implement enhanced monitoring and regular risk reviews.",
        "Consider additional safety measures and quality controls.",
    ),
    RiskLevel.HIGH: (
        "Develop comprehensive risk mitigation plan.",
        "Increase project oversight and monitoring frequency.",
        "Consider additional insurance coverage.",
    ),
    RiskLevel.CRITICAL: (
        "Requires senior management review and approval.",
        "Implement aggressive risk mitigation strategies.",
        "Consider project scope reduction or timeline extension.",
        "Engage specialized consultants if needed.",
    ),
}

CONFIDENCE_PENALTY_PER_WARNING = 0.05
ELEVATED_FACTOR_SCORE = 50.0
HIGH_PRIORITY_FACTOR_SCORE = 70.0
MAX_PRIORITY_FACTORS = 5


def classify_risk_level(total_risk_score: float) -> RiskLevel:
    """Map a 0-100 score onto its risk band."""
    for upper, level in RISK_LEVEL_THRESHOLDS:
        if total_risk_score < upper:
            return level
    return RiskLevel.CRITICAL


def _weighted_average(pairs: List[Tuple[float, float]]) -> float:
    """Average of (value, weight) pairs; plain mean when all weights are zero."""
    total_weight = sum(weight for _, weight in pairs)
    if total_weight > 0:
        return sum(value * weight for value, weight in pairs) / total_weight
    return sum(value for value, _ in pairs) / len(pairs)


class RiskAssessmentEngine:
    """
    Multi-factor risk assessment over a factor catalog.

    Usage:
        engine = RiskAssessmentEngine()
        result = engine.assess({
            "Weather Delays": RiskFactorInput(value="High Risk (20-30 days)"),
            "Material Lead Times": RiskFactorInput(value=45),
        })
        if result is not None:
            print(result.to_summary())
    """

    def __init__(
        self,
        catalog: Optional[RiskFactorCatalog] = None,
        scorer: Optional[RiskFactorScorer] = None,
    ):
        self.catalog = catalog if catalog is not None else InMemoryRiskFactorCatalog()
        self.scorer = scorer or RiskFactorScorer()

    def assess(self, inputs: Mapping[str, RiskFactorInput]) -> Optional[RiskScoringResult]:
        """
        Score every supplied factor and aggregate.

        Args:
            inputs: Factor name -> raw input. Names are matched
                case-insensitively against the catalog.

        Returns:
            RiskScoringResult, or None when the catalog is unavailable.
        """
        try:
            categories = list(self.catalog.list_categories())
        except Exception as e:
            logger.error(f"Risk factor catalog unavailable: {type(e).__name__}: {e}")
            return None

        if not categories:
            logger.warning("Risk factor catalog returned no categories")
            return None

        factor_index = self._index_factors(categories)
        warnings: List[str] = []
        scores_by_category: Dict[str, List[FactorScore]] = {}
        seen: Dict[str, str] = {}

        for raw_name, factor_input in inputs.items():
            key = raw_name.strip().lower()
            factor = factor_index.get(key)
            if factor is None:
                warnings.append(f"Unknown risk factor: '{raw_name}'")
                continue
            if key in seen:
                warnings.append(
                    f"Risk factor '{raw_name}' duplicates '{seen[key]}'; using the first value"
                )
                continue
            seen[key] = raw_name

            scored = self.scorer.score(factor, factor_input.value, factor_input.notes)
            warnings.extend(scored.warnings)
            scores_by_category.setdefault(factor.category_name, []).append(scored.score)

        category_scores = self._score_categories(categories, scores_by_category)
        factor_scores = [s for c in categories for s in scores_by_category.get(c.name, [])]

        if category_scores:
            total = _weighted_average([(c.score, c.weight) for c in category_scores])
        else:
            total = 0.0
        total = max(0.0, min(100.0, total))
        level = classify_risk_level(total)

        processed = len(factor_scores)
        available = len(factor_index)
        confidence = processed / available if available else 0.0
        confidence -= CONFIDENCE_PENALTY_PER_WARNING * len(warnings)
        confidence = max(0.0, min(1.0, confidence))

        result = RiskScoringResult(
            total_risk_score=total,
            risk_level=level,
            confidence=confidence,
            category_scores=category_scores,
            factor_scores=factor_scores,
            recommendations=self._recommendations(level, factor_scores),
            contingency_rate=CONTINGENCY_RATES[level],
            factors_processed=processed,
            factors_available=available,
            warnings=warnings,
        )
        logger.info(result.to_summary())
        return result

    @staticmethod
    def _index_factors(
        categories: List[RiskCategoryDefinition],
    ) -> Dict[str, RiskFactorDefinition]:
        index: Dict[str, RiskFactorDefinition] = {}
        for category in categories:
            for factor in category.factors:
                index.setdefault(factor.name.lower(), factor)
        return index

    @staticmethod
    def _score_categories(
        categories: List[RiskCategoryDefinition],
        scores_by_category: Dict[str, List[FactorScore]],
    ) -> List[CategoryScore]:
        results = []
        for category in categories:
            scores = scores_by_category.get(category.name)
            if not scores:
                continue
            score = _weighted_average([(s.calculated_score, s.weight) for s in scores])
            results.append(
                CategoryScore(
                    category_name=category.name,
                    weight=category.weight,
                    score=score,
                    weighted_score=score * category.weight / 100,
                    factor_count=len(scores),
                )
            )
        return results

    @staticmethod
    def _recommendations(level: RiskLevel, factor_scores: List[FactorScore]) -> List[str]:
        recommendations = list(LEVEL_RECOMMENDATIONS[level])
        elevated = sorted(
            (s for s in factor_scores if s.calculated_score > ELEVATED_FACTOR_SCORE),
            key=lambda s: s.calculated_score,
            reverse=True,
        )[:MAX_PRIORITY_FACTORS]
        for score in elevated:
            if score.calculated_score > HIGH_PRIORITY_FACTOR_SCORE:
                recommendations.append(
                    f"High priority: Address {score.factor_name} risk factor."
                )
        return recommendations


def assess_project_risk(
    inputs: Mapping[str, RiskFactorInput],
    catalog: Optional[RiskFactorCatalog] = None,
) -> Optional[RiskScoringResult]:
    """Convenience wrapper around RiskAssessmentEngine.assess()."""
    return RiskAssessmentEngine(catalog=catalog).assess(inputs)


def build_fallback_assessment(legacy_risk_score: Optional[float] = None) -> RiskScoringResult:
    """
    Synthesise an assessment when the catalog is unavailable.

    The legacy 0-10 score is scaled onto 0-100; without one a neutral
    50 is used. Confidence is zero because no factor was scored.
    """
    if legacy_risk_score is None:
        total = 50.0
        source = "a neutral score"
    else:
        total = max(0.0, min(100.0, legacy_risk_score * 10))
        source = f"the legacy risk score ({legacy_risk_score:g}/10)"
    level = classify_risk_level(total)
    return RiskScoringResult(
        total_risk_score=total,
        risk_level=level,
        confidence=0.0,
        recommendations=list(LEVEL_RECOMMENDATIONS[level]),
        contingency_rate=CONTINGENCY_RATES[level],
        warnings=[f"Risk factor catalog unavailable; risk assessment derived from {source}"],
        is_fallback=True,
    )
