"""
Risk-Adjusted Profit Margin - Implementation

adjusted = base x level_multiplier + sum(base x (trigger_multiplier - 1))
over fired secondary triggers, clamped to [min_margin, max_margin].
Every clamp is reported as a warning naming the bound.

Author: Pricing Engine Team
"""

import logging
import math
from typing import Dict, List, Optional

from pricing_skills.risk_assessment import RiskLevel, RiskScoringResult
from pricing_skills.risk_factor_scorer import FactorScore

from .definition import (
    MarginBound,
    MarginConfigValidation,
    MarginConfigurationError,
    ProfitMarginConfig,
    ProfitMarginResult,
    RiskLevelMultiplier,
    SecondaryTrigger,
    TriggerAdjustment,
)

logger = logging.getLogger(__name__)


DEFAULT_RISK_MULTIPLIERS: Dict[RiskLevel, RiskLevelMultiplier] = {
    RiskLevel.LOW: RiskLevelMultiplier(
        multiplier=0.8,
        description="Low risk projects can accept a reduced margin",
    ),
    RiskLevel.MEDIUM: RiskLevelMultiplier(
        multiplier=1.0,
        description="Standard margin for typical risk",
    ),
    RiskLevel.HIGH: RiskLevelMultiplier(
        multiplier=1.3,
        description="Elevated margin to cover increased exposure",
    ),
    RiskLevel.CRITICAL: RiskLevelMultiplier(
        multiplier=1.6,
        description="Significant premium for critical risk exposure",
    ),
}

DEFAULT_SECONDARY_TRIGGERS: List[SecondaryTrigger] = [
    SecondaryTrigger(
        name="technical_complexity",
        label="Technical complexity",
        category_keywords=("technical",),
        name_keywords=("complexity", "technical"),
        threshold=70,
        multiplier=1.15,
    ),
    SecondaryTrigger(
        name="timeline_pressure",
        label="Timeline pressure",
        category_keywords=("schedule",),
        name_keywords=("timeline", "deadline", "pressure"),
        threshold=60,
        multiplier=1.20,
    ),
    SecondaryTrigger(
        name="client_history",
        label="Client history",
        category_keywords=("client",),
        name_keywords=("client", "relationship"),
        threshold=50,
        multiplier=1.10,
    ),
    SecondaryTrigger(
        name="market_conditions",
        label="Market conditions",
        category_keywords=("market",),
        name_keywords=("market", "economic", "competition"),
        threshold=65,
        multiplier=1.05,
    ),
]


def default_margin_config() -> ProfitMarginConfig:
    """Fresh copy of the default configuration."""
    return ProfitMarginConfig(
        base_margin=20.0,
        min_margin=5.0,
        max_margin=35.0,
        risk_multipliers={k: v.model_copy() for k, v in DEFAULT_RISK_MULTIPLIERS.items()},
        triggers=[t.model_copy() for t in DEFAULT_SECONDARY_TRIGGERS],
    )


def validate_margin_config(config: ProfitMarginConfig) -> MarginConfigValidation:
    """
    Check a configuration without raising.

    Returns:
        MarginConfigValidation with one message per problem.
    """
    errors: List[str] = []
    for label, value in (
        ("Base", config.base_margin),
        ("Minimum", config.min_margin),
        ("Maximum", config.max_margin),
    ):
        if not 0 <= value <= 100:
            errors.append(f"{label} margin must be between 0 and 100")

    if config.min_margin >= config.max_margin:
        errors.append("Minimum margin must be less than maximum margin")
    elif not config.min_margin <= config.base_margin <= config.max_margin:
        errors.append("Base margin must be within the min/max range")

    for level in RiskLevel:
        entry = config.risk_multipliers.get(level)
        if entry is None:
            errors.append(f"{level.value} risk multiplier is missing")
        elif entry.multiplier <= 0:
            errors.append(f"{level.value} risk multiplier must be positive")

    for trigger in config.triggers:
        if trigger.multiplier <= 0:
            errors.append(f"Trigger '{trigger.name}' multiplier must be positive")

    return MarginConfigValidation(is_valid=not errors, errors=errors)


def _matches(trigger: SecondaryTrigger, score: FactorScore) -> bool:
    category = score.category_name.lower()
    name = score.factor_name.lower()
    return any(k in category for k in trigger.category_keywords) or any(
        k in name for k in trigger.name_keywords
    )


class RiskAdjustedProfitMarginCalculator:
    """
    Blends a base margin with a risk assessment.

    Usage:
        calculator = RiskAdjustedProfitMarginCalculator()
        result = calculator.calculate(risk_result, base_margin=18)
        print(result.adjusted_profit_margin, result.warnings)

    Raises:
        MarginConfigurationError: From calculate() when the configuration
            fails validate_margin_config().
    """

    def __init__(self, config: Optional[ProfitMarginConfig] = None):
        self.config = config if config is not None else default_margin_config()

    def validate(self) -> MarginConfigValidation:
        return validate_margin_config(self.config)

    def calculate(
        self,
        risk_assessment: RiskScoringResult,
        base_margin: Optional[float] = None,
    ) -> ProfitMarginResult:
        """
        Adjust ``base_margin`` (config default when None) for the risk profile.
        """
        validation = self.validate()
        if not validation.is_valid:
            raise MarginConfigurationError(validation.errors)

        config = self.config
        base = config.base_margin if base_margin is None else base_margin
        level = risk_assessment.risk_level
        level_multiplier = config.risk_multipliers[level]

        level_adjusted = base * level_multiplier.multiplier
        trigger_adjustments = [
            self._evaluate_trigger(trigger, risk_assessment.factor_scores, base)
            for trigger in config.triggers
        ]
        additions = math.fsum(t.adjustment for t in trigger_adjustments if t.triggered)
        raw = level_adjusted + additions

        warnings: List[str] = []
        clamped_bound: Optional[MarginBound] = None
        adjusted = raw
        if raw < config.min_margin:
            adjusted = config.min_margin
            clamped_bound = MarginBound.MINIMUM
            warnings.append(
                f"Adjusted margin ({raw:.1f}%) is below the minimum margin "
                f"({config.min_margin:g}%). Using minimum margin."
            )
        elif raw > config.max_margin:
            adjusted = config.max_margin
            clamped_bound = MarginBound.MAXIMUM
            warnings.append(
                f"Adjusted margin ({raw:.1f}%) is above the maximum margin "
                f"({config.max_margin:g}%). Using maximum margin."
            )

        margin_adjustment = adjusted - base
        result = ProfitMarginResult(
            base_profit_margin=base,
            adjusted_profit_margin=adjusted,
            margin_adjustment=margin_adjustment,
            adjustment_percentage=(margin_adjustment / base * 100) if base else 0.0,
            risk_level=level,
            risk_level_multiplier=level_multiplier.multiplier,
            risk_level_adjustment=level_adjusted - base,
            trigger_adjustments=trigger_adjustments,
            explanation=self._explain(
                base, level, level_multiplier, trigger_adjustments, clamped_bound, adjusted
            ),
            warnings=warnings,
            clamped_bound=clamped_bound,
        )
        logger.info(
            f"Profit margin {base:.2f}% -> {adjusted:.2f}% "
            f"({level.value}, {len(result.triggered)} trigger(s))"
        )
        return result

    @staticmethod
    def _evaluate_trigger(
        trigger: SecondaryTrigger,
        factor_scores: List[FactorScore],
        base: float,
    ) -> TriggerAdjustment:
        matching = [s.calculated_score for s in factor_scores if _matches(trigger, s)]
        score = sum(matching) / len(matching) if matching else None
        triggered = score is not None and score > trigger.threshold
        return TriggerAdjustment(
            name=trigger.name,
            label=trigger.label,
            factor_score=score,
            threshold=trigger.threshold,
            multiplier=trigger.multiplier,
            triggered=triggered,
            adjustment=base * (trigger.multiplier - 1) if triggered else 0.0,
        )

    @staticmethod
    def _explain(
        base: float,
        level: RiskLevel,
        level_multiplier: RiskLevelMultiplier,
        trigger_adjustments: List[TriggerAdjustment],
        clamped_bound: Optional[MarginBound],
        adjusted: float,
    ) -> str:
        parts = [
            f"Base margin {base:g}%",
            f"{level.value} risk multiplier x{level_multiplier.multiplier:g}"
            + (f" ({level_multiplier.description})" if level_multiplier.description else ""),
        ]
        for t in trigger_adjustments:
            if t.triggered:
                parts.append(
                    f"{t.label} score {t.factor_score:.0f} exceeds {t.threshold:g}: "
                    f"+{t.adjustment:.2f} points"
                )
        if clamped_bound is not None:
            parts.append(f"Clamped to {clamped_bound.value} margin {adjusted:g}%")
        parts.append(f"Final margin {adjusted:.2f}%")
        return ". ".join(parts) + "."


def calculate_risk_adjusted_margin(
    risk_assessment: RiskScoringResult,
    base_margin: Optional[float] = None,
    config: Optional[ProfitMarginConfig] = None,
) -> ProfitMarginResult:
    """Convenience wrapper around RiskAdjustedProfitMarginCalculator.calculate()."""
    return RiskAdjustedProfitMarginCalculator(config).calculate(risk_assessment, base_margin)
