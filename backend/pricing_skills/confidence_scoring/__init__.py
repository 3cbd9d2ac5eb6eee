"""
Confidence Scoring Skill

Scores how trustworthy an estimate is from sparse 0-100 inputs and
derives a +/- uncertainty band on the final price.
"""

from .definition import (
    ConfidenceConfig,
    ConfidenceConfigValidation,
    ConfidenceFactorScore,
    ConfidenceFactors,
    ConfidenceLevel,
    ConfidenceScoringResult,
    UncertaintyRange,
)

from .impl import (
    ConfidenceScorer,
    default_confidence_config,
    max_uncertainty_range,
    score_confidence,
    validate_confidence_config,
    ADVERSE_FACTORS,
    CONFIDENCE_THRESHOLDS,
    CONFIDENCE_WEIGHTS,
    LEVEL_DESCRIPTIONS,
    MAX_UNCERTAINTY_MULTIPLIER,
    UNCERTAINTY_MULTIPLIERS,
)

__all__ = [
    # Classes
    "ConfidenceScorer",
    # Models
    "ConfidenceConfig",
    "ConfidenceConfigValidation",
    "ConfidenceFactorScore",
    "ConfidenceFactors",
    "ConfidenceLevel",
    "ConfidenceScoringResult",
    "UncertaintyRange",
    # Functions
    "default_confidence_config",
    "max_uncertainty_range",
    "score_confidence",
    "validate_confidence_config",
    # Constants
    "ADVERSE_FACTORS",
    "CONFIDENCE_THRESHOLDS",
    "CONFIDENCE_WEIGHTS",
    "LEVEL_DESCRIPTIONS",
    "MAX_UNCERTAINTY_MULTIPLIER",
    "UNCERTAINTY_MULTIPLIERS",
]
