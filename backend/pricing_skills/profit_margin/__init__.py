"""
Risk-Adjusted Profit Margin Skill

Scales a base profit margin by the risk level and adds secondary
adjustments for technical, timeline, client and market signals.
"""

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

from .impl import (
    RiskAdjustedProfitMarginCalculator,
    calculate_risk_adjusted_margin,
    default_margin_config,
    validate_margin_config,
    DEFAULT_RISK_MULTIPLIERS,
    DEFAULT_SECONDARY_TRIGGERS,
)

__all__ = [
    # Classes
    "RiskAdjustedProfitMarginCalculator",
    # Models
    "MarginBound",
    "MarginConfigValidation",
    "ProfitMarginConfig",
    "ProfitMarginResult",
    "RiskLevelMultiplier",
    "SecondaryTrigger",
    "TriggerAdjustment",
    # Exceptions
    "MarginConfigurationError",
    # Functions
    "calculate_risk_adjusted_margin",
    "default_margin_config",
    "validate_margin_config",
    # Constants
    "DEFAULT_RISK_MULTIPLIERS",
    "DEFAULT_SECONDARY_TRIGGERS",
]
