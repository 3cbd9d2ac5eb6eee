"""
Risk Assessment Skill

Weighted multi-factor risk aggregation for glazing proposals.
Produces an overall risk score, level, baseline contingency and
recommendations from raw factor inputs.
"""

from .definition import (
    CategoryScore,
    RiskAssessmentError,
    RiskCatalogUnavailableError,
    RiskFactorCatalog,
    RiskLevel,
    RiskScoringResult,
)

from .catalog import (
    InMemoryRiskFactorCatalog,
    DEFAULT_RISK_CATEGORIES,
)

from .impl import (
    RiskAssessmentEngine,
    assess_project_risk,
    build_fallback_assessment,
    classify_risk_level,
    CONTINGENCY_RATES,
    LEVEL_RECOMMENDATIONS,
    RISK_LEVEL_THRESHOLDS,
)

__all__ = [
    # Classes
    "InMemoryRiskFactorCatalog",
    "RiskAssessmentEngine",
    # Models
    "CategoryScore",
    "RiskFactorCatalog",
    "RiskLevel",
    "RiskScoringResult",
    # Exceptions
    "RiskAssessmentError",
    "RiskCatalogUnavailableError",
    # Functions
    "assess_project_risk",
    "build_fallback_assessment",
    "classify_risk_level",
    # Constants
    "CONTINGENCY_RATES",
    "DEFAULT_RISK_CATEGORIES",
    "LEVEL_RECOMMENDATIONS",
    "RISK_LEVEL_THRESHOLDS",
]
