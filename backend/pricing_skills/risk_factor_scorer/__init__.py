"""
Risk Factor Scorer Skill

Normalizes a single raw risk factor input into a 0-100 score.
Numeric factors are scored through compiled declarative formulas.
"""

from .definition import (
    CategoricalOption,
    DataType,
    FactorScore,
    FormulaError,
    FormulaEvaluationError,
    FormulaSyntaxError,
    RiskCategoryDefinition,
    RiskFactorDefinition,
    RiskFactorInput,
    RiskFactorValue,
    ScoredFactor,
    ScoringType,
    is_finite_number,
)

from .formula import CompiledFormula, compile_formula

from .impl import (
    RiskFactorScorer,
    clamp_score,
    normalize_to_scale,
    score_risk_factor,
    validate_factor_input,
    NEUTRAL_SCORE,
)

__all__ = [
    # Classes
    "CompiledFormula",
    "RiskFactorScorer",
    # Models
    "CategoricalOption",
    "DataType",
    "FactorScore",
    "RiskCategoryDefinition",
    "RiskFactorDefinition",
    "RiskFactorInput",
    "RiskFactorValue",
    "ScoredFactor",
    "ScoringType",
    # Exceptions
    "FormulaError",
    "FormulaEvaluationError",
    "FormulaSyntaxError",
    # Functions
    "clamp_score",
    "compile_formula",
    "is_finite_number",
    "normalize_to_scale",
    "score_risk_factor",
    "validate_factor_input",
    # Constants
    "NEUTRAL_SCORE",
]
