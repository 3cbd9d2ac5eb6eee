"""
Risk Factor Scorer - Data Definitions

Pydantic models describing the risk factor catalog and the scored
output of a single factor.

Author: Pricing Engine Team
"""

import math
from enum import Enum
from typing import List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)


class ScoringType(str, Enum):
    """How a raw factor value is converted into a 0-100 score."""
    CATEGORICAL = "CATEGORICAL"
    LINEAR = "LINEAR"
    EXPONENTIAL = "EXPONENTIAL"


class DataType(str, Enum):
    """Shape of the raw value a factor expects."""
    CATEGORICAL = "CATEGORICAL"
    NUMERIC = "NUMERIC"
    PERCENTAGE = "PERCENTAGE"


RiskFactorValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class CategoricalOption(BaseModel):
    """One selectable answer of a categorical factor."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Option label shown to estimators.")
    score: float = Field(..., ge=0, le=100, description="Score assigned to this option.")


class RiskFactorDefinition(BaseModel):
    """
    Catalog definition of a single risk factor.

    Categorical factors carry an ordered list of options; numeric and
    percentage factors carry bounds, a default and a scoring formula.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique factor name.")
    description: str = Field(default="", description="What the factor measures.")
    category_name: str = Field(..., description="Owning risk category.")
    weight: float = Field(..., ge=0, description="Weight within the category.")
    scoring_type: ScoringType = Field(..., description="Scoring method.")
    data_type: DataType = Field(..., description="Expected raw value type.")
    options: List[CategoricalOption] = Field(
        default_factory=list,
        description="Ordered options for categorical factors."
    )
    min_value: Optional[float] = Field(default=None, description="Lower bound of the raw value.")
    max_value: Optional[float] = Field(default=None, description="Upper bound of the raw value.")
    default_value: Optional[float] = Field(default=None, description="Suggested raw value.")
    formula: Optional[str] = Field(
        default=None,
        description="Arithmetic expression producing a 0-100 score from the raw value."
    )
    unit: Optional[str] = Field(default=None, description="Unit of the raw value.")

    @field_validator("name", "category_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        return v.strip()


class RiskCategoryDefinition(BaseModel):
    """A weighted grouping of related risk factors."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique category name.")
    description: str = Field(default="", description="Category description.")
    weight: float = Field(..., ge=0, description="Relative contribution to the total score.")
    sort_order: int = Field(default=0, description="Display order.")
    factors: List[RiskFactorDefinition] = Field(
        default_factory=list,
        description="Factors owned by this category."
    )


class RiskFactorInput(BaseModel):
    """Raw estimator input for one factor."""

    value: Optional[RiskFactorValue] = Field(
        default=None,
        description="Raw value; its type depends on the factor. Missing values score neutral."
    )
    notes: Optional[str] = Field(default=None, description="Free-form estimator notes.")


class FactorScore(BaseModel):
    """Immutable scored record of one factor."""

    model_config = ConfigDict(frozen=True)

    factor_name: str
    category_name: str
    weight: float = Field(ge=0)
    input_value: Optional[RiskFactorValue] = None
    calculated_score: float = Field(ge=0, le=100)
    weighted_score: float = Field(ge=0)
    scoring_method: ScoringType
    data_type: DataType
    notes: Optional[str] = None


class ScoredFactor(BaseModel):
    """A factor score together with the warnings raised while scoring it."""

    score: FactorScore
    warnings: List[str] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


# Custom Exceptions

class FormulaError(ValueError):
    """Base error for risk formula problems."""

    def __init__(self, message: str, formula: str):
        self.formula = formula
        super().__init__(f"{message} (formula: {formula!r})")


class FormulaSyntaxError(FormulaError):
    """The formula text could not be parsed."""

    def __init__(self, message: str, formula: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message, formula)


class FormulaEvaluationError(FormulaError):
    """The formula parsed but could not be evaluated for the given value."""
    pass


def is_finite_number(value: object) -> bool:
    """True for int/float values that are not bool, NaN or infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
