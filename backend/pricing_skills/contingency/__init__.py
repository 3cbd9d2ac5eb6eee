"""
Contingency Recommendation Skill

Merges the risk assessment's baseline contingency with market signals
into one recommended rate.
"""

from .definition import ContingencyRecommendation

from .impl import (
    recommend_contingency,
    DEFAULT_RECOMMENDATION,
    MAX_CONTINGENCY_RATE,
    MIN_CONTINGENCY_RATE,
)

__all__ = [
    # Models
    "ContingencyRecommendation",
    # Functions
    "recommend_contingency",
    # Constants
    "DEFAULT_RECOMMENDATION",
    "MAX_CONTINGENCY_RATE",
    "MIN_CONTINGENCY_RATE",
]
