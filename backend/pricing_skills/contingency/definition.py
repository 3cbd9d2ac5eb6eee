"""
Contingency Recommendation - Data Definitions

Author: Pricing Engine Team
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class ContingencyRecommendation(BaseModel):
    """Recommended contingency rate with the reasoning behind it."""

    recommended_rate: float = Field(ge=0, le=1, description="Final contingency rate.")
    baseline_rate: float = Field(ge=0, le=1, description="Rate implied by the risk level.")
    adjustments: Dict[str, float] = Field(
        default_factory=dict,
        description="Rate added per market signal, keyed by signal name."
    )
    recommendations: List[str] = Field(default_factory=list)
    explanation: str = ""

    @property
    def recommended_percentage(self) -> float:
        return self.recommended_rate * 100
