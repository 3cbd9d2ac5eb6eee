"""
Risk Assessment - Default Factor Catalog

Seed catalog of glazing project risk factors and an in-memory
read-only catalog provider.

Author: Pricing Engine Team
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pricing_skills.risk_factor_scorer import (
    CategoricalOption,
    DataType,
    RiskCategoryDefinition,
    RiskFactorDefinition,
    ScoringType,
)


def _categorical(
    name: str,
    category: str,
    weight: float,
    description: str,
    options: Iterable[Tuple[str, float]],
) -> RiskFactorDefinition:
    return RiskFactorDefinition(
        name=name,
        description=description,
        category_name=category,
        weight=weight,
        scoring_type=ScoringType.CATEGORICAL,
        data_type=DataType.CATEGORICAL,
        options=[CategoricalOption(label=label, score=score) for label, score in options],
    )


def _numeric(
    name: str,
    category: str,
    weight: float,
    description: str,
    scoring_type: ScoringType,
    data_type: DataType,
    min_value: float,
    max_value: float,
    default_value: float,
    formula: str,
    unit: str,
) -> RiskFactorDefinition:
    return RiskFactorDefinition(
        name=name,
        description=description,
        category_name=category,
        weight=weight,
        scoring_type=scoring_type,
        data_type=data_type,
        min_value=min_value,
        max_value=max_value,
        default_value=default_value,
        formula=formula,
        unit=unit,
    )


SCHEDULE = "Schedule Risks"
TECHNICAL = "Technical Risks"
FINANCIAL = "Financial Risks"
OPERATIONAL = "Operational Risks"
ENVIRONMENTAL = "Environmental Risks"


DEFAULT_RISK_CATEGORIES: Tuple[RiskCategoryDefinition, ...] = (
    RiskCategoryDefinition(
        name=SCHEDULE,
        description="Timeline, permitting and seasonal exposure",
        weight=25,
        sort_order=1,
        factors=[
            _categorical(
                "Weather Delays", SCHEDULE, 35,
                "Expected weather-related delays for the installation window",
                [
                    ("Minimal Risk (0-5 days)", 10),
                    ("Low Risk (5-10 days)", 25),
                    ("Medium Risk (10-20 days)", 50),
                    ("High Risk (20-30 days)", 75),
                    ("Critical Risk (30+ days)", 100),
                ],
            ),
            _categorical(
                "Permit Delays", SCHEDULE, 25,
                "Status and complexity of required permits",
                [
                    ("Permits in hand", 0),
                    ("Permits pending, expected approval", 20),
                    ("Permits pending, uncertain timeline", 40),
                    ("Permits not yet applied for", 60),
                    ("Complex permitting requirements", 80),
                ],
            ),
            _categorical(
                "Seasonal Constraints", SCHEDULE, 20,
                "Seasonal limits on installation work",
                [
                    ("No seasonal constraints", 0),
                    ("Minor seasonal impact", 15),
                    ("Moderate seasonal constraints", 35),
                    ("Major seasonal constraints", 60),
                    ("Critical seasonal limitations", 85),
                ],
            ),
            _numeric(
                "Material Lead Times", SCHEDULE, 20,
                "Lead time for glass and framing deliveries",
                ScoringType.LINEAR, DataType.NUMERIC,
                min_value=0, max_value=90, default_value=14,
                formula="clamp((days - 7) * 1.5, 0, 100)",
                unit="days",
            ),
        ],
    ),
    RiskCategoryDefinition(
        name=TECHNICAL,
        description="Installation complexity and site constraints",
        weight=20,
        sort_order=2,
        factors=[
            _categorical(
                "Project Complexity", TECHNICAL, 30,
                "Overall technical complexity of the installation",
                [
                    ("Standard installation", 10),
                    ("Minor customizations", 25),
                    ("Moderate complexity", 45),
                    ("High complexity", 70),
                    ("Extreme complexity", 90),
                ],
            ),
            _categorical(
                "New Technology", TECHNICAL, 25,
                "Use of unproven products or systems",
                [
                    ("Proven technology only", 0),
                    ("Minor new elements", 20),
                    ("Some new technology", 40),
                    ("Significant new technology", 65),
                    ("Cutting-edge technology", 85),
                ],
            ),
            _categorical(
                "Site Access", TECHNICAL, 20,
                "Ease of access for crews, cranes and deliveries",
                [
                    ("Easy access", 5),
                    ("Standard access", 15),
                    ("Limited access", 35),
                    ("Difficult access", 60),
                    ("Extreme access challenges", 85),
                ],
            ),
            _numeric(
                "Height and Safety", TECHNICAL, 25,
                "Working height of the installation",
                ScoringType.LINEAR, DataType.NUMERIC,
                min_value=0, max_value=100, default_value=10,
                formula="height * 0.8",
                unit="feet",
            ),
        ],
    ),
    RiskCategoryDefinition(
        name=FINANCIAL,
        description="Cost volatility and economic exposure",
        weight=30,
        sort_order=3,
        factors=[
            _numeric(
                "Material Price Volatility", FINANCIAL, 35,
                "Expected price movement of glass and aluminum",
                ScoringType.EXPONENTIAL, DataType.PERCENTAGE,
                min_value=0, max_value=50, default_value=5,
                formula="pow(volatility * 2, 1.5)",
                unit="%",
            ),
            _categorical(
                "Labor Availability", FINANCIAL, 25,
                "Availability of skilled glaziers in the market",
                [
                    ("Abundant skilled labor", 5),
                    ("Adequate labor pool", 20),
                    ("Limited labor availability", 45),
                    ("Scarce skilled labor", 70),
                    ("Critical labor shortage", 90),
                ],
            ),
            _categorical(
                "Economic Conditions", FINANCIAL, 20,
                "General economic climate for the project",
                [
                    ("Stable economy", 10),
                    ("Minor economic uncertainty", 25),
                    ("Moderate economic volatility", 45),
                    ("High economic uncertainty", 70),
                    ("Economic crisis conditions", 90),
                ],
            ),
            _numeric(
                "Currency Fluctuation", FINANCIAL, 20,
                "Exchange rate exposure on imported materials",
                ScoringType.LINEAR, DataType.PERCENTAGE,
                min_value=0, max_value=30, default_value=2,
                formula="fluctuation * 3",
                unit="%",
            ),
        ],
    ),
    RiskCategoryDefinition(
        name=OPERATIONAL,
        description="Execution risk from partners, equipment and QC",
        weight=15,
        sort_order=4,
        factors=[
            _categorical(
                "Subcontractor Reliability", OPERATIONAL, 40,
                "Track record of the subcontractors involved",
                [
                    ("Proven reliable subcontractors", 5),
                    ("Generally reliable", 20),
                    ("Mixed reliability", 45),
                    ("Questionable reliability", 70),
                    ("Unknown or unreliable", 90),
                ],
            ),
            _categorical(
                "Equipment Availability", OPERATIONAL, 30,
                "Availability of lifts, cranes and specialty tools",
                [
                    ("Equipment readily available", 5),
                    ("Standard equipment needs", 20),
                    ("Some specialized equipment", 40),
                    ("Significant equipment challenges", 65),
                    ("Critical equipment shortages", 85),
                ],
            ),
            _categorical(
                "Quality Control", OPERATIONAL, 30,
                "Stringency of inspection and QC requirements",
                [
                    ("Standard QC requirements", 10),
                    ("Enhanced QC needed", 25),
                    ("Specialized QC procedures", 45),
                    ("Complex QC requirements", 70),
                    ("Extreme QC standards", 90),
                ],
            ),
        ],
    ),
    RiskCategoryDefinition(
        name=ENVIRONMENTAL,
        description="Site and regulatory environment",
        weight=10,
        sort_order=5,
        factors=[
            _categorical(
                "Site Conditions", ENVIRONMENTAL, 40,
                "Physical condition of the work site",
                [
                    ("Ideal site conditions", 5),
                    ("Standard site conditions", 20),
                    ("Challenging site conditions", 45),
                    ("Difficult site conditions", 70),
                    ("Extreme site challenges", 90),
                ],
            ),
            _categorical(
                "Environmental Regulations", ENVIRONMENTAL, 35,
                "Environmental compliance burden",
                [
                    ("Standard compliance", 10),
                    ("Enhanced compliance", 25),
                    ("Specialized compliance", 45),
                    ("Complex compliance", 70),
                    ("Extreme compliance requirements", 90),
                ],
            ),
            _categorical(
                "Weather Sensitivity", ENVIRONMENTAL, 25,
                "Sensitivity of the work to weather",
                [
                    ("Weather independent", 0),
                    ("Minimal weather impact", 15),
                    ("Moderate weather sensitivity", 35),
                    ("High weather sensitivity", 60),
                    ("Extreme weather sensitivity", 85),
                ],
            ),
        ],
    ),
)


class InMemoryRiskFactorCatalog:
    """
    Read-only catalog backed by a fixed tuple of categories.

    Factor lookup is case-insensitive on the factor name.
    """

    def __init__(self, categories: Optional[Sequence[RiskCategoryDefinition]] = None):
        source = DEFAULT_RISK_CATEGORIES if categories is None else categories
        self._categories: Tuple[RiskCategoryDefinition, ...] = tuple(
            sorted(source, key=lambda c: c.sort_order)
        )
        self._factors: Dict[str, RiskFactorDefinition] = {}
        for category in self._categories:
            for factor in category.factors:
                self._factors.setdefault(factor.name.lower(), factor)

    def list_categories(self) -> Sequence[RiskCategoryDefinition]:
        return self._categories

    def get_factor(self, name: str) -> Optional[RiskFactorDefinition]:
        return self._factors.get(name.strip().lower())

    @property
    def factor_names(self) -> List[str]:
        return [f.name for c in self._categories for f in c.factors]

    def __len__(self) -> int:
        return len(self._factors)
