"""
Market Analysis - Implementation

Market-facing calculations for proposal pricing:
- Market conditions (material trend, labor, regional adjustment)
- Cost benchmarking against historical records (numpy statistics)
- Win probability estimation with a risk-only fallback
- Good / better / best package recommendations
- Pure trend and proposal statistics aggregation

Only MarketAnalysisEngine.benchmark() touches the data source; every
other function is pure.

Author: Pricing Engine Team
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from .data_source import HistoricalMarketDataSource, InMemoryMarketDataSource
from .definition import (
    BenchmarkCategory,
    BenchmarkResult,
    InsufficientMarketDataError,
    MarketConditions,
    MarketDataRecord,
    MarketDataSourceError,
    MarketTrends,
    PackageRecommendation,
    PricingPackage,
    ProposalRecord,
    ProposalStats,
    TrendBucket,
    WinProbabilityEstimate,
    WinProbabilityMethod,
)

logger = logging.getLogger(__name__)


# Market condition tables
MATERIAL_COST_TRENDS: Dict[str, float] = {
    "glass": 0.08,
    "aluminum": 0.05,
    "steel": 0.12,
}
DEFAULT_MATERIAL_TREND = 0.06

LABOR_AVAILABILITY: Dict[str, float] = {
    "northeast": 70,
    "midwest": 80,
    "south": 60,
    "west": 75,
}
DEFAULT_LABOR_AVAILABILITY = 70.0

REGIONAL_ADJUSTMENTS: Dict[str, float] = {
    "northeast": 1.10,
    "midwest": 1.00,
    "south": 0.95,
    "west": 1.08,
}
DEFAULT_REGIONAL_ADJUSTMENT = 1.0

# Benchmark
DEFAULT_RECENT_DAYS = 365
FULL_CONFIDENCE_SAMPLE_SIZE = 20
SMALL_SAMPLE_SIZE = 5
LOW_PERCENTILE = 25.0
HIGH_PERCENTILE = 75.0

# Win probability
MIN_MARKET_WIN_PROBABILITY = 5.0
MAX_MARKET_WIN_PROBABILITY = 95.0
MIN_RISK_ONLY_WIN_PROBABILITY = 10.0

# Packages: (name, tier)
PACKAGE_TIERS = (
    ("Essential", "good"),
    ("Standard", "better"),
    ("Premium", "best"),
)
PACKAGE_NOTES = {
    "good": "Lean scope and margin to maximise win probability",
    "better": "Balanced scope and margin",
    "best": "Premium scope and margin for value-focused clients",
}


def _key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def analyze_market_conditions(region: str, material_type: str) -> MarketConditions:
    """Look up market signals for ``region`` and ``material_type``."""
    notes: List[str] = []

    trend = MATERIAL_COST_TRENDS.get(_key(material_type))
    if trend is None:
        trend = DEFAULT_MATERIAL_TREND
        notes.append(
            f"No specific trend for material '{material_type}', using default "
            f"{DEFAULT_MATERIAL_TREND:.0%}."
        )

    labor = LABOR_AVAILABILITY.get(_key(region))
    if labor is None:
        labor = DEFAULT_LABOR_AVAILABILITY
        notes.append(
            f"No labor data for region '{region}', using default {DEFAULT_LABOR_AVAILABILITY:g}."
        )

    adjustment = REGIONAL_ADJUSTMENTS.get(_key(region))
    if adjustment is None:
        adjustment = DEFAULT_REGIONAL_ADJUSTMENT
        notes.append(f"No regional adjustment for '{region}', using 1.0.")

    score = 100 - trend * 50 - (100 - labor) * 0.5 - (adjustment - 1) * 100
    return MarketConditions(
        region=region,
        material_type=material_type,
        material_cost_trend=trend,
        labor_availability_score=labor,
        regional_adjustment_factor=adjustment,
        market_condition_score=max(0, min(100, round(score))),
        notes=notes,
    )


def _categorize(percentile: float) -> BenchmarkCategory:
    if percentile < LOW_PERCENTILE:
        return BenchmarkCategory.LOW
    if percentile < HIGH_PERCENTILE:
        return BenchmarkCategory.COMPETITIVE
    return BenchmarkCategory.HIGH


def benchmark_cost(
    candidate_value: float,
    region: str,
    records: Iterable[MarketDataRecord],
    project_type: Optional[str] = None,
    since: Optional[date] = None,
    reference_date: Optional[date] = None,
    recent_days: int = DEFAULT_RECENT_DAYS,
) -> BenchmarkResult:
    """
    Benchmark ``candidate_value`` against historical records.

    Records are filtered by region, then by project type and ``since``.
    If the project type filter leaves nothing the region-wide set is used
    and a note says so.

    Raises:
        InsufficientMarketDataError: If no record matches the region.
    """
    notes: List[str] = []
    regional = [r for r in records if _key(r.region) == _key(region)]
    if since is not None:
        regional = [r for r in regional if r.effective_date >= since]

    selected = regional
    matched_type = None
    if project_type:
        typed = [r for r in regional if _key(r.project_type) == _key(project_type)]
        if typed:
            selected = typed
            matched_type = project_type
        elif regional:
            notes.append(
                f"No records for project type '{project_type}'; using all {region} records."
            )

    if not selected:
        raise InsufficientMarketDataError(region, project_type)

    values = np.array([r.value for r in selected], dtype=float)
    n = int(values.size)
    average = float(np.mean(values))
    median = float(np.median(values))
    std_dev = float(np.std(values))

    below = int(np.count_nonzero(values < candidate_value))
    equal = int(np.count_nonzero(values == candidate_value))
    percentile = (below + 0.5 * equal) / n * 100
    variance = (candidate_value - average) / average * 100 if average else 0.0
    category = _categorize(percentile)

    today = reference_date or date.today()
    cutoff = today - timedelta(days=recent_days)
    recent = sum(1 for r in selected if r.effective_date >= cutoff)
    confidence = min(1.0, n / FULL_CONFIDENCE_SAMPLE_SIZE) * (0.7 + 0.3 * recent / n)

    notes.append(f"Compared against {n} historical record(s) for {region}.")
    direction = "above" if variance >= 0 else "below"
    notes.append(
        f"Proposed {candidate_value:.2f} is {abs(variance):.1f}% {direction} "
        f"the market average of {average:.2f}."
    )
    if category == BenchmarkCategory.HIGH:
        notes.append("Pricing is in the upper quartile of the market.")
    elif category == BenchmarkCategory.LOW:
        notes.append("Pricing is in the lower quartile of the market.")
    if n < SMALL_SAMPLE_SIZE:
        notes.append("Small sample size; treat the benchmark as indicative only.")
    if recent == 0:
        notes.append(f"No records from the last {recent_days} days.")

    return BenchmarkResult(
        candidate_value=candidate_value,
        region=region,
        project_type=matched_type,
        market_average=average,
        market_median=median,
        market_std_dev=std_dev,
        percentile=percentile,
        variance_from_average=variance,
        category=category,
        confidence=confidence,
        sample_size=n,
        recent_sample_size=recent,
        notes=notes,
    )


def estimate_win_probability(
    cost_per_unit: float,
    risk_score: float,
    market_percentile: Optional[float] = None,
    market_average: Optional[float] = None,
) -> WinProbabilityEstimate:
    """
    Estimate the chance of winning, 0-100.

    Non-increasing in both price and risk. Without market data the
    estimate depends on risk only and carries a warning.
    """
    risk = max(0.0, min(100.0, risk_score))

    if market_percentile is None:
        probability = min(100.0, max(MIN_RISK_ONLY_WIN_PROBABILITY, 100 - 0.8 * risk))
        return WinProbabilityEstimate(
            probability=probability,
            method=WinProbabilityMethod.RISK_ONLY,
            warnings=[
                "No matching historical market data; win probability estimated from risk only"
            ],
        )

    premium = 0.0
    if market_average and market_average > 0 and cost_per_unit > 0:
        premium = max(0.0, (cost_per_unit / market_average - 1) * 100)
    percentile = max(0.0, min(100.0, market_percentile))
    probability = 100 - 0.45 * percentile - 0.35 * risk - 0.2 * premium
    probability = max(MIN_MARKET_WIN_PROBABILITY, min(MAX_MARKET_WIN_PROBABILITY, probability))
    return WinProbabilityEstimate(probability=probability, method=WinProbabilityMethod.MARKET)


def recommend_packages(
    base_cost: float,
    market_average: Optional[float] = None,
    market_percentile: Optional[float] = None,
    win_probability: float = 50.0,
    min_margin: float = 5.0,
    max_margin: float = 35.0,
) -> PackageRecommendation:
    """
    Build good / better / best package variants.

    Margins are spread over [min_margin, max_margin] and pulled down
    when the market already sees the price as high (and up when low).
    ``market_average`` is compared with the package price directly.
    """
    errors: List[str] = []
    if min_margin > max_margin:
        errors.append("Minimum margin must be less than or equal to maximum margin")
    if base_cost < 0:
        errors.append("Base cost must not be negative")
    if errors:
        return PackageRecommendation(errors=errors)

    warnings: List[str] = []
    if market_percentile is None:
        fractions = (0.0, 0.5, 1.0)
        warnings.append("No market percentile available; margins spread evenly")
    elif market_percentile > HIGH_PERCENTILE:
        fractions = (0.0, 0.25, 0.5)
    elif market_percentile < LOW_PERCENTILE:
        fractions = (0.5, 0.75, 1.0)
    else:
        fractions = (0.0, 0.5, 1.0)

    span = max_margin - min_margin
    middle = (min_margin + max_margin) / 2
    packages = []
    for (name, tier), fraction in zip(PACKAGE_TIERS, fractions):
        margin = min_margin + span * fraction
        price = base_cost * (1 + margin / 100)
        notes = [PACKAGE_NOTES[tier]]

        premium = 0.0
        if market_average and market_average > 0:
            delta = (price / market_average - 1) * 100
            premium = max(0.0, delta)
            direction = "above" if delta >= 0 else "below"
            notes.append(f"Priced {abs(delta):.1f}% {direction} the market average")
        else:
            notes.append("No market average available for comparison")

        estimate = win_probability - (margin - middle) * 1.5 - premium * 0.5
        packages.append(
            PricingPackage(
                name=name,
                tier=tier,
                margin=margin,
                price=price,
                estimated_win_probability=max(0.0, min(100.0, estimate)),
                notes=notes,
            )
        )
    return PackageRecommendation(packages=packages, warnings=warnings)


def _bucket(values: Sequence[float]) -> TrendBucket:
    array = np.array(values, dtype=float)
    return TrendBucket(
        count=int(array.size),
        average=float(np.mean(array)),
        minimum=float(np.min(array)),
        maximum=float(np.max(array)),
    )


def get_market_trends(records: Iterable[MarketDataRecord]) -> MarketTrends:
    """Summarise market records by region, project type and month."""
    records = list(records)
    if not records:
        return MarketTrends()

    by_region: Dict[str, List[float]] = defaultdict(list)
    by_type: Dict[str, List[float]] = defaultdict(list)
    by_month: Dict[str, List[float]] = defaultdict(list)
    for record in records:
        by_region[record.region].append(record.value)
        by_type[record.project_type or "unspecified"].append(record.value)
        by_month[record.effective_date.strftime("%Y-%m")].append(record.value)

    return MarketTrends(
        overall=_bucket([r.value for r in records]),
        by_region={k: _bucket(v) for k, v in sorted(by_region.items())},
        by_project_type={k: _bucket(v) for k, v in sorted(by_type.items())},
        by_month={k: _bucket(v) for k, v in sorted(by_month.items())},
    )


def _average_by(proposals: Sequence[ProposalRecord], key) -> Dict[str, float]:
    groups: Dict[str, List[float]] = defaultdict(list)
    for proposal in proposals:
        groups[key(proposal) or "unspecified"].append(proposal.total_cost)
    return {k: float(np.mean(v)) for k, v in sorted(groups.items())}


def get_proposal_stats(proposals: Iterable[ProposalRecord]) -> ProposalStats:
    """Counts and averages over historical proposals."""
    proposals = list(proposals)
    if not proposals:
        return ProposalStats()

    by_status: Dict[str, int] = defaultdict(int)
    for proposal in proposals:
        by_status[proposal.status] += 1

    per_sqft = [
        p.total_cost / p.square_footage for p in proposals if p.square_footage
    ]
    margins = [p.profit_margin for p in proposals if p.profit_margin is not None]
    decided = by_status.get("won", 0) + by_status.get("lost", 0)

    return ProposalStats(
        total_proposals=len(proposals),
        by_status=dict(sorted(by_status.items())),
        average_total_cost=float(np.mean([p.total_cost for p in proposals])),
        average_cost_per_square_foot=float(np.mean(per_sqft)) if per_sqft else None,
        average_profit_margin=float(np.mean(margins)) if margins else None,
        average_cost_by_status=_average_by(proposals, lambda p: p.status),
        average_cost_by_region=_average_by(proposals, lambda p: p.region),
        average_cost_by_project_type=_average_by(proposals, lambda p: p.project_type),
        win_rate=by_status.get("won", 0) / decided * 100 if decided else None,
    )


class MarketAnalysisEngine:
    """
    Market analysis bound to a historical data source.

    Usage:
        engine = MarketAnalysisEngine(data_source)
        benchmark = await engine.benchmark(52.5, region="West", project_type="commercial")
        estimate = engine.estimate_win_probability(52.5, 40, benchmark)
    """

    def __init__(
        self,
        data_source: Optional[HistoricalMarketDataSource] = None,
        recent_days: int = DEFAULT_RECENT_DAYS,
    ):
        self.data_source = data_source if data_source is not None else InMemoryMarketDataSource()
        self.recent_days = recent_days

    def analyze_conditions(self, region: str, material_type: str) -> MarketConditions:
        return analyze_market_conditions(region, material_type)

    async def benchmark(
        self,
        candidate_value: float,
        region: str,
        project_type: Optional[str] = None,
        since: Optional[date] = None,
        reference_date: Optional[date] = None,
    ) -> BenchmarkResult:
        """
        Fetch a snapshot for ``region`` and benchmark against it.

        Raises:
            MarketDataSourceError: If the data source fails.
            InsufficientMarketDataError: If no records match.
        """
        try:
            records = await self.data_source.fetch_records(region=region, since=since)
        except Exception as e:
            logger.error(f"Market data fetch failed for region '{region}': {e}")
            raise MarketDataSourceError("fetch_records failed", original_error=e) from e

        return benchmark_cost(
            candidate_value,
            region,
            records,
            project_type=project_type,
            reference_date=reference_date,
            recent_days=self.recent_days,
        )

    @staticmethod
    def estimate_win_probability(
        cost_per_unit: float,
        risk_score: float,
        benchmark: Optional[BenchmarkResult] = None,
    ) -> WinProbabilityEstimate:
        if benchmark is None:
            return estimate_win_probability(cost_per_unit, risk_score)
        return estimate_win_probability(
            cost_per_unit,
            risk_score,
            market_percentile=benchmark.percentile,
            market_average=benchmark.market_average,
        )

    @staticmethod
    def recommend_packages(
        base_cost: float,
        benchmark: Optional[BenchmarkResult],
        win_probability: float,
        min_margin: float,
        max_margin: float,
        square_footage: Optional[float] = None,
    ) -> PackageRecommendation:
        """Packages priced against the benchmark scaled to the whole project."""
        market_average = None
        percentile = None
        if benchmark is not None:
            percentile = benchmark.percentile
            if square_footage:
                market_average = benchmark.market_average * square_footage
        return recommend_packages(
            base_cost,
            market_average=market_average,
            market_percentile=percentile,
            win_probability=win_probability,
            min_margin=min_margin,
            max_margin=max_margin,
        )
