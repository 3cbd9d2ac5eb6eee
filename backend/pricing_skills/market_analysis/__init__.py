"""
Market Analysis Skill

Benchmarks proposal pricing against historical market data,
estimates win probability and recommends priced package variants.
"""

from .definition import (
    BenchmarkCategory,
    BenchmarkResult,
    InsufficientMarketDataError,
    MarketAnalysisError,
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

from .data_source import HistoricalMarketDataSource, InMemoryMarketDataSource

from .impl import (
    MarketAnalysisEngine,
    analyze_market_conditions,
    benchmark_cost,
    estimate_win_probability,
    get_market_trends,
    get_proposal_stats,
    recommend_packages,
    LABOR_AVAILABILITY,
    MATERIAL_COST_TRENDS,
    REGIONAL_ADJUSTMENTS,
)

__all__ = [
    # Classes
    "HistoricalMarketDataSource",
    "InMemoryMarketDataSource",
    "MarketAnalysisEngine",
    # Models
    "BenchmarkCategory",
    "BenchmarkResult",
    "MarketConditions",
    "MarketDataRecord",
    "MarketTrends",
    "PackageRecommendation",
    "PricingPackage",
    "ProposalRecord",
    "ProposalStats",
    "TrendBucket",
    "WinProbabilityEstimate",
    "WinProbabilityMethod",
    # Exceptions
    "InsufficientMarketDataError",
    "MarketAnalysisError",
    "MarketDataSourceError",
    # Functions
    "analyze_market_conditions",
    "benchmark_cost",
    "estimate_win_probability",
    "get_market_trends",
    "get_proposal_stats",
    "recommend_packages",
    # Constants
    "LABOR_AVAILABILITY",
    "MATERIAL_COST_TRENDS",
    "REGIONAL_ADJUSTMENTS",
]
