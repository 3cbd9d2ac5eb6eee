"""
Unit tests for SizeBasedOverheadCalculator.

Tests tiered and smooth rate selection, fallbacks and the breakdown.
"""

import math

import pytest

from pricing_skills.size_based_overhead import (
    DEFAULT_OVERHEAD_TIERS,
    OverheadConfigurationError,
    OverheadMethod,
    OverheadTier,
    SizeBasedOverheadCalculator,
    calculate_size_based_overhead,
    get_size_based_overhead_rate,
)

BOUNDARIES = [50_000, 200_000, 500_000, 1_000_000]


@pytest.fixture
def calculator():
    return SizeBasedOverheadCalculator()


class TestTieredRates:
    """Tests for the step-function lookup."""

    @pytest.mark.parametrize(
        "size,rate",
        [
            (25_000, 0.18),
            (49_999, 0.18),
            (50_000, 0.16),
            (199_999, 0.16),
            (200_000, 0.14),
            (750_000, 0.12),
            (1_000_000, 0.10),
            (5_000_000, 0.10),
        ],
    )
    def test_rate_by_size(self, calculator, size, rate):
        result = calculator.calculate_rate(size, smooth=False)
        assert result.rate == rate
        assert result.method == OverheadMethod.TIERED

    def test_tiered_rate_is_non_increasing(self, calculator):
        sizes = range(1_000, 2_000_000, 7_500)
        rates = [calculator.calculate_rate(s, smooth=False).rate for s in sizes]
        assert all(a >= b for a, b in zip(rates, rates[1:]))

    def test_tiers_are_sorted_on_construction(self):
        shuffled = list(reversed(DEFAULT_OVERHEAD_TIERS))
        calculator = SizeBasedOverheadCalculator(shuffled)
        assert [t.max_size for t in calculator.tiers] == [t.max_size for t in DEFAULT_OVERHEAD_TIERS]


class TestSmoothRates:
    """Tests for eased interpolation between tiers."""

    @pytest.mark.parametrize("boundary", BOUNDARIES)
    def test_boundary_matches_tiered_rate(self, calculator, boundary):
        smooth = calculator.calculate_rate(boundary, smooth=True).rate
        tiered = calculator.calculate_rate(boundary, smooth=False).rate
        assert smooth == tiered

    @pytest.mark.parametrize(
        "lower,upper",
        [(50_000, 200_000), (200_000, 500_000), (500_000, 1_000_000)],
    )
    def test_midpoint_differs_from_linear_blend(self, calculator, lower, upper):
        lower_rate = calculator.calculate_rate(lower, smooth=False).rate
        upper_rate = calculator.calculate_rate(upper, smooth=False).rate
        midpoint = (lower + upper) / 2
        linear = (lower_rate + upper_rate) / 2

        smooth = calculator.calculate_rate(midpoint, smooth=True).rate

        assert smooth != pytest.approx(linear)
        assert min(lower_rate, upper_rate) <= smooth <= max(lower_rate, upper_rate)

    def test_quadratic_ease_in_value(self, calculator):
        # t = 0.5 between 50k (0.18) and 200k (0.16)
        assert calculator.calculate_rate(125_000).rate == pytest.approx(0.18 - 0.02 * 0.25)

    def test_below_first_boundary_uses_first_rate(self, calculator):
        result = calculator.calculate_rate(10_000)
        assert result.rate == 0.18
        assert result.method == OverheadMethod.SMOOTH

    def test_infinite_top_tier_keeps_lower_rate(self, calculator):
        assert calculator.calculate_rate(5_000_000).rate == 0.12


class TestFallbacks:
    """Tests for empty configurations and invalid sizes."""

    @pytest.mark.parametrize("size", [0, -100])
    def test_non_positive_size_uses_smallest_tier(self, calculator, size):
        result = calculator.calculate_rate(size)
        assert result.method == OverheadMethod.FIXED
        assert result.rate == 0.18
        assert "Project size must be greater than 0" in result.warnings

    def test_empty_tiers_use_default_rate(self):
        result = SizeBasedOverheadCalculator(tiers=[]).calculate_rate(100_000)
        assert result.method == OverheadMethod.FIXED
        assert result.rate == 0.15

    def test_single_tier_always_returns_its_rate(self):
        calculator = SizeBasedOverheadCalculator([OverheadTier(max_size=math.inf, rate=0.13)])
        for size in (1, 75_000, 20_000_000):
            assert calculator.calculate_rate(size, smooth=True).rate == 0.13
            assert calculator.calculate_rate(size, smooth=False).rate == 0.13

    def test_duplicate_bounds_raise(self):
        tiers = [OverheadTier(max_size=100, rate=0.1), OverheadTier(max_size=100, rate=0.2)]
        with pytest.raises(OverheadConfigurationError):
            SizeBasedOverheadCalculator(tiers)

    def test_with_tiers_returns_new_calculator(self, calculator):
        derived = calculator.with_tiers([OverheadTier(max_size=math.inf, rate=0.11)])
        assert derived is not calculator
        assert len(calculator.tiers) == 5
        assert derived.calculate_rate(10_000).rate == 0.11


class TestWarnings:
    def test_large_project_warning(self, calculator):
        result = calculator.calculate_rate(12_000_000)
        assert "Project size exceeds typical range - consider manual rate adjustment" in result.warnings

    def test_low_rate_warning(self):
        calculator = SizeBasedOverheadCalculator([OverheadTier(max_size=math.inf, rate=0.03)])
        result = calculator.calculate_rate(10_000)
        assert "Overhead rate is very low - verify calculation accuracy" in result.warnings


class TestCalculateAndBreakdown:
    """Tests for calculate() and the bucket breakdown."""

    def test_calculate_applies_rate_to_base_cost(self, calculator):
        result = calculator.calculate(100_000, use_smooth_scaling=False)
        assert result.overhead_rate == 0.16
        assert result.overhead_percentage == pytest.approx(16.0)
        assert result.overhead_amount == pytest.approx(16_000)
        assert result.tier_description == "Medium projects ($50k-$200k)"

    @pytest.mark.parametrize("amount", [0.0, 0.03, 150.0, 1234.567, 13_457.891, 98_765.4321])
    def test_breakdown_sums_exactly(self, amount):
        breakdown = SizeBasedOverheadCalculator.breakdown(amount)
        assert breakdown.total == amount

    def test_breakdown_shares(self):
        breakdown = SizeBasedOverheadCalculator.breakdown(10_000)
        assert breakdown.administrative == 4_500
        assert breakdown.equipment == 3_000
        assert breakdown.insurance == 1_500
        assert breakdown.other == pytest.approx(1_000)

    def test_module_functions(self):
        assert get_size_based_overhead_rate(125_000, smooth=False) == 0.16
        result = calculate_size_based_overhead(40_000, smooth=False)
        assert result.overhead_amount == pytest.approx(40_000 * 0.18)
