"""
Unit tests for CalculationAuditLog.

Tests bounded retention, newest-first queries, filters, statistics and
clearing.
"""

from datetime import timedelta

import pytest

from proposal_pricing.schemas.audit import AuditLogFilter, CalculationAuditLogEntry
from proposal_pricing.schemas.responses import utc_now
from proposal_pricing.services.audit_log import CalculationAuditLog


def entry(calculation_id: str, **overrides) -> CalculationAuditLogEntry:
    fields = {
        "calculation_id": calculation_id,
        "calculation_method": "enhanced",
        "risk_assessment_used": True,
        "fallback_used": False,
        "execution_time": 10.0,
    }
    fields.update(overrides)
    return CalculationAuditLogEntry(**fields)


@pytest.fixture
def populated_log():
    log = CalculationAuditLog(max_entries=10)
    log.append(entry("a", execution_time=4.0))
    log.append(entry("b", execution_time=8.0, error_occurred=True))
    log.append(entry("c", execution_time=12.0, calculation_method="legacy", risk_assessment_used=False))
    log.append(entry("d", execution_time=16.0, fallback_used=True))
    return log


class TestQueries:
    def test_newest_first(self, populated_log):
        ids = [e.calculation_id for e in populated_log.get_entries()]
        assert ids == ["d", "c", "b", "a"]

    def test_limit(self, populated_log):
        ids = [e.calculation_id for e in populated_log.get_entries(AuditLogFilter(limit=2))]
        assert ids == ["d", "c"]

    def test_exclude_errors(self, populated_log):
        entries = populated_log.get_entries(AuditLogFilter(include_errors=False))
        assert "b" not in [e.calculation_id for e in entries]
        assert len(entries) == 3

    def test_by_calculation_id(self, populated_log):
        entries = populated_log.get_entries(AuditLogFilter(calculation_id="c"))
        assert len(entries) == 1
        assert entries[0].calculation_method == "legacy"

    def test_since(self):
        log = CalculationAuditLog(max_entries=10)
        log.append(entry("old", timestamp=utc_now() - timedelta(days=3)))
        log.append(entry("new"))

        entries = log.get_entries(AuditLogFilter(since=utc_now() - timedelta(days=1)))

        assert [e.calculation_id for e in entries] == ["new"]

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            AuditLogFilter(limit=0)


class TestRetention:
    def test_oldest_entries_evicted_at_capacity(self):
        log = CalculationAuditLog(max_entries=3)
        for calculation_id in "abcde":
            log.append(entry(calculation_id))

        assert len(log) == 3
        assert [e.calculation_id for e in log.get_entries()] == ["e", "d", "c"]

    def test_clear_all_returns_count(self, populated_log):
        assert populated_log.clear_all() == 4
        assert len(populated_log) == 0
        assert populated_log.get_entries() == []

    def test_clear_older_than(self):
        log = CalculationAuditLog(max_entries=10)
        log.append(entry("stale", timestamp=utc_now() - timedelta(days=45)))
        log.append(entry("recent", timestamp=utc_now() - timedelta(days=2)))
        log.append(entry("fresh"))

        assert log.clear_older_than(30) == 1
        assert log.clear_older_than(1) == 1
        assert [e.calculation_id for e in log.get_entries()] == ["fresh"]


class TestStatistics:
    def test_rates_and_average(self, populated_log):
        stats = populated_log.statistics()

        assert stats.total_calculations == 4
        assert stats.average_execution_time == pytest.approx(10.0)
        assert stats.risk_assessment_usage_rate == pytest.approx(0.75)
        assert stats.fallback_usage_rate == pytest.approx(0.25)
        assert stats.error_rate == pytest.approx(0.25)

    def test_empty_log(self):
        stats = CalculationAuditLog(max_entries=5).statistics()
        assert stats.total_calculations == 0
        assert stats.average_execution_time == 0.0
