"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing the pricing pipeline.
Collaborators (risk catalog, market data source, audit log) are either
in-memory or mocked so no test touches shared process state.

Usage:
    async def test_example(orchestrator, legacy_payload):
        result = await orchestrator.calculate(legacy_payload)
        assert result.calculation_method == "legacy"
"""

from datetime import date, timedelta

import pytest
from unittest.mock import AsyncMock, MagicMock


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


@pytest.fixture
def market_record():
    """
    Factory fixture for creating MarketDataRecord instances.

    Usage:
        def test_example(market_record):
            record = market_record(62.0, region="West", days_ago=30)
    """
    from pricing_skills.market_analysis import MarketDataRecord

    def _create_record(
        value: float,
        region: str = "Midwest",
        project_type: str | None = "commercial",
        days_ago: int = 30,
    ):
        return MarketDataRecord(
            region=region,
            value=value,
            project_type=project_type,
            effective_date=date.today() - timedelta(days=days_ago),
        )
    return _create_record


@pytest.fixture
def market_records(market_record):
    """
    Midwest commercial cost-per-sqft history, symmetric around 50.

    Usage:
        def test_example(market_records):
            assert len(market_records) == 5
    """
    return [
        market_record(40.0),
        market_record(45.0),
        market_record(50.0),
        market_record(55.0),
        market_record(60.0, days_ago=500),
    ]


@pytest.fixture
def market_data_source(market_records):
    """
    InMemoryMarketDataSource seeded with ``market_records``.

    Usage:
        async def test_example(market_data_source):
            records = await market_data_source.fetch_records(region="midwest")
    """
    from pricing_skills.market_analysis import InMemoryMarketDataSource

    return InMemoryMarketDataSource(market_records)


@pytest.fixture
def failing_market_data_source():
    """
    Data source whose fetch_records() raises.

    Usage:
        async def test_example(failing_market_data_source):
            engine = MarketAnalysisEngine(failing_market_data_source)
    """
    source = AsyncMock()
    source.fetch_records.side_effect = ConnectionError("market database offline")
    return source


# =============================================================================
# RISK CATALOG FIXTURES
# =============================================================================


@pytest.fixture
def failing_catalog():
    """
    RiskFactorCatalog mock that reports itself unavailable.

    Usage:
        def test_example(failing_catalog):
            assert RiskAssessmentEngine(catalog=failing_catalog).assess({}) is None
    """
    from pricing_skills.risk_assessment import RiskCatalogUnavailableError, RiskFactorCatalog

    catalog = MagicMock(spec=RiskFactorCatalog)
    catalog.list_categories.side_effect = RiskCatalogUnavailableError("catalog offline")
    return catalog


# =============================================================================
# ORCHESTRATOR FIXTURES
# =============================================================================


@pytest.fixture
def audit_log():
    """
    Fresh CalculationAuditLog isolated from the process-wide one.

    Usage:
        def test_example(audit_log):
            assert len(audit_log) == 0
    """
    from proposal_pricing.services.audit_log import CalculationAuditLog

    return CalculationAuditLog(max_entries=100)


@pytest.fixture
def orchestrator(market_data_source, audit_log):
    """
    EnhancedCalculationOrchestrator wired to in-memory collaborators.

    Usage:
        async def test_example(orchestrator):
            result = await orchestrator.calculate({"base_cost": 1000})
    """
    from proposal_pricing.pipeline.orchestrator import EnhancedCalculationOrchestrator

    return EnhancedCalculationOrchestrator(
        market_data_source=market_data_source,
        audit_log=audit_log,
    )


@pytest.fixture
def test_container(market_data_source, audit_log):
    """
    DependencyContainer with in-memory overrides.

    Usage:
        def test_example(test_container):
            orchestrator = test_container.orchestrator
    """
    from proposal_pricing.services.container import DependencyContainer

    container = DependencyContainer()
    container.override_market_data_source(market_data_source)
    container.override_audit_log(audit_log)
    return container


@pytest.fixture
def isolated_container(test_container, monkeypatch):
    """
    Makes ``test_container`` the one returned by get_container().

    Usage:
        async def test_example(isolated_container):
            result = await calculate_enhanced_proposal_pricing({...})
    """
    from proposal_pricing.services import container as container_module

    monkeypatch.setattr(container_module, "get_container", lambda: test_container)
    return test_container


# =============================================================================
# PAYLOAD FIXTURES
# =============================================================================


@pytest.fixture
def legacy_payload():
    """Request without risk factor inputs."""
    return {
        "base_cost": 1000,
        "overhead_percentage": 15,
        "profit_margin": 20,
        "risk_score": 5,
    }


@pytest.fixture
def enhanced_payload():
    """
    Request exercising every enhanced stage.

    Usage:
        async def test_example(orchestrator, enhanced_payload):
            result = await orchestrator.calculate(enhanced_payload)
            assert result.calculation_method == "enhanced"
    """
    return {
        "base_cost": 100_000,
        "profit_margin": 20,
        "square_footage": 2_000,
        "region": "Midwest",
        "material_type": "glass",
        "project_type": "commercial",
        "risk_factor_inputs": {
            "Weather Delays": {"value": "Medium Risk (10-20 days)"},
            "Material Lead Times": {"value": 45},
            "Project Complexity": {"value": "Standard installation"},
        },
        "confidence_factors": {
            "data_completeness": 80,
            "historical_accuracy": 70,
        },
    }


# =============================================================================
# LOGGER FIXTURES
# =============================================================================


@pytest.fixture
def mock_logger():
    """
    Mock PipelineLogger for asserting on pipeline logging.

    Usage:
        def test_example(mock_logger):
            orchestrator = EnhancedCalculationOrchestrator(logger=mock_logger)
            mock_logger.pipeline_start.assert_called_once()
    """
    logger = MagicMock()
    logger.node_enter = MagicMock()
    logger.node_exit = MagicMock()
    logger.stage_degraded = MagicMock()
    logger.debug = MagicMock()
    logger.error = MagicMock()
    return logger


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
