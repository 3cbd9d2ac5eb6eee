"""
Dependency Injection Container.

Centralises the collaborators of the pricing pipeline so convenience
call sites share one orchestrator, one catalog, one market data source
and one audit log, while tests can swap any of them.

Example:
    from proposal_pricing.services.container import get_container

    container = get_container()
    container.override_market_data_source(InMemoryMarketDataSource(records))
    result = await container.orchestrator.calculate(payload)
"""

from functools import lru_cache
from typing import Optional

from pricing_skills.market_analysis import HistoricalMarketDataSource, InMemoryMarketDataSource
from pricing_skills.risk_assessment import InMemoryRiskFactorCatalog, RiskFactorCatalog

from proposal_pricing.core.logging import PipelineLogger
from proposal_pricing.services.audit_log import CalculationAuditLog, get_audit_log


class DependencyContainer:
    """
    Centralized container for pricing dependencies.

    Attributes:
        _catalog: Cached risk factor catalog.
        _market_data_source: Cached historical market data source.
        _audit_log: Cached calculation audit log.
        _orchestrator: Cached EnhancedCalculationOrchestrator.
        _logger: Logger instance for pipeline tracing.
    """

    def __init__(self) -> None:
        """Initialize the container with lazy service references."""
        self._catalog: Optional[RiskFactorCatalog] = None
        self._market_data_source: Optional[HistoricalMarketDataSource] = None
        self._audit_log: Optional[CalculationAuditLog] = None
        self._orchestrator = None
        self._logger: Optional[PipelineLogger] = None

    @property
    def catalog(self) -> RiskFactorCatalog:
        if self._catalog is None:
            self._catalog = InMemoryRiskFactorCatalog()
        return self._catalog

    @property
    def market_data_source(self) -> HistoricalMarketDataSource:
        if self._market_data_source is None:
            self._market_data_source = InMemoryMarketDataSource()
        return self._market_data_source

    @property
    def audit_log(self) -> CalculationAuditLog:
        """Defaults to the process-wide shared audit log."""
        if self._audit_log is None:
            self._audit_log = get_audit_log()
        return self._audit_log

    @property
    def logger(self) -> PipelineLogger:
        if self._logger is None:
            self._logger = PipelineLogger("orchestrator")
        return self._logger

    @property
    def orchestrator(self):
        """
        Get the EnhancedCalculationOrchestrator wired to this container.

        Returns:
            Orchestrator with its pricing graph compiled.
        """
        if self._orchestrator is None:
            # Import here to avoid circular imports
            from proposal_pricing.pipeline.orchestrator import EnhancedCalculationOrchestrator
            self._orchestrator = EnhancedCalculationOrchestrator(
                catalog=self.catalog,
                market_data_source=self.market_data_source,
                audit_log=self.audit_log,
                logger=self.logger,
            )
        return self._orchestrator

    def reset(self) -> None:
        """Drop every cached service; the next access rebuilds it."""
        self._catalog = None
        self._market_data_source = None
        self._audit_log = None
        self._orchestrator = None
        self._logger = None

    def override_catalog(self, catalog: RiskFactorCatalog) -> None:
        self._catalog = catalog
        # Rebuild orchestrator to pick up the new catalog
        self._orchestrator = None

    def override_market_data_source(self, data_source: HistoricalMarketDataSource) -> None:
        self._market_data_source = data_source
        self._orchestrator = None

    def override_audit_log(self, audit_log: CalculationAuditLog) -> None:
        self._audit_log = audit_log
        self._orchestrator = None


@lru_cache(maxsize=1)
def get_container() -> DependencyContainer:
    """
    Get the singleton DependencyContainer instance.

    Returns:
        The shared container.
    """
    return DependencyContainer()


def reset_container() -> None:
    """
    Reset the singleton container.

    Clears the lru_cache so the next get_container() builds a fresh one.
    """
    get_container.cache_clear()
