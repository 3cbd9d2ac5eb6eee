"""
Enhanced Calculation Orchestrator.

Validates the request, runs the compiled pricing graph, assembles the
EnhancedCalculationResult and appends one audit log entry per call.

Example:
    orchestrator = EnhancedCalculationOrchestrator()
    result = await orchestrator.calculate({
        "base_cost": 250_000,
        "square_footage": 5_000,
        "region": "West",
        "material_type": "glass",
        "risk_factor_inputs": {"Weather Delays": {"value": "Medium"}},
    })
    print(result.total_cost, result.warnings)
"""

from collections.abc import Mapping
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from pricing_skills.confidence_scoring import ConfidenceScorer, max_uncertainty_range
from pricing_skills.market_analysis import HistoricalMarketDataSource, MarketAnalysisEngine
from pricing_skills.profit_margin import ProfitMarginConfig, RiskAdjustedProfitMarginCalculator
from pricing_skills.risk_assessment import RiskAssessmentEngine, RiskFactorCatalog
from pricing_skills.size_based_overhead import SizeBasedOverheadCalculator

from proposal_pricing.core.config import Settings, settings as default_settings
from proposal_pricing.core.exceptions import CalculationInputError, ConfigurationError
from proposal_pricing.core.logging import PipelineLogger
from proposal_pricing.pipeline.nodes import PricingStages
from proposal_pricing.pipeline.pricing_graph import build_pricing_graph
from proposal_pricing.pipeline.state import create_initial_state, new_calculation_id
from proposal_pricing.schemas.audit import AuditLogFilter, CalculationAuditLogEntry, CalculationStatistics
from proposal_pricing.schemas.requests import EnhancedCalculationInput
from proposal_pricing.schemas.responses import AuditTrail, EnhancedCalculationResult
from proposal_pricing.services.audit_log import CalculationAuditLog, get_audit_log


def _field_errors(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in item['loc']) or 'input'}: {item['msg']}"
        for item in error.errors()
    ]


class EnhancedCalculationOrchestrator:
    """
    Sequences the pricing stages and records the audit trail.

    The LangGraph graph is compiled once per instance; collaborators
    default to the in-memory catalog, an empty market data source and
    the shared audit log.
    """

    def __init__(
        self,
        catalog: RiskFactorCatalog | None = None,
        market_data_source: HistoricalMarketDataSource | None = None,
        audit_log: CalculationAuditLog | None = None,
        overhead_calculator: SizeBasedOverheadCalculator | None = None,
        margin_config: ProfitMarginConfig | None = None,
        settings: Settings | None = None,
        logger: PipelineLogger | None = None,
        strict_config: bool | None = None,
    ) -> None:
        """
        Raises:
            ConfigurationError: The margin configuration is invalid and
                strict_config (default: development environment) is set.
        """
        self.settings = settings or default_settings
        self.audit_log = audit_log if audit_log is not None else get_audit_log()
        self.logger = logger or PipelineLogger("orchestrator")

        margin_calculator = RiskAdjustedProfitMarginCalculator(margin_config)
        strict = self.settings.is_development if strict_config is None else strict_config
        if strict:
            validation = margin_calculator.validate()
            if not validation.is_valid:
                raise ConfigurationError("Invalid profit margin configuration", errors=validation.errors)

        self.stages = PricingStages(
            risk_engine=RiskAssessmentEngine(catalog=catalog),
            overhead_calculator=overhead_calculator
            or SizeBasedOverheadCalculator(default_rate=self.settings.default_fixed_overhead_rate),
            margin_calculator=margin_calculator,
            market_engine=MarketAnalysisEngine(
                market_data_source,
                recent_days=self.settings.market_data_recent_days,
            ),
            confidence_scorer=ConfidenceScorer(),
            settings=self.settings,
            logger=self.logger,
        )
        self.graph = build_pricing_graph(self.stages)

    @staticmethod
    def parse_input(payload: EnhancedCalculationInput | Mapping[str, Any]) -> EnhancedCalculationInput:
        """
        Coerce a request model or mapping into EnhancedCalculationInput.

        Raises:
            CalculationInputError: Missing or out-of-range required fields.
        """
        if isinstance(payload, EnhancedCalculationInput):
            return payload
        try:
            return EnhancedCalculationInput.model_validate(dict(payload))
        except ValidationError as e:
            raise CalculationInputError("Invalid calculation input", field_errors=_field_errors(e)) from e
        except TypeError as e:
            raise CalculationInputError("Calculation input must be a mapping", details=str(e)) from e

    async def calculate(
        self,
        payload: EnhancedCalculationInput | Mapping[str, Any],
    ) -> EnhancedCalculationResult:
        """
        Price one proposal.

        Every stage failure is recovered as a warning; only invalid
        required input raises.

        Raises:
            CalculationInputError: From parse_input().
        """
        request = self.parse_input(payload)
        calculation_id = new_calculation_id()
        started = perf_counter()

        initial_state = create_initial_state(request, calculation_id)
        self.logger.pipeline_start(calculation_id, request.base_cost, initial_state["mode"])

        state = await self.graph.ainvoke(initial_state)

        execution_time = (perf_counter() - started) * 1000
        result = self._build_result(state, execution_time)

        self.audit_log.append(
            CalculationAuditLogEntry(
                calculation_id=result.calculation_id,
                calculation_method=result.calculation_method,
                risk_assessment_used=result.risk_assessment is not None,
                fallback_used=state["fallback_used"],
                execution_time=result.execution_time,
                timestamp=result.audit_trail.calculation_timestamp,
                error_occurred=bool(result.errors),
                warning_count=len(result.warnings),
            )
        )
        self.logger.pipeline_end(
            calculation_id,
            result.total_cost,
            execution_time,
            len(result.warnings),
            result.audit_trail.calculation_sequence,
        )
        return result

    def _build_result(self, state: dict, execution_time: float) -> EnhancedCalculationResult:
        request: EnhancedCalculationInput = state["request"]
        enhanced = state["mode"] == "enhanced"
        risk = state["risk_result"] if enhanced else None
        overhead = state["overhead_result"]
        margin = state["margin_result"]
        confidence = state["confidence_result"]
        total_cost = state["total_cost"]

        events = state["stage_events"]
        audit_trail = AuditTrail(
            calculation_sequence=[event.name for event in events],
            stage_events=events,
            risk_assessment_timestamp=risk.timestamp if risk is not None else None,
        )

        return EnhancedCalculationResult(
            base_cost=request.base_cost,
            overhead_amount=state["overhead_amount"],
            overhead_percentage=state["overhead_percentage"],
            profit_amount=state["profit_amount"],
            profit_margin=state["profit_margin"],
            risk_adjustment=state["risk_adjustment"],
            contingency_amount=state["contingency_amount"],
            contingency_rate=state["contingency_rate"],
            total_cost=total_cost,
            calculation_method=state["mode"],
            risk_assessment=risk,
            is_risk_adjusted_profit_margin=margin is not None,
            profit_margin_adjustment=margin.margin_adjustment if margin is not None else 0.0,
            is_size_based_overhead=overhead is not None,
            overhead_calculation_method=overhead.method.value if overhead is not None else "fixed",
            overhead_tier=overhead.tier if overhead is not None else None,
            overhead_breakdown=overhead.breakdown if overhead is not None else None,
            market_conditions=state["market_conditions"],
            market_benchmark=state["market_benchmark"],
            package_recommendations=state["package_recommendations"],
            contingency_recommendation=state["contingency_result"],
            is_confidence_scored=confidence is not None,
            confidence_assessment=confidence,
            uncertainty_range=state["uncertainty_range"] or max_uncertainty_range(total_cost),
            win_probability=state["win_probability"],
            cost_per_square_foot=total_cost / request.square_footage if request.square_footage else 0.0,
            confidence=risk.confidence if risk is not None else 0.0,
            calculation_id=state["calculation_id"],
            execution_time=execution_time,
            audit_trail=audit_trail,
            warnings=[w.message for w in state["warnings"]],
            warning_details=state["warnings"],
            errors=state["errors"],
        )

    # ==================================================================
    # Audit log queries
    # ==================================================================

    def get_audit_logs(self, filter: AuditLogFilter | None = None) -> list[CalculationAuditLogEntry]:
        return self.audit_log.get_entries(filter)

    def get_statistics(self) -> CalculationStatistics:
        return self.audit_log.statistics()

    def clear_audit_logs(self) -> int:
        return self.audit_log.clear_all()


# ======================================================================
# Convenience operations bound to the container's default orchestrator
# ======================================================================

def _default_orchestrator() -> EnhancedCalculationOrchestrator:
    from proposal_pricing.services.container import get_container
    return get_container().orchestrator


async def calculate_enhanced_proposal_pricing(
    payload: EnhancedCalculationInput | Mapping[str, Any],
) -> EnhancedCalculationResult:
    return await _default_orchestrator().calculate(payload)


def get_calculation_audit_logs(filter: AuditLogFilter | None = None) -> list[CalculationAuditLogEntry]:
    return _default_orchestrator().get_audit_logs(filter)


def get_calculation_statistics() -> CalculationStatistics:
    return _default_orchestrator().get_statistics()


def clear_all_audit_logs() -> int:
    """Clear the default audit log; returns the number of entries removed."""
    return _default_orchestrator().clear_audit_logs()
