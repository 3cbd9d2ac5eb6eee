"""
Per-stage result type and the runner that isolates stage failures.

A stage body returns a StageOutcome. The runner stamps a StageEvent for
every stage, including failed ones, and converts an escaping exception
into a stage degradation warning plus the stage's default updates.
"""

from dataclasses import dataclass, field
from time import perf_counter
from typing import Awaitable, Callable

from proposal_pricing.core.exceptions import StageExecutionError
from proposal_pricing.core.logging import PipelineLogger
from proposal_pricing.schemas.responses import (
    CalculationWarning,
    StageEvent,
    StageStatus,
    WarningKind,
    utc_now,
)

# Stage names double as LangGraph node names
RISK_VALIDATION = "risk_validation"
RISK_ASSESSMENT = "risk_assessment"
OVERHEAD_CALCULATION = "overhead_calculation"
PROFIT_MARGIN_CALCULATION = "profit_margin_calculation"
MARKET_ANALYSIS = "market_analysis"
CONTINGENCY_RECOMMENDATION = "contingency_recommendation"
CONFIDENCE_SCORING = "confidence_scoring"
LEGACY_CALCULATION = "legacy_calculation"

ENHANCED_SEQUENCE = (
    RISK_VALIDATION,
    RISK_ASSESSMENT,
    OVERHEAD_CALCULATION,
    PROFIT_MARGIN_CALCULATION,
    MARKET_ANALYSIS,
    CONTINGENCY_RECOMMENDATION,
    CONFIDENCE_SCORING,
)
LEGACY_SEQUENCE = (RISK_VALIDATION, LEGACY_CALCULATION)


@dataclass
class StageOutcome:
    """What a stage contributes to the pricing state."""
    stage: str
    updates: dict = field(default_factory=dict)
    warnings: list[CalculationWarning] = field(default_factory=list)
    degraded: bool = False
    error: str | None = None

    def warn(self, message: str) -> None:
        self.warnings.append(
            CalculationWarning(kind=WarningKind.INPUT_VALIDATION, stage=self.stage, message=message)
        )

    def degrade(self, message: str) -> None:
        self.degraded = True
        self.warnings.append(
            CalculationWarning(kind=WarningKind.STAGE_DEGRADATION, stage=self.stage, message=message)
        )

    @property
    def status(self) -> StageStatus:
        if self.error is not None:
            return StageStatus.FAILED
        if self.degraded:
            return StageStatus.DEGRADED
        return StageStatus.COMPLETED


StageBody = Callable[[dict], Awaitable[StageOutcome]]
StageDefaults = Callable[[dict], dict]


async def run_stage(
    name: str,
    state: dict,
    body: StageBody,
    defaults: StageDefaults,
    logger: PipelineLogger,
) -> dict:
    """
    Execute one stage body and return the state update for LangGraph.

    Args:
        name: Stage (and node) name.
        state: Current pricing state.
        body: Coroutine producing the stage outcome.
        defaults: Updates applied when the body raises.
        logger: Pipeline tracing logger.
    """
    logger.node_enter(name, state.get("calculation_id"))
    started_at = utc_now()
    started = perf_counter()

    try:
        outcome = await body(state)
    except Exception as e:
        error = e if isinstance(e, StageExecutionError) else StageExecutionError(
            "Stage raised an unexpected error", stage=name, original_error=e
        )
        logger.error(name, e)
        outcome = StageOutcome(stage=name, updates=defaults(state), error=str(error))
        outcome.degrade(f"{name.replace('_', ' ').capitalize()} failed; default values applied")

    if outcome.degraded and outcome.error is None:
        reasons = [w.message for w in outcome.warnings if w.kind == WarningKind.STAGE_DEGRADATION]
        logger.stage_degraded(name, "; ".join(reasons))

    event = StageEvent(
        name=name,
        timestamp=started_at,
        duration_ms=(perf_counter() - started) * 1000,
        status=outcome.status,
    )
    logger.node_exit(name, f"{outcome.status.value} | warnings={len(outcome.warnings)}")

    return {
        **outcome.updates,
        "warnings": outcome.warnings,
        "stage_events": [event],
        "errors": [outcome.error] if outcome.error else [],
    }
