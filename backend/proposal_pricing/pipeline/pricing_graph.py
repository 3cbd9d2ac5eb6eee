from typing import Literal

from langgraph.graph import END, START, StateGraph

from proposal_pricing.core.logging import PipelineLogger
from proposal_pricing.pipeline.nodes import PricingStages
from proposal_pricing.pipeline.stages import (
    CONFIDENCE_SCORING,
    CONTINGENCY_RECOMMENDATION,
    LEGACY_CALCULATION,
    MARKET_ANALYSIS,
    OVERHEAD_CALCULATION,
    PROFIT_MARGIN_CALCULATION,
    RISK_ASSESSMENT,
    RISK_VALIDATION,
)
from proposal_pricing.pipeline.state import PricingState

logger = PipelineLogger("pricing_graph")


def route_by_mode(state: PricingState) -> Literal["enhanced", "legacy"]:
    """Enhanced whenever the request carried any risk factor input."""
    mode = state["mode"]
    target = RISK_ASSESSMENT if mode == "enhanced" else LEGACY_CALCULATION
    reason = "risk factor inputs supplied" if mode == "enhanced" else "no risk factor inputs"
    logger.routing_decision(RISK_VALIDATION, target, reason)
    return mode


def build_pricing_graph(stages: PricingStages):
    """
    Compile the pricing StateGraph.

    Enhanced: risk_validation → risk_assessment → overhead_calculation →
    profit_margin_calculation → market_analysis →
    contingency_recommendation → confidence_scoring.
    Legacy: risk_validation → legacy_calculation.
    """
    workflow = StateGraph(PricingState)

    workflow.add_node(RISK_VALIDATION, stages.risk_validation)
    workflow.add_node(RISK_ASSESSMENT, stages.risk_assessment)
    workflow.add_node(OVERHEAD_CALCULATION, stages.overhead_calculation)
    workflow.add_node(PROFIT_MARGIN_CALCULATION, stages.profit_margin_calculation)
    workflow.add_node(MARKET_ANALYSIS, stages.market_analysis)
    workflow.add_node(CONTINGENCY_RECOMMENDATION, stages.contingency_recommendation)
    workflow.add_node(CONFIDENCE_SCORING, stages.confidence_scoring)
    workflow.add_node(LEGACY_CALCULATION, stages.legacy_calculation)

    workflow.add_edge(START, RISK_VALIDATION)
    workflow.add_conditional_edges(
        RISK_VALIDATION,
        route_by_mode,
        {"enhanced": RISK_ASSESSMENT, "legacy": LEGACY_CALCULATION},
    )
    workflow.add_edge(RISK_ASSESSMENT, OVERHEAD_CALCULATION)
    workflow.add_edge(OVERHEAD_CALCULATION, PROFIT_MARGIN_CALCULATION)
    workflow.add_edge(PROFIT_MARGIN_CALCULATION, MARKET_ANALYSIS)
    workflow.add_edge(MARKET_ANALYSIS, CONTINGENCY_RECOMMENDATION)
    workflow.add_edge(CONTINGENCY_RECOMMENDATION, CONFIDENCE_SCORING)
    workflow.add_edge(CONFIDENCE_SCORING, END)
    workflow.add_edge(LEGACY_CALCULATION, END)

    return workflow.compile()
