from proposal_pricing.pipeline.orchestrator import (
    EnhancedCalculationOrchestrator,
    calculate_enhanced_proposal_pricing,
    clear_all_audit_logs,
    get_calculation_audit_logs,
    get_calculation_statistics,
)

__all__ = [
    "EnhancedCalculationOrchestrator",
    "calculate_enhanced_proposal_pricing",
    "clear_all_audit_logs",
    "get_calculation_audit_logs",
    "get_calculation_statistics",
]
