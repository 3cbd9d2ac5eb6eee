"""
Enhanced proposal pricing for construction and glazing bids.

Entry points:
    calculate_enhanced_proposal_pricing(payload)
    get_calculation_audit_logs(filter=None)
    get_calculation_statistics()
    clear_all_audit_logs()
"""

from proposal_pricing.pipeline import (
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
