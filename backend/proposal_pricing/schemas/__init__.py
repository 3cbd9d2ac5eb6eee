from proposal_pricing.schemas.requests import EnhancedCalculationInput
from proposal_pricing.schemas.responses import (
    AuditTrail,
    CalculationWarning,
    EnhancedCalculationResult,
    StageEvent,
    StageStatus,
    WarningKind,
)
from proposal_pricing.schemas.audit import AuditLogFilter, CalculationAuditLogEntry, CalculationStatistics

__all__ = [
    "AuditLogFilter",
    "AuditTrail",
    "CalculationAuditLogEntry",
    "CalculationStatistics",
    "CalculationWarning",
    "EnhancedCalculationInput",
    "EnhancedCalculationResult",
    "StageEvent",
    "StageStatus",
    "WarningKind",
]
