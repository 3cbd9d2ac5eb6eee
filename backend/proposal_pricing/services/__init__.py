from proposal_pricing.services.audit_log import CalculationAuditLog, get_audit_log
from proposal_pricing.services.container import DependencyContainer, get_container, reset_container

__all__ = [
    "CalculationAuditLog",
    "DependencyContainer",
    "get_audit_log",
    "get_container",
    "reset_container",
]
