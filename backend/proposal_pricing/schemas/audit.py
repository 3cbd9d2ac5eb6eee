from datetime import datetime

from pydantic import BaseModel, Field

from proposal_pricing.schemas.responses import CalculationMethod, utc_now


class CalculationAuditLogEntry(BaseModel):
    """One calculation as recorded in the diagnostic audit log."""
    calculation_id: str
    calculation_method: CalculationMethod
    risk_assessment_used: bool = Field(description="A risk assessment fed the calculation")
    fallback_used: bool = Field(description="The risk assessment was synthesised because the catalog failed")
    execution_time: float = Field(ge=0, description="Milliseconds")
    timestamp: datetime = Field(default_factory=utc_now)
    error_occurred: bool = Field(default=False, description="At least one stage failed and was defaulted")
    warning_count: int = Field(default=0, ge=0)


class AuditLogFilter(BaseModel):
    include_errors: bool = True
    limit: int | None = Field(default=None, ge=1, description="Defaults to settings.audit_log_default_limit")
    since: datetime | None = None
    calculation_id: str | None = None


class CalculationStatistics(BaseModel):
    """Aggregates over the entries currently held by the audit log."""
    total_calculations: int = 0
    average_execution_time: float = 0.0
    risk_assessment_usage_rate: float = Field(default=0.0, ge=0, le=1)
    fallback_usage_rate: float = Field(default=0.0, ge=0, le=1)
    error_rate: float = Field(default=0.0, ge=0, le=1)
