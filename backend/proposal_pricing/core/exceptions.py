"""
Custom exceptions for the proposal pricing engine.

Only CalculationInputError crosses the orchestrator boundary; every
other failure is recovered inside its pipeline stage and reported as a
warning on the result.

Example:
    try:
        result = await calculate_enhanced_proposal_pricing({"base_cost": -1})
    except CalculationInputError as e:
        logger.error(f"Rejected calculation: {e}")
"""

from typing import List, Optional


class PricingBaseException(Exception):
    """
    Base exception class for all pricing engine errors.

    Attributes:
        message: Human-readable description of the error.
        details: Optional additional context for debugging.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with optional details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class CalculationInputError(PricingBaseException):
    """
    Raised when a calculation request is missing required fields or
    carries values outside their allowed ranges (e.g. negative base cost).

    Attributes:
        field_errors: One "field: problem" string per invalid field.
    """

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[str]] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize calculation input error.

        Args:
            message: Human-readable description of the error.
            field_errors: Per-field validation messages.
            details: Optional additional context for debugging.
        """
        self.field_errors = field_errors or []

        enhanced_message = f"[Input] {message}"
        if self.field_errors:
            enhanced_message = f"{enhanced_message}: {'; '.join(self.field_errors)}"

        super().__init__(enhanced_message, details)


class StageExecutionError(PricingBaseException):
    """
    Raised inside a pipeline stage when its sub-engine fails.

    The stage runner converts it into a stage degradation warning and
    applies the stage's default values.

    Attributes:
        stage: Name of the pipeline stage that failed.
        original_error: The underlying exception if available.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        original_error: Optional[Exception] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize stage execution error.

        Args:
            message: Human-readable description of the error.
            stage: Name of the pipeline stage that failed.
            original_error: The underlying exception if available.
            details: Optional additional context for debugging.
        """
        self.stage = stage
        self.original_error = original_error

        enhanced_message = f"[Stage: {stage}] {message}"
        if original_error:
            enhanced_message = f"{enhanced_message} | Caused by: {type(original_error).__name__}: {str(original_error)[:200]}"

        super().__init__(enhanced_message, details)


class ConfigurationError(PricingBaseException):
    """
    Raised when static configuration is unusable and a caller chose to
    block on it instead of degrading.

    Attributes:
        errors: Structured validation messages.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        self.errors = errors or []
        super().__init__(f"[Config] {message}", "; ".join(self.errors) or None)
