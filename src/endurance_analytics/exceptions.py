"""
Custom exceptions for the endurance analytics engine.

Every exception carries:
- A descriptive message
- An error code the presentation layer can map to a response
- HTTP status code mapping
- Optional details for debugging

Soft "no data yet" conditions are not exceptions; they are returned as
``NoDataResult`` objects (see ``endurance_analytics.models.results``).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    INVALID_INPUT = "INVALID_INPUT"
    GOAL_EVALUATION_FAILED = "GOAL_EVALUATION_FAILED"
    DATA_SOURCE_ERROR = "DATA_SOURCE_ERROR"


class EnduranceAnalyticsError(Exception):
    """
    Base exception for all analytics errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Input Errors (400 / 422)
# ============================================================================

class InsufficientDataError(EnduranceAnalyticsError):
    """Raised when a windowed metric has fewer data points than it needs."""

    def __init__(
        self,
        message: str,
        required: Optional[int] = None,
        available: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if required is not None:
            error_details["required"] = required
        if available is not None:
            error_details["available"] = available
        super().__init__(
            message=message,
            code=ErrorCode.INSUFFICIENT_DATA,
            status_code=422,
            details=error_details,
        )


class InvalidInputError(EnduranceAnalyticsError):
    """Raised when an input value makes a calculation meaningless."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT,
            status_code=400,
            details=error_details,
        )


# ============================================================================
# Evaluation Errors (500 / 503)
# ============================================================================

class GoalEvaluationError(EnduranceAnalyticsError):
    """Raised when a single goal cannot be evaluated."""

    def __init__(
        self,
        message: str,
        goal_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if goal_id:
            error_details["goal_id"] = goal_id
        super().__init__(
            message=message,
            code=ErrorCode.GOAL_EVALUATION_FAILED,
            status_code=500,
            details=error_details,
        )


class DataSourceError(EnduranceAnalyticsError):
    """Raised when a prerequisite read from the external store fails."""

    def __init__(
        self,
        message: str = "Failed to read from the data store",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.DATA_SOURCE_ERROR,
            status_code=503,
            details=error_details,
        )
