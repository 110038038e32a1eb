"""
Custom exceptions for training signal computation.

Most range and data-sufficiency problems in this package are expected and
frequent, so the pipelines report them as null fields or explicit
"insufficient data" results. The exceptions below are raised at explicit
parse/convert entry points and by collaborator adapters, and each carries:
- A descriptive message
- An error code
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error reporting."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_INPUT_RANGE = "INVALID_INPUT_RANGE"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    BATCH_ITEM_FAILED = "BATCH_ITEM_FAILED"
    NOT_FOUND = "NOT_FOUND"


class TrainingSignalsError(Exception):
    """
    Base exception for all training signal errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for reporting."""
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


class InvalidInputRangeError(TrainingSignalsError):
    """Raised when an input is outside its physiologically plausible range."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        if value is not None:
            error_details["value"] = value
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT_RANGE,
            details=error_details,
        )


class UpstreamFailureError(TrainingSignalsError):
    """Raised by collaborator adapters (weather, prediction engine) on failure."""

    def __init__(
        self,
        service: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["service"] = service
        super().__init__(
            message=message or f"{service} is unavailable",
            code=ErrorCode.UPSTREAM_FAILURE,
            details=error_details,
        )


class BatchItemError(TrainingSignalsError):
    """A single item failure recorded inside a batch run."""

    def __init__(
        self,
        item_id: Any,
        cause: Exception,
    ) -> None:
        self.item_id = item_id
        self.cause = cause
        super().__init__(
            message=f"Item {item_id} failed: {cause}",
            code=ErrorCode.BATCH_ITEM_FAILED,
            details={"item_id": item_id, "cause": type(cause).__name__},
        )
