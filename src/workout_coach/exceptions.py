"""
Custom exceptions for the Workout Coach core.

Each exception carries:
- A descriptive message
- An error code for callers that surface errors over an API
- An HTTP-style status code
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Entity errors
    ROUTINE_NOT_FOUND = "ROUTINE_NOT_FOUND"

    # Interpretation errors
    ACTION_PARSE_ERROR = "ACTION_PARSE_ERROR"

    # LLM errors
    LLM_SERVICE_UNAVAILABLE = "LLM_SERVICE_UNAVAILABLE"
    LLM_RATE_LIMITED = "LLM_RATE_LIMITED"
    LLM_RESPONSE_INVALID = "LLM_RESPONSE_INVALID"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_API_ERROR = "LLM_API_ERROR"

    # Data/Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    DATA_INTEGRITY_ERROR = "DATA_INTEGRITY_ERROR"


class WorkoutCoachError(Exception):
    """
    Base exception for all Workout Coach errors.

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
# Validation Errors (400)
# ============================================================================

class ValidationError(WorkoutCoachError):
    """Raised when input validation fails."""

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
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class ActionParseError(WorkoutCoachError):
    """Raised when model output cannot be parsed into a known action."""

    def __init__(
        self,
        message: str = "Could not parse action from model output",
        raw_output: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.raw_output = raw_output
        error_details = details or {}
        if raw_output:
            error_details["raw_output_preview"] = raw_output[:500]
        super().__init__(
            message=message,
            code=ErrorCode.ACTION_PARSE_ERROR,
            status_code=422,
            details=error_details,
        )


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(WorkoutCoachError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with ID '{resource_id}' not found"
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=error_details,
        )


class RoutineNotFoundError(NotFoundError):
    """Raised when a routine does not exist or belongs to another user."""

    def __init__(self, routine_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Routine",
            resource_id=routine_id,
            details=details,
        )
        self.code = ErrorCode.ROUTINE_NOT_FOUND


# ============================================================================
# LLM Service Errors (500/503)
# ============================================================================

class LLMError(WorkoutCoachError):
    """Base class for LLM-related errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_API_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details,
        )


class LLMServiceUnavailableError(LLMError):
    """Raised when the LLM service is unavailable."""

    def __init__(
        self,
        message: str = "LLM service is currently unavailable",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.LLM_SERVICE_UNAVAILABLE,
            status_code=503,
            details=details,
        )


class LLMRateLimitError(LLMError):
    """Raised when LLM rate limits are hit."""

    def __init__(
        self,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if retry_after:
            error_details["retry_after_seconds"] = retry_after
        super().__init__(
            message="LLM service rate limit exceeded. Please try again later.",
            code=ErrorCode.LLM_RATE_LIMITED,
            status_code=429,
            details=error_details,
        )


class LLMTimeoutError(LLMError):
    """Raised when LLM request times out."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if timeout_seconds:
            error_details["timeout_seconds"] = timeout_seconds
        super().__init__(
            message="LLM request timed out",
            code=ErrorCode.LLM_TIMEOUT,
            status_code=504,
            details=error_details,
        )


class LLMResponseInvalidError(LLMError):
    """Raised when the LLM returns an empty or unusable response."""

    def __init__(
        self,
        message: str = "Failed to parse LLM response",
        raw_response: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if raw_response:
            error_details["raw_response_preview"] = raw_response[:500]
        super().__init__(
            message=message,
            code=ErrorCode.LLM_RESPONSE_INVALID,
            status_code=500,
            details=error_details,
        )


# ============================================================================
# Database Errors
# ============================================================================

class DatabaseError(WorkoutCoachError):
    """Raised when a database operation fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=error_details,
        )


class DataIntegrityError(DatabaseError):
    """Raised when data integrity is violated."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.code = ErrorCode.DATA_INTEGRITY_ERROR
