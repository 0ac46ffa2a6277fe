"""
Custom exceptions for the periodization engine.

This module defines a hierarchy of exceptions that provide clear error
handling throughout the engine. Each exception includes:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging

All of them are recoverable by the caller.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Program errors
    INVALID_PROGRAM_DEFINITION = "INVALID_PROGRAM_DEFINITION"
    PROGRAM_NOT_FOUND = "PROGRAM_NOT_FOUND"
    SLOT_NOT_FOUND = "SLOT_NOT_FOUND"

    # Catalog errors
    UNKNOWN_EXERCISE_REFERENCE = "UNKNOWN_EXERCISE_REFERENCE"

    # Fatigue errors
    STALE_FATIGUE_STATE = "STALE_FATIGUE_STATE"

    # Data/Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


class PeriodizerError(Exception):
    """
    Base exception for all periodization engine errors.

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

class ValidationError(PeriodizerError):
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


class InvalidProgramDefinitionError(ValidationError):
    """Raised when a program definition has a malformed duration, frequency or cadence."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, field=field, details=details)
        self.code = ErrorCode.INVALID_PROGRAM_DEFINITION


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(PeriodizerError):
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


class UnknownExerciseReferenceError(NotFoundError):
    """Raised when the exercise catalog cannot resolve an exercise id."""

    def __init__(self, exercise_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Exercise",
            resource_id=exercise_id,
            details=details,
        )
        self.exercise_id = exercise_id
        self.code = ErrorCode.UNKNOWN_EXERCISE_REFERENCE


class ProgramNotFoundError(NotFoundError):
    """Raised when a training program is not found."""

    def __init__(self, program_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Training Program",
            resource_id=program_id,
            details=details,
        )
        self.code = ErrorCode.PROGRAM_NOT_FOUND


class SlotNotFoundError(NotFoundError):
    """Raised when an exercise slot does not exist at the requested week/day."""

    def __init__(
        self,
        slot_id: str,
        week_index: int,
        day_index: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["week_index"] = week_index
        error_details["day_index"] = day_index
        super().__init__(
            resource_type="Exercise Slot",
            resource_id=slot_id,
            details=error_details,
        )
        self.code = ErrorCode.SLOT_NOT_FOUND


# ============================================================================
# Conflict Errors (409)
# ============================================================================

class ConflictError(PeriodizerError):
    """Raised when there's a resource conflict."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFLICT,
            status_code=409,
            details=details,
        )


class StaleFatigueStateError(ConflictError):
    """Raised when a fatigue state was modified concurrently; retry with the latest state."""

    def __init__(
        self,
        key: str,
        expected_version: int,
        actual_version: Optional[int],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["key"] = key
        error_details["expected_version"] = expected_version
        error_details["actual_version"] = actual_version
        super().__init__(
            message=(
                f"Fatigue state '{key}' changed concurrently "
                f"(expected version {expected_version}, found {actual_version})"
            ),
            details=error_details,
        )
        self.code = ErrorCode.STALE_FATIGUE_STATE


# ============================================================================
# Database Errors (500)
# ============================================================================

class DatabaseError(PeriodizerError):
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
