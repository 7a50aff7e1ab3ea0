"""Engine error types and user-facing error classification."""

from enum import Enum

from pydantic import BaseModel


class UpkeepError(Exception):
    """Base class for errors raised by the maintenance engine."""


class InvalidTransitionError(UpkeepError, ValueError):
    """A status change that is not in the task transition table."""

    def __init__(self, *, task_id: str | None, current: str, target: str) -> None:
        self.task_id = task_id
        self.current = current
        self.target = target
        subject = f"task {task_id}" if task_id else "task"
        super().__init__(f"Cannot transition {subject} from {current} to {target}")


class MissingRequiredFieldError(UpkeepError, ValueError):
    """An operation was attempted without a field the target state requires."""

    def __init__(self, *, field: str, context: str) -> None:
        self.field = field
        self.context = context
        super().__init__(f"Missing required field '{field}' for {context}")


class InvalidFanOutIntentError(UpkeepError, ValueError):
    """The requested fan-out intent does not fit the property topology."""


class FanOutPartialFailureError(UpkeepError):
    """Some unit-level creations of a fan-out failed.

    Siblings that were created are not rolled back; they are carried on the
    error so the caller can report them or retry only the failed units.
    """

    def __init__(self, *, created: list, failures: dict[str, str], total: int) -> None:
        self.created = created
        self.failures = failures
        self.total = total
        failed_units = ", ".join(failures)
        super().__init__(f"{len(created)} of {total} tasks created; failed units: {failed_units}")

    @property
    def failed_units(self) -> list[str]:
        """Unit tags whose creation failed, in planning order."""
        return list(self.failures)


class UnresolvableSeasonalWindowError(UpkeepError, ValueError):
    """A seasonal window descriptor could not be parsed."""


class NoPreservationBracketError(UpkeepError, LookupError):
    """No intervention bundle exists for a system type and age."""

    def __init__(self, *, system_type: str, age: int) -> None:
        self.system_type = system_type
        self.age = age
        super().__init__(f"No preservation bracket for {system_type} at age {age}")


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Task lifecycle errors
    ERR_INVALID_TRANSITION = "ERR_INVALID_TRANSITION"
    ERR_MISSING_REQUIRED_FIELD = "ERR_MISSING_REQUIRED_FIELD"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"

    # Planning errors
    ERR_FAN_OUT_PARTIAL_FAILURE = "ERR_FAN_OUT_PARTIAL_FAILURE"
    ERR_INVALID_FAN_OUT_INTENT = "ERR_INVALID_FAN_OUT_INTENT"
    ERR_INVALID_RECURRENCE_PATTERN = "ERR_INVALID_RECURRENCE_PATTERN"

    # Store errors
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised by an engine operation

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, FanOutPartialFailureError):
        return ErrorResponse(
            code=ErrorCode.ERR_FAN_OUT_PARTIAL_FAILURE,
            message=f"{len(exception.created)} of {exception.total} tasks created.",
            suggestion=f"Retry or clean up the failed units: {', '.join(exception.failed_units)}.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, InvalidTransitionError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_TRANSITION,
            message=f"A {exception.current} task cannot be moved to {exception.target}.",
            suggestion="Refresh the task list and check the task's current status.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, MissingRequiredFieldError):
        return ErrorResponse(
            code=ErrorCode.ERR_MISSING_REQUIRED_FIELD,
            message=f"The {exception.field.replace('_', ' ')} is required for {exception.context}.",
            suggestion="Fill in the missing field and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, InvalidFanOutIntentError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_FAN_OUT_INTENT,
            message="That unit selection does not match this property.",
            suggestion="Pick units from the property's unit list.",
            severity=ErrorSeverity.LOW,
        )

    error_str = str(exception).lower()

    if isinstance(exception, KeyError) and "not found" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message="That task no longer exists.",
            suggestion="It may have been deleted. Refresh the task list.",
            severity=ErrorSeverity.LOW,
        )

    if "recurrence" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_RECURRENCE_PATTERN,
            message="Invalid recurrence interval.",
            suggestion="Use formats like 'monthly', 'every 90 days', 'annually', or a CRON expression.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, ConnectionError | TimeoutError) or "failed to" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_UNAVAILABLE,
            message="The task store could not complete the request.",
            suggestion="Please try again in a moment.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
