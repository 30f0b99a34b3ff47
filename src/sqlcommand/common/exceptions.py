from enum import Enum
from typing import Any, Dict, Optional

from sqlcommand.logging import get_logger


logger = get_logger(__name__)


class ErrorCode(Enum):
    """Standard error codes for sqlcommand operations.

    Error codes categorise failures without multiplying exception classes.
    Each category has its own prefix for easy identification in logs.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Malformed command payloads, caught before execution
        COMMAND_*: Command vocabulary errors
        EXECUTION_*: Failures reported by the database driver
        CONNECTION_*: Connectivity errors
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_ARGUMENT = "VALIDATION_002"
    ARGUMENT_MISMATCH = "VALIDATION_003"
    INVALID_IDENTIFIER = "VALIDATION_004"
    COLLAPSED_CLAUSE = "VALIDATION_005"

    # Command errors
    UNSUPPORTED_COMMAND = "COMMAND_001"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_002"
    PARTIAL_PLAN_ERROR = "EXECUTION_003"

    # Connection errors
    CONNECTION_ERROR = "CONNECTION_001"
    DISCONNECT_ERROR = "CONNECTION_002"


class SQLCommandError(Exception):
    """Base exception for all sqlcommand errors.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    default_code = ErrorCode.EXECUTION_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.cause = cause

        logger.error(
            message,
            extra={
                "error_code": self.error_code.value,
                "error_type": type(self).__name__,
                "details": self.details,
            },
            exc_info=cause is not None,
        )

    def __str__(self) -> str:
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


class ValidationError(SQLCommandError, ValueError):
    """A command payload is structurally malformed.

    Always raised before anything reaches the driver.
    """

    default_code = ErrorCode.VALIDATION_ERROR


class UnsupportedCommandError(SQLCommandError):
    """The command tag is not part of the vocabulary."""

    default_code = ErrorCode.UNSUPPORTED_COMMAND


class ExecutionError(SQLCommandError):
    """The driver rejected or failed to run a statement.

    Never retried automatically; retry policy belongs to the caller.
    """

    default_code = ErrorCode.EXECUTION_ERROR


def _truncate_query(query: str) -> str:
    # Keep the first 500 chars, which carry the statement verb and target
    return query[:500] + "..." if len(query) > 500 else query


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    **kwargs
) -> ValidationError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field or clause that failed validation
        value: Invalid value
        error_code: Specific validation error code
        **kwargs: Additional error details

    Returns:
        ValidationError instance
    """
    details = kwargs.pop("details", {})
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return ValidationError(message=message, error_code=error_code, details=details, **kwargs)


def unsupported_command_error(tag: Any, **kwargs) -> UnsupportedCommandError:
    """Create an error for a command tag outside the vocabulary."""
    details = kwargs.pop("details", {})
    details["command"] = str(tag)
    return UnsupportedCommandError(
        message=f"Unsupported command: {tag!r}",
        details=details,
        **kwargs
    )


def execution_error(
    message: str,
    operation: Optional[str] = None,
    query: Optional[str] = None,
    error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
    **kwargs
) -> ExecutionError:
    """Create an execution error.

    Args:
        message: Error message
        operation: Command or operation that failed
        query: Query that failed (if applicable)
        error_code: Specific execution error code
        **kwargs: Additional error details

    Returns:
        ExecutionError instance
    """
    details = kwargs.pop("details", {})
    if operation:
        details["operation"] = operation
    if query:
        details["query"] = _truncate_query(query)

    return ExecutionError(message=message, error_code=error_code, details=details, **kwargs)


def query_execution_error(query: str, original_error: Exception, **kwargs) -> ExecutionError:
    """Wrap a driver exception raised while running ``query``."""
    return execution_error(
        f"Query execution failed: {original_error}",
        query=query,
        error_code=ErrorCode.QUERY_EXECUTION_ERROR,
        cause=original_error,
        **kwargs
    )


def connection_error(
    message: str,
    dialect: Optional[str] = None,
    route: Optional[str] = None,
    **kwargs
) -> ExecutionError:
    """Create a connection error.

    Args:
        message: Error message
        dialect: Dialect of the connection that failed
        route: Connection slot (primary or master)
        **kwargs: Additional error details

    Returns:
        ExecutionError with CONNECTION_ERROR code
    """
    details = kwargs.pop("details", {})
    if dialect:
        details["dialect"] = dialect
    if route:
        details["route"] = route

    return ExecutionError(
        message=message,
        error_code=ErrorCode.CONNECTION_ERROR,
        details=details,
        **kwargs
    )


def configuration_error(message: str, config_key: Optional[str] = None, **kwargs) -> SQLCommandError:
    """Create a configuration error."""
    details = kwargs.pop("details", {})
    if config_key:
        details["config_key"] = config_key

    return SQLCommandError(
        message=message,
        error_code=ErrorCode.CONFIG_ERROR,
        details=details,
        **kwargs
    )
