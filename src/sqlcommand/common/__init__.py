"""Common exceptions for sqlcommand.

The exception system uses error codes for categorization. Every error
derives from SQLCommandError; the three classes callers usually catch are:

    - ValidationError: malformed command payload, raised before execution
    - UnsupportedCommandError: unknown command tag
    - ExecutionError: any failure reported by the database driver
"""

from sqlcommand.common.exceptions import (
    ErrorCode,
    ExecutionError,
    SQLCommandError,
    UnsupportedCommandError,
    ValidationError,
    configuration_error,
    connection_error,
    execution_error,
    query_execution_error,
    unsupported_command_error,
    validation_error,
)

__all__ = [
    "SQLCommandError",
    "ErrorCode",
    "ValidationError",
    "UnsupportedCommandError",
    "ExecutionError",
    "validation_error",
    "unsupported_command_error",
    "execution_error",
    "query_execution_error",
    "connection_error",
    "configuration_error",
]
