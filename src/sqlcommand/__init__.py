from sqlcommand.__version__ import __version__

from sqlcommand.commands import (
    BaseCommand,
    ColumnDefinition,
    KeyDefinition,
    parse_command,
)
from sqlcommand.common.exceptions import (
    ErrorCode,
    ExecutionError,
    SQLCommandError,
    UnsupportedCommandError,
    ValidationError,
)
from sqlcommand.engine import Cursor, DatabaseSession
from sqlcommand.query_builder import QueryPlan, get_query_builder
from sqlcommand.settings import DatabaseSettings, get_settings


__all__ = [
    "__version__",

    "DatabaseSession",
    "Cursor",
    "DatabaseSettings",
    "get_settings",

    # Commands
    "BaseCommand",
    "ColumnDefinition",
    "KeyDefinition",
    "parse_command",

    # Compilation
    "QueryPlan",
    "get_query_builder",

    # Exceptions (public API)
    "SQLCommandError",
    "ValidationError",
    "UnsupportedCommandError",
    "ExecutionError",
    "ErrorCode",
]
