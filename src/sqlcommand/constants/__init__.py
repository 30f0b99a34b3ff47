"""Constants module for sqlcommand.

All enumerations used across the package live here. As the lowest layer
this module has no dependencies on other sqlcommand modules.
"""

from sqlcommand.constants.sql import (
    WRITE_COMMANDS,
    AutoIncrementStyle,
    ColumnType,
    CommandType,
    CommentStyle,
    IndexStatementStyle,
    KeyType,
    LimitSyntax,
    TemporaryTableStyle,
    ValueKind,
)

__all__ = [
    "CommandType",
    "ColumnType",
    "KeyType",
    "ValueKind",
    "LimitSyntax",
    "AutoIncrementStyle",
    "CommentStyle",
    "IndexStatementStyle",
    "TemporaryTableStyle",
    "WRITE_COMMANDS",
]
