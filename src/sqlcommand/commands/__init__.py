"""Typed command variants.

Commands are pure data structures that describe WHAT the database should
do, not HOW. Each command tag has its own model, validated on
construction; ``parse_command`` accepts the loosely-typed
``(tag, payload, *args)`` form.
"""

from sqlcommand.commands.base import BaseCommand, check_collapsed_clauses
from sqlcommand.commands.ddl import (
    AddColumn,
    AddIndex,
    CreateDatabase,
    CreateTable,
    DropColumn,
    DropDatabase,
    DropIndex,
    DropTable,
)
from sqlcommand.commands.definitions import ColumnDefinition, ColumnReference, KeyDefinition, KeyReference
from sqlcommand.commands.dml import Delete, Insert, Select, TruncateTable, Update
from sqlcommand.commands.parser import COMMAND_MODELS, parse_command, resolve_command_type
from sqlcommand.commands.session import (
    BulkImportMode,
    Set,
    ShowCreateDatabase,
    ShowCreateTable,
    ShowDatabases,
    ShowTables,
    Use,
)

__all__ = [
    # Base
    "BaseCommand",
    "check_collapsed_clauses",
    # Definitions
    "ColumnDefinition",
    "ColumnReference",
    "KeyDefinition",
    "KeyReference",
    # DML
    "Select",
    "Insert",
    "Update",
    "Delete",
    "TruncateTable",
    # DDL
    "CreateDatabase",
    "DropDatabase",
    "CreateTable",
    "DropTable",
    "AddColumn",
    "DropColumn",
    "AddIndex",
    "DropIndex",
    # Session
    "Set",
    "Use",
    "ShowDatabases",
    "ShowTables",
    "ShowCreateDatabase",
    "ShowCreateTable",
    "BulkImportMode",
    # Parsing
    "COMMAND_MODELS",
    "parse_command",
    "resolve_command_type",
]
