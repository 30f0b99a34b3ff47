"""Session and introspection commands.

SET, USE, the SHOW family and BULK IMPORT MODE. None of these are writes,
so they run on whichever connection is currently bound.
"""

from typing import Literal

from pydantic import Field

from sqlcommand.commands.base import BaseCommand
from sqlcommand.constants.sql import CommandType


class Set(BaseCommand):
    """Set a session variable.

    ``statement`` is passed verbatim after the dialect's SET keyword;
    ``?`` placeholders in it are bound from ``args``.
    """
    command_type: Literal[CommandType.SET] = Field(
        default=CommandType.SET,
        frozen=True
    )
    statement: str = Field(..., min_length=1)


class Use(BaseCommand):
    """Select the current database. The name is quoted as an identifier."""
    command_type: Literal[CommandType.USE] = Field(
        default=CommandType.USE,
        frozen=True
    )
    database: str = Field(..., min_length=1)


class ShowDatabases(BaseCommand):
    command_type: Literal[CommandType.SHOW_DATABASES] = Field(
        default=CommandType.SHOW_DATABASES,
        frozen=True
    )


class ShowTables(BaseCommand):
    """List tables of the current database.

    With ``full`` each row also carries the table type.
    """
    command_type: Literal[CommandType.SHOW_TABLES] = Field(
        default=CommandType.SHOW_TABLES,
        frozen=True
    )
    full: bool = Field(default=False, alias="FULL")


class ShowCreateDatabase(BaseCommand):
    command_type: Literal[CommandType.SHOW_CREATE_DATABASE] = Field(
        default=CommandType.SHOW_CREATE_DATABASE,
        frozen=True
    )
    name: str = Field(..., min_length=1)


class ShowCreateTable(BaseCommand):
    command_type: Literal[CommandType.SHOW_CREATE_TABLE] = Field(
        default=CommandType.SHOW_CREATE_TABLE,
        frozen=True
    )
    name: str = Field(..., min_length=1)


class BulkImportMode(BaseCommand):
    """Toggle connection-wide integrity checks for bulk loading.

    The caller must disable the mode before disconnecting; it is never
    switched off implicitly.
    """
    command_type: Literal[CommandType.BULK_IMPORT_MODE] = Field(
        default=CommandType.BULK_IMPORT_MODE,
        frozen=True
    )
    enabled: bool = Field(default=True)
