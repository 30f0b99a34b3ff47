"""Data Definition Language (DDL) commands.

This module contains command classes for databases, tables, columns and
indexes.
"""

import re
from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from sqlcommand.commands.base import BaseCommand
from sqlcommand.commands.definitions import ColumnDefinition, KeyDefinition
from sqlcommand.commands.dml import Select
from sqlcommand.constants.sql import CommandType


_CHARSET_NAME = re.compile(r"^[A-Za-z0-9_.\-]+$")


def _wrap_single(v: Any) -> Any:
    if isinstance(v, str):
        return [v]
    return v


def _validate_charset_name(v: Optional[str], info) -> Optional[str]:
    # Character set and collation names are emitted unquoted
    if v is not None and not _CHARSET_NAME.match(v):
        raise ValueError(f"Invalid {info.field_name}: {v!r}")
    return v


class CreateDatabase(BaseCommand):
    """Create database command."""
    command_type: Literal[CommandType.CREATE_DATABASE] = Field(
        default=CommandType.CREATE_DATABASE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    name: str = Field(..., min_length=1)
    character_set: Optional[str] = Field(default=None, alias="CHARACTER SET")
    collate: Optional[str] = Field(default=None, alias="COLLATE")

    @field_validator("character_set", "collate")
    @classmethod
    def validate_charset(cls, v: Optional[str], info) -> Optional[str]:
        return _validate_charset_name(v, info)


class DropDatabase(BaseCommand):
    """Drop database command."""
    command_type: Literal[CommandType.DROP_DATABASE] = Field(
        default=CommandType.DROP_DATABASE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    name: str = Field(..., min_length=1)
    if_exists: bool = Field(default=False)


class CreateTable(BaseCommand):
    """Create table command.

    Supports two table creation patterns:
    - Column definitions (plus optional keys), optionally TEMPORARY
    - CREATE TABLE AS SELECT (CTAS) via ``select``

    Keys the dialect cannot declare inline are emitted as follow-up
    ADD INDEX statements in the same plan.
    """
    command_type: Literal[CommandType.CREATE_TABLE] = Field(
        default=CommandType.CREATE_TABLE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    name: str = Field(..., min_length=1)
    columns: Optional[Dict[str, ColumnDefinition]] = Field(default=None)
    keys: List[KeyDefinition] = Field(default_factory=list)
    select: Optional[Select] = Field(default=None)

    temporary: bool = Field(default=False, alias="TEMPORARY")
    character_set: Optional[str] = Field(default=None, alias="CHARACTER SET")
    collate: Optional[str] = Field(default=None, alias="COLLATE")

    @field_validator("character_set", "collate")
    @classmethod
    def validate_charset(cls, v: Optional[str], info) -> Optional[str]:
        return _validate_charset_name(v, info)

    @model_validator(mode='after')
    def validate_table_definition(self):
        """Ensure exactly one definition method is provided."""
        if (self.columns is None) == (self.select is None):
            raise ValueError("CreateTable requires exactly one definition method: columns or select")
        if self.columns is not None and not self.columns:
            raise ValueError("columns cannot be empty")
        if self.select is not None and self.keys:
            raise ValueError("keys cannot be combined with CREATE TABLE ... SELECT")

        if self.columns:
            for key in self.keys:
                missing = [column for column in key.columns if column not in self.columns]
                if missing:
                    raise ValueError(f"key references unknown columns: {', '.join(missing)}")
        return self


class DropTable(BaseCommand):
    """Drop table command."""
    command_type: Literal[CommandType.DROP_TABLE] = Field(
        default=CommandType.DROP_TABLE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    tables: List[str] = Field(..., min_length=1)
    if_exists: bool = Field(default=False)
    temporary: bool = Field(default=False, alias="TEMPORARY")

    @field_validator("tables", mode="before")
    @classmethod
    def wrap_single_table(cls, v: Any) -> Any:
        return _wrap_single(v)


class AddColumn(BaseCommand):
    """Add a column to an existing table.

    ``first`` and ``after`` position the column where the dialect allows
    it; elsewhere they are ignored.
    """
    command_type: Literal[CommandType.ADD_COLUMN] = Field(
        default=CommandType.ADD_COLUMN,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    definition: ColumnDefinition
    first: bool = Field(default=False, alias="FIRST")
    after: Optional[str] = Field(default=None, alias="AFTER", min_length=1)

    @model_validator(mode='after')
    def validate_position(self):
        if self.first and self.after:
            raise ValueError("FIRST and AFTER are mutually exclusive")
        return self


class DropColumn(BaseCommand):
    """Drop a column from an existing table."""
    command_type: Literal[CommandType.DROP_COLUMN] = Field(
        default=CommandType.DROP_COLUMN,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class AddIndex(BaseCommand):
    """Add an index or constraint to an existing table."""
    command_type: Literal[CommandType.ADD_INDEX] = Field(
        default=CommandType.ADD_INDEX,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)
    key: KeyDefinition


class DropIndex(BaseCommand):
    """Drop an index from a table."""
    command_type: Literal[CommandType.DROP_INDEX] = Field(
        default=CommandType.DROP_INDEX,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
