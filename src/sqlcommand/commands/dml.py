"""Data Manipulation Language (DML) commands.

This module contains command classes for SELECT, INSERT, UPDATE, DELETE
and TRUNCATE TABLE.
"""

import re
from typing import Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import Field, field_validator, model_validator

from sqlcommand.commands.base import BaseCommand, check_collapsed_clauses
from sqlcommand.constants.sql import CommandType, ValueKind


_LIMIT_PATTERN = re.compile(r"^\s*(\?|\d+)\s*(,\s*(\?|\d+)\s*)?$")


def _join_clause(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return ", ".join(str(item) for item in v)
    return v


def _validate_limit(v: Any) -> Any:
    if v is None:
        return v
    if isinstance(v, bool):
        raise ValueError("LIMIT must be an integer or a 'count' / 'offset, count' string")
    if isinstance(v, int):
        if v < 0:
            raise ValueError("LIMIT must not be negative")
        return v
    if isinstance(v, str) and _LIMIT_PATTERN.match(v):
        return v.strip()
    raise ValueError(f"LIMIT must be an integer or a 'count' / 'offset, count' string, got {v!r}")


class Select(BaseCommand):
    """Select rows.

    Clause strings may contain ``?`` placeholders, consumed from ``args``
    in FROM, WHERE, GROUP BY, HAVING, ORDER BY, LIMIT order. A ``?`` in
    FROM, GROUP BY or ORDER BY binds an identifier; elsewhere it binds a
    value. The token ``{N}`` in any clause expands to the Nth entry of
    ``subqueries`` (zero-based).
    """
    command_type: Literal[CommandType.SELECT] = Field(
        default=CommandType.SELECT,
        frozen=True
    )

    columns: Union[str, List[str]] = Field(default="*")
    distinct: bool = Field(default=False, alias="DISTINCT")

    from_clause: Optional[str] = Field(default=None, alias="FROM", min_length=1)
    where_clause: Optional[str] = Field(default=None, alias="WHERE")
    group_by: Optional[str] = Field(default=None, alias="GROUP BY")
    having_clause: Optional[str] = Field(default=None, alias="HAVING")
    order_by: Optional[str] = Field(default=None, alias="ORDER BY")
    limit: Optional[Union[int, str]] = Field(default=None, alias="LIMIT")

    subqueries: List["Select"] = Field(default_factory=list, alias="SUBQUERIES")

    # Row-shape normalisation for replay as an INSERT payload
    export_rows: bool = Field(default=False, alias="EXPORT ROWS")
    export_hints: bool = Field(default=False, alias="EXPORT HINTS")

    @field_validator("columns", mode="before")
    @classmethod
    def validate_columns(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)) and not v:
            raise ValueError("columns cannot be empty")
        return v

    @field_validator("group_by", "order_by", mode="before")
    @classmethod
    def join_lists(cls, v: Any) -> Any:
        return _join_clause(v)

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, v: Any) -> Any:
        return _validate_limit(v)

    @field_validator("subqueries", mode="before")
    @classmethod
    def parse_subqueries(cls, v: Any) -> Any:
        """Accept ``[payload, arg, ...]`` pairs as subquery entries."""
        if v is None:
            return []
        parsed = []
        for entry in v:
            if isinstance(entry, (list, tuple)):
                if not entry or not isinstance(entry[0], dict):
                    raise ValueError("subquery entries must be a payload mapping followed by its arguments")
                payload, args = dict(entry[0]), list(entry[1:])
                check_collapsed_clauses(payload, "subquery")
                payload["args"] = args
                parsed.append(payload)
            elif isinstance(entry, dict):
                check_collapsed_clauses(entry, "subquery")
                parsed.append(entry)
            else:
                parsed.append(entry)
        return parsed

    @property
    def column_list(self) -> str:
        return _join_clause(self.columns)


class Insert(BaseCommand):
    """Insert rows.

    Two mutually exclusive payload shapes:

    - ``values`` (a column map, or a list of column maps for a multi-row
      insert), optionally with ``inline`` raw SQL fragments, the
      ``auto_increment`` column and per-column ``kinds`` overrides.
    - ``select`` (INSERT ... SELECT), optionally with an explicit
      ``columns`` list.
    """
    command_type: Literal[CommandType.INSERT] = Field(
        default=CommandType.INSERT,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)

    values: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = Field(default=None)
    inline: Dict[str, str] = Field(default_factory=dict)
    auto_increment: Optional[str] = Field(default=None, alias="AUTO INCREMENT")
    kinds: Dict[str, ValueKind] = Field(default_factory=dict)

    columns: Optional[List[str]] = Field(default=None)
    select: Optional[Select] = Field(default=None)

    @model_validator(mode='after')
    def validate_data_source(self):
        """Ensure exactly one payload shape is used."""
        has_values = self.values is not None or bool(self.inline)
        if has_values == (self.select is not None):
            raise ValueError("Insert requires exactly one data source: values/inline or select")

        if self.select is not None:
            if self.auto_increment or self.kinds:
                raise ValueError("AUTO INCREMENT and kinds are only valid with values")
            return self

        if self.columns is not None:
            raise ValueError("columns is only valid with select")

        if isinstance(self.values, list):
            if not self.values:
                raise ValueError("values cannot be an empty list")
            if self.inline:
                raise ValueError("inline cannot be combined with multi-row values")
            first = list(self.values[0])
            for row in self.values[1:]:
                if list(row) != first:
                    raise ValueError("every row of a multi-row insert must have the same columns in the same order")

        overlap = set(self.inline) & set(self.value_columns)
        if overlap:
            raise ValueError(f"columns given both as values and inline: {', '.join(sorted(overlap))}")
        if not self.value_columns and not self.inline:
            raise ValueError("values cannot be empty")
        return self

    @property
    def rows(self) -> List[Dict[str, Any]]:
        if self.values is None:
            return [{}]
        if isinstance(self.values, dict):
            return [self.values]
        return self.values

    @property
    def value_columns(self) -> List[str]:
        return list(self.rows[0])


class Update(BaseCommand):
    """Update rows.

    In ``values``, ``True`` compiles to DEFAULT and ``False`` to NULL;
    every other value is bound as a parameter. ``inline`` maps columns to
    raw SQL fragments (e.g. ``{"hits": "hits + 1"}``).
    """
    command_type: Literal[CommandType.UPDATE] = Field(
        default=CommandType.UPDATE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)
    values: Dict[str, Any] = Field(default_factory=dict)
    inline: Dict[str, str] = Field(default_factory=dict)
    where_clause: Optional[str] = Field(default=None, alias="WHERE")
    order_by: Optional[str] = Field(default=None, alias="ORDER BY")
    limit: Optional[Union[int, str]] = Field(default=None, alias="LIMIT")

    @field_validator("order_by", mode="before")
    @classmethod
    def join_lists(cls, v: Any) -> Any:
        return _join_clause(v)

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, v: Any) -> Any:
        return _validate_limit(v)

    @model_validator(mode='after')
    def validate_assignments(self):
        """Ensure there is something to set."""
        if not self.values and not self.inline:
            raise ValueError("Update requires values or inline assignments")
        overlap = set(self.values) & set(self.inline)
        if overlap:
            raise ValueError(f"columns given both as values and inline: {', '.join(sorted(overlap))}")
        return self


class Delete(BaseCommand):
    """Delete rows. Without a WHERE clause every row is deleted."""
    command_type: Literal[CommandType.DELETE] = Field(
        default=CommandType.DELETE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    table: str = Field(..., min_length=1)
    where_clause: Optional[str] = Field(default=None, alias="WHERE")
    order_by: Optional[str] = Field(default=None, alias="ORDER BY")
    limit: Optional[Union[int, str]] = Field(default=None, alias="LIMIT")

    @field_validator("order_by", mode="before")
    @classmethod
    def join_lists(cls, v: Any) -> Any:
        return _join_clause(v)

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, v: Any) -> Any:
        return _validate_limit(v)


class TruncateTable(BaseCommand):
    """Empty one or more tables."""
    command_type: Literal[CommandType.TRUNCATE_TABLE] = Field(
        default=CommandType.TRUNCATE_TABLE,
        frozen=True
    )
    is_write: ClassVar[bool] = True

    tables: List[str] = Field(..., min_length=1)

    @field_validator("tables", mode="before")
    @classmethod
    def wrap_single_table(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


Select.model_rebuild()
