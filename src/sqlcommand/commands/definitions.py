"""Portable column and key definitions.

These models describe a column or index independently of any dialect.
The query builders translate them into dialect SQL fragments.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from sqlcommand.constants.sql import ColumnType, KeyType
from sqlcommand.types.base import SQLCommandBaseModel


INTEGER_WIDTHS = range(1, 9)
FLOAT_WIDTHS = (4, 8)
STRING_SIZE_CLASSES = (1, 2, 3, 4)
REFERENTIAL_ACTIONS = ("CASCADE", "SET NULL", "SET DEFAULT", "RESTRICT", "NO ACTION")

_REFERENCE_PATTERN = re.compile(r"^\s*([^\s(]+)\s*\(\s*([^\s)]+)\s*\)\s*$")


class ColumnReference(SQLCommandBaseModel):
    """Target of a column-level REFERENCES option."""

    table: str = Field(..., min_length=1)
    column: str = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def parse_shorthand(cls, data: Any) -> Any:
        # "table(column)" shorthand
        if isinstance(data, str):
            match = _REFERENCE_PATTERN.match(data)
            if not match:
                raise ValueError(f"REFERENCES must look like 'table(column)', got {data!r}")
            return {"table": match.group(1), "column": match.group(2)}
        return data


class ColumnDefinition(SQLCommandBaseModel):
    """Portable column definition.

    The meaning of ``size`` and ``length`` depends on the type:

    - INTEGER: ``size`` is the byte width (1-8, default 4).
    - FLOAT: ``size`` is 4 (single) or 8 (double, default).
    - DECIMAL: ``size`` is the precision (default 10), ``length`` the scale (default 0).
    - STRING/BINARY: ``size`` is the width class. Class 1 is variable width and
      requires ``length`` (the maximum length); classes 2-4 are progressively
      larger unbounded types.

    The loose list form ``[type, size, length, {options}]`` is also accepted,
    with options keyed by their SQL spelling (``"NOT NULL"``, ``"DEFAULT"``, ...).

    Example:
        >>> ColumnDefinition(type="STRING", size=1, length=64, not_null=True)
        >>> ColumnDefinition.model_validate(["DECIMAL", 12, 2, {"NOT NULL": True}])
    """

    type: ColumnType
    size: Optional[int] = Field(default=None, ge=1)
    length: Optional[int] = Field(default=None, ge=0)

    not_null: bool = Field(default=False, alias="NOT NULL")
    default: Any = Field(default=None, alias="DEFAULT")
    primary_key: bool = Field(default=False, alias="PRIMARY KEY")
    unique_key: bool = Field(default=False, alias="UNIQUE KEY")
    auto_increment: bool = Field(default=False, alias="AUTO INCREMENT")
    unsigned: bool = Field(default=False, alias="UNSIGNED")
    fixed: bool = Field(default=False, alias="FIXED")
    comment: Optional[str] = Field(default=None, alias="COMMENT")
    references: Optional[ColumnReference] = Field(default=None, alias="REFERENCES")

    @model_validator(mode="before")
    @classmethod
    def parse_loose_form(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"type": data}
        if not isinstance(data, (list, tuple)):
            return data

        items = list(data)
        if not items:
            raise ValueError("column definition list is empty")

        options: Dict[str, Any] = {}
        if isinstance(items[-1], dict):
            options = dict(items.pop())
        if len(items) > 3:
            raise ValueError("column definition list takes at most type, size, length and options")

        parsed: Dict[str, Any] = {"type": items[0]}
        if len(items) > 1 and items[1] is not None:
            parsed["size"] = items[1]
        if len(items) > 2 and items[2] is not None:
            parsed["length"] = items[2]
        parsed.update(options)
        return parsed

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def validate_parameters(self):
        """Check size/length against the type and fill in defaults."""
        column_type = ColumnType(self.type)

        if column_type == ColumnType.INTEGER:
            if self.size is not None and self.size not in INTEGER_WIDTHS:
                raise ValueError(f"INTEGER width must be between 1 and 8 bytes, got {self.size}")
        elif column_type == ColumnType.FLOAT:
            if self.size is not None and self.size not in FLOAT_WIDTHS:
                raise ValueError(f"FLOAT width must be 4 or 8 bytes, got {self.size}")
        elif column_type == ColumnType.DECIMAL:
            precision = self.size or 10
            if (self.length or 0) > precision:
                raise ValueError(f"DECIMAL scale {self.length} exceeds precision {precision}")
        elif column_type in (ColumnType.STRING, ColumnType.BINARY):
            size_class = self.size or 1
            if size_class not in STRING_SIZE_CLASSES:
                raise ValueError(f"{column_type.value} size class must be 1-4, got {size_class}")
            if size_class == 1 and not self.length:
                raise ValueError(
                    f"{column_type.value} with size class 1 requires a maximum length"
                )

        if self.auto_increment and column_type != ColumnType.INTEGER:
            raise ValueError("AUTO INCREMENT is only valid on INTEGER columns")
        if self.unsigned and column_type not in (ColumnType.INTEGER, ColumnType.FLOAT, ColumnType.DECIMAL):
            raise ValueError("UNSIGNED is only valid on numeric columns")

        return self

    @property
    def has_default(self) -> bool:
        """True when DEFAULT was given, including an explicit ``None``."""
        return "default" in self.model_fields_set

    @property
    def precision(self) -> int:
        return self.size or 10

    @property
    def scale(self) -> int:
        return self.length or 0


class KeyReference(SQLCommandBaseModel):
    """Target of a FOREIGN key."""

    table: str = Field(..., min_length=1)
    columns: List[str] = Field(..., min_length=1)

    @field_validator("columns", mode="before")
    @classmethod
    def wrap_single_column(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


class KeyDefinition(SQLCommandBaseModel):
    """Portable index or constraint definition.

    Accepts typed fields or the loose list form ``[type, columns, {options}]``.

    Example:
        >>> KeyDefinition(type="UNIQUE", columns=["email"], name="uq_users_email")
        >>> KeyDefinition.model_validate(["KEY", ["last_name", "first_name"]])
    """

    type: KeyType
    columns: List[str] = Field(..., min_length=1)
    name: Optional[str] = Field(default=None, alias="NAME", min_length=1)
    references: Optional[KeyReference] = Field(default=None, alias="REFERENCES")
    on_delete: Optional[str] = Field(default=None, alias="ON DELETE")
    on_update: Optional[str] = Field(default=None, alias="ON UPDATE")

    @model_validator(mode="before")
    @classmethod
    def parse_loose_form(cls, data: Any) -> Any:
        if not isinstance(data, (list, tuple)):
            return data

        items = list(data)
        options: Dict[str, Any] = {}
        if items and isinstance(items[-1], dict):
            options = dict(items.pop())
        if len(items) != 2:
            raise ValueError("key definition list must be [type, columns, {options}]")

        parsed: Dict[str, Any] = {"type": items[0], "columns": items[1]}
        parsed.update(options)
        return parsed

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            if v in ("INDEX", "KEY"):
                return "KEY"
        return v

    @field_validator("columns", mode="before")
    @classmethod
    def wrap_single_column(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("on_delete", "on_update")
    @classmethod
    def validate_action(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        action = " ".join(v.upper().split())
        if action not in REFERENTIAL_ACTIONS:
            raise ValueError(f"referential action must be one of {', '.join(REFERENTIAL_ACTIONS)}")
        return action

    @model_validator(mode="after")
    def validate_references(self):
        """FOREIGN keys need a target with a matching column count."""
        if self.type == KeyType.FOREIGN:
            if self.references is None:
                raise ValueError("FOREIGN key requires REFERENCES")
            if len(self.references.columns) != len(self.columns):
                raise ValueError("FOREIGN key column count does not match REFERENCES")
        elif self.references is not None or self.on_delete or self.on_update:
            raise ValueError(f"REFERENCES is only valid on FOREIGN keys, not {self.type.value}")
        return self
