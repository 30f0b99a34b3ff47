"""Portable column definition to dialect SQL.

Type selection follows the dialect's capability table:

- INTEGER and FLOAT byte widths map to the narrowest native type at least
  as wide as requested. UNSIGNED on a dialect without unsigned types needs
  one width more; when none exists the overflow type is used, or the
  definition is rejected. AUTO INCREMENT columns never fall back to the
  overflow type: they keep the widest native integer (or SERIAL) type.
- DECIMAL precision and scale are clamped to the dialect maximum.
- STRING/BINARY size class 1 is variable width with a maximum length;
  lengths over the dialect maximum degrade to the class 2 type. FIXED
  selects the fixed-width variant when the dialect has one.
- DATE/TIME/DATETIME and BOOLEAN use whatever the dialect stores them as,
  which may be a string or narrow integer type.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from sqlcommand.commands.definitions import ColumnDefinition
from sqlcommand.common.exceptions import validation_error
from sqlcommand.constants.sql import AutoIncrementStyle, ColumnType, CommentStyle
from sqlcommand.logging import get_logger
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.plan import Statement


logger = get_logger(__name__)


@dataclass
class ColumnFragment:
    """A compiled column definition.

    Attributes:
        sql: Column definition for the CREATE TABLE body or ADD COLUMN
        constraints: Table-level constraints the column needs (e.g. a
            FOREIGN KEY on dialects without inline REFERENCES)
        follow_up: Statements to run after the table exists
    """

    sql: str
    constraints: List[str] = field(default_factory=list)
    follow_up: List[Statement] = field(default_factory=list)


class ColumnDefinitionTranslator:
    """Translates ColumnDefinition models using a capability table.

    Args:
        capabilities: Target dialect capabilities
        quote_identifier: Dialect identifier quoting
        quote_literal: Dialect literal quoting for DEFAULT and COMMENT values
    """

    def __init__(
        self,
        capabilities: DialectCapabilities,
        quote_identifier: Callable[[str], str],
        quote_literal: Callable[[Any], str],
    ):
        self.capabilities = capabilities
        self.quote_identifier = quote_identifier
        self.quote_literal = quote_literal

    def type_sql(self, definition: ColumnDefinition, name: str = "column") -> str:
        """Return the dialect type for a definition, without column options.

        Raises:
            ValidationError: If no native type can hold the requested range
        """
        caps = self.capabilities
        column_type = ColumnType(definition.type)

        if column_type == ColumnType.INTEGER:
            return self._integer_type(definition, name)

        if column_type == ColumnType.FLOAT:
            width = definition.size or 8
            type_sql = self._nearest(caps.float_types, width)
            if type_sql is None:
                raise validation_error(f"{caps.name} has no {width}-byte FLOAT type", field=name)
            if definition.unsigned and caps.native_unsigned:
                type_sql += " UNSIGNED"
            return type_sql

        if column_type == ColumnType.DECIMAL:
            precision = min(definition.precision, caps.max_decimal_precision)
            scale = min(definition.scale, caps.max_decimal_scale, precision)
            if (precision, scale) != (definition.precision, definition.scale):
                logger.warning(
                    "DECIMAL precision degraded to the dialect maximum",
                    extra={
                        "db.dialect": caps.name,
                        "column": name,
                        "requested": f"{definition.precision},{definition.scale}",
                        "used": f"{precision},{scale}",
                    },
                )
            type_sql = caps.decimal_type.format(precision=precision, scale=scale)
            if definition.unsigned and caps.native_unsigned:
                type_sql += " UNSIGNED"
            return type_sql

        if column_type in (ColumnType.STRING, ColumnType.BINARY):
            return self._sized_type(definition, column_type, name)

        if column_type == ColumnType.BOOLEAN:
            return caps.boolean_type

        return caps.temporal_types[column_type]

    def _integer_type(self, definition: ColumnDefinition, name: str) -> str:
        caps = self.capabilities
        width = definition.size or 4
        widen = definition.unsigned and not caps.native_unsigned
        wanted = width + 1 if widen else width
        serial_style = caps.auto_increment_style == AutoIncrementStyle.SERIAL

        if definition.auto_increment and widen:
            # generated ids stay in a native integer type
            widest = max(caps.serial_types if serial_style else caps.integer_types)
            if wanted > widest:
                logger.warning(
                    "Unsigned AUTO INCREMENT column kept at the widest signed integer type",
                    extra={"db.dialect": caps.name, "column": name},
                )
                wanted = widest

        if definition.auto_increment and serial_style:
            serial = self._nearest(caps.serial_types, wanted)
            if serial is not None:
                return serial

        type_sql = self._nearest(caps.integer_types, wanted)
        if type_sql is None:
            if widen and caps.integer_overflow_type:
                logger.debug(
                    "Unsigned integer widened to overflow type",
                    extra={"db.dialect": caps.name, "column": name},
                )
                return caps.integer_overflow_type
            raise validation_error(
                f"{caps.name} has no integer type wide enough for {width}-byte "
                f"{'unsigned ' if definition.unsigned else ''}column {name!r}",
                field=name,
            )
        if definition.unsigned and caps.native_unsigned:
            type_sql += " UNSIGNED"
        return type_sql

    def _sized_type(self, definition: ColumnDefinition, column_type: ColumnType, name: str) -> str:
        caps = self.capabilities
        if column_type == ColumnType.STRING:
            types, fixed_type, max_length = caps.string_types, caps.fixed_string_type, caps.max_string_length
        else:
            types, fixed_type, max_length = caps.binary_types, caps.fixed_binary_type, caps.max_binary_length

        size_class = definition.size or 1
        if size_class == 1:
            length = definition.length
            if definition.fixed:
                if fixed_type and length <= caps.max_fixed_length:
                    return fixed_type.format(length=length)
                logger.debug(
                    "FIXED column emulated as variable width",
                    extra={"db.dialect": caps.name, "column": name},
                )
            if length > max_length:
                logger.debug(
                    "Variable-width column longer than dialect maximum, using unbounded type",
                    extra={"db.dialect": caps.name, "column": name, "length": length},
                )
                return types[2]
            return types[1].format(length=length)
        return types[size_class]

    @staticmethod
    def _nearest(types: dict, width: int) -> Optional[str]:
        for candidate in sorted(types):
            if candidate >= width:
                return types[candidate]
        return None

    def translate(
        self,
        table: str,
        name: str,
        definition: ColumnDefinition,
        inline_primary_key: bool = True,
    ) -> ColumnFragment:
        """Compile one column definition.

        Args:
            table: Unquoted table name, used by follow-up statements
            name: Unquoted column name
            definition: Portable definition
            inline_primary_key: Emit PRIMARY KEY on the column itself; False
                when the table declares a composite primary key instead

        Returns:
            The compiled column fragment
        """
        caps = self.capabilities
        quoted_name = self.quote_identifier(name)
        fragment = ColumnFragment(sql="")
        auto_increment = definition.auto_increment
        style = caps.auto_increment_style

        if auto_increment and style == AutoIncrementStyle.ROWID:
            # SQLite only auto-increments an INTEGER PRIMARY KEY column
            if not inline_primary_key:
                raise validation_error(
                    f"{caps.name} AUTO INCREMENT column {name!r} cannot be part of a composite primary key",
                    field=name,
                )
            parts = ["INTEGER"]
        else:
            parts = [self.type_sql(definition, name)]

        if auto_increment and style == AutoIncrementStyle.IDENTITY:
            parts.append("IDENTITY(1,1)")

        if definition.not_null:
            parts.append("NOT NULL")
        if definition.has_default:
            parts.append(f"DEFAULT {self.default_sql(definition)}")

        if auto_increment and style == AutoIncrementStyle.KEYWORD:
            parts.append("AUTO_INCREMENT")

        if auto_increment and style == AutoIncrementStyle.ROWID:
            parts.append("PRIMARY KEY AUTOINCREMENT")
        elif definition.primary_key and inline_primary_key:
            parts.append("PRIMARY KEY")

        if definition.unique_key:
            parts.append("UNIQUE")

        if definition.references is not None:
            target = (
                f"{self.quote_identifier(definition.references.table)} "
                f"({self.quote_identifier(definition.references.column)})"
            )
            if caps.inline_references:
                parts.append(f"REFERENCES {target}")
            else:
                fragment.constraints.append(f"FOREIGN KEY ({quoted_name}) REFERENCES {target}")

        if definition.comment is not None:
            if caps.comment_style == CommentStyle.INLINE:
                parts.append(f"COMMENT {self.quote_literal(definition.comment)}")
            elif caps.comment_style == CommentStyle.STATEMENT:
                fragment.follow_up.append(Statement(
                    f"COMMENT ON COLUMN {self.quote_identifier(table)}.{quoted_name} "
                    f"IS {self.quote_literal(definition.comment)}"
                ))
            else:
                logger.debug(
                    "Column comment dropped, dialect cannot store it",
                    extra={"db.dialect": caps.name, "column": name},
                )

        fragment.sql = f"{quoted_name} {' '.join(parts)}"
        return fragment

    def default_sql(self, definition: ColumnDefinition) -> str:
        value = definition.default
        if ColumnType(definition.type) == ColumnType.BOOLEAN and isinstance(value, bool):
            true_literal, false_literal = self.capabilities.boolean_literals
            return true_literal if value else false_literal
        return self.quote_literal(value)
