from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, ClassVar, List, Optional, Tuple

from sqlcommand.commands import (
    AddColumn,
    AddIndex,
    BaseCommand,
    BulkImportMode,
    CreateDatabase,
    CreateTable,
    Delete,
    DropColumn,
    DropDatabase,
    DropIndex,
    DropTable,
    Insert,
    Select,
    Set,
    ShowCreateDatabase,
    ShowCreateTable,
    ShowDatabases,
    ShowTables,
    TruncateTable,
    Update,
    Use,
)
from sqlcommand.common.exceptions import ErrorCode, unsupported_command_error, validation_error
from sqlcommand.constants.sql import AutoIncrementStyle, CommandType, KeyType, LimitSyntax, TemporaryTableStyle
from sqlcommand.logging import get_logger
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.columns import ColumnDefinitionTranslator
from sqlcommand.query_builder.keys import DeferredKey, InlineKey, KeyDefinitionTranslator
from sqlcommand.query_builder.placeholders import ArgumentList, count_placeholders, substitute
from sqlcommand.query_builder.plan import CompileContext, Parameter, QueryPlan, Row, RowFilter, Statement
from sqlcommand.query_builder.subquery import SubqueryProcessor


logger = get_logger(__name__)

# How a ``?`` in a clause is bound
_IDENTIFIER = "identifier"
_VALUE = "value"


class QueryBuilder(ABC):
    """Compiles commands into statement plans for one dialect.

    The shared generators here cover every command; they consult the
    dialect's capability table for anything that varies as data. Dialect
    subclasses provide the capability table and override the generators
    whose behaviour genuinely diverges (the SHOW family, emulated DROP
    COLUMN, database creation).

    Query builders do NOT execute statements, with one exception: plans
    that depend on the live schema read it through ``CompileContext.fetch``.

    Security Principles:
        1. **Values are always bound**: every value from a payload or the
           argument list becomes a ``Parameter``; DDL literals that cannot be
           bound (DEFAULT, COMMENT) go through ``quote_literal``
        2. **Identifiers are always quoted**: table, column and index names,
           and identifier arguments, go through ``quote_identifier``
        3. **Raw fragments are explicit**: only clause strings and ``inline``
           maps are emitted verbatim
    """

    capabilities: ClassVar[DialectCapabilities]

    def __init__(self):
        self.columns = ColumnDefinitionTranslator(self.capabilities, self.quote_identifier, self.quote_literal)
        self.keys = KeyDefinitionTranslator(self.capabilities, self.quote_identifier)

    @property
    def dialect(self) -> str:
        return self.capabilities.name

    def build(self, command: BaseCommand, context: Optional[CompileContext] = None) -> QueryPlan:
        """Build the statement plan for a command.

        Args:
            command: Command to compile
            context: Routing and nesting information for this compilation

        Returns:
            The plan, possibly empty for state-only commands

        Raises:
            UnsupportedCommandError: If the command type has no generator
            ValidationError: If the command cannot be compiled as given
        """
        context = context or CompileContext()

        operation_mapping = {
            CommandType.SELECT: self._build_select,
            CommandType.INSERT: self._build_insert,
            CommandType.UPDATE: self._build_update,
            CommandType.DELETE: self._build_delete,
            CommandType.TRUNCATE_TABLE: self._build_truncate_table,
            CommandType.SET: self._build_set,
            CommandType.USE: self._build_use,
            CommandType.CREATE_DATABASE: self._build_create_database,
            CommandType.DROP_DATABASE: self._build_drop_database,
            CommandType.CREATE_TABLE: self._build_create_table,
            CommandType.DROP_TABLE: self._build_drop_table,
            CommandType.ADD_COLUMN: self._build_add_column,
            CommandType.DROP_COLUMN: self._build_drop_column,
            CommandType.ADD_INDEX: self._build_add_index,
            CommandType.DROP_INDEX: self._build_drop_index,
            CommandType.SHOW_DATABASES: self._build_show_databases,
            CommandType.SHOW_TABLES: self._build_show_tables,
            CommandType.SHOW_CREATE_DATABASE: self._build_show_create_database,
            CommandType.SHOW_CREATE_TABLE: self._build_show_create_table,
            CommandType.BULK_IMPORT_MODE: self._build_bulk_import_mode,
        }

        builder_method = operation_mapping.get(command.command_type)
        if builder_method is None:
            raise unsupported_command_error(command.command_type)

        plan = builder_method(command, context)
        plan.command_type = command.command_type
        plan.master = context.master

        logger.debug(
            "Compiled command",
            extra={
                "db.dialect": self.dialect,
                "db.operation": command.command_type.value,
                "statement.count": len(plan),
            },
        )
        return plan

    # ------------------------------------------------------------------
    # Quoting
    # ------------------------------------------------------------------

    def quote_identifier(self, identifier: str, identifier_type: str = "identifier") -> str:
        """Quote an identifier for safe SQL usage.

        Dotted names are quoted part by part (``db.table`` becomes
        ``"db"."table"``). Embedded closing quotes are doubled.

        Args:
            identifier: Identifier to quote
            identifier_type: Type of identifier for error messages

        Returns:
            Quoted identifier
        """
        if not isinstance(identifier, str):
            raise validation_error(
                f"{identifier_type} must be a string, got {type(identifier).__name__}",
                value=identifier,
                error_code=ErrorCode.INVALID_IDENTIFIER,
            )
        opening, closing = self.capabilities.identifier_quote
        quoted = []
        for part in identifier.split("."):
            part = part.strip()
            self._validate_identifier(part, identifier_type)
            quoted.append(f"{opening}{part.replace(closing, closing * 2)}{closing}")
        return ".".join(quoted)

    def _validate_identifier(self, identifier: str, identifier_type: str = "identifier") -> None:
        """Validate an identifier before quoting.

        Raises:
            ValidationError: If identifier is empty, too long or contains NUL
        """
        if not identifier:
            raise validation_error(f"Empty {identifier_type} name", error_code=ErrorCode.INVALID_IDENTIFIER)
        if len(identifier) > 128:
            raise validation_error(
                f"{identifier_type} name too long: {identifier[:32]}...",
                error_code=ErrorCode.INVALID_IDENTIFIER,
            )
        if "\x00" in identifier:
            raise validation_error(
                f"Invalid {identifier_type} name: contains NUL",
                error_code=ErrorCode.INVALID_IDENTIFIER,
            )

    def quote_literal(self, value: Any) -> str:
        """Quote a value as a SQL literal.

        Only used where the SQL grammar does not accept a bound parameter
        (DDL DEFAULT and COMMENT values, some session statements).
        """
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            true_literal, false_literal = self.capabilities.boolean_literals
            return true_literal if value else false_literal
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self._binary_literal(bytes(value))
        if isinstance(value, datetime):
            value = value.isoformat(sep=" ")
        elif isinstance(value, (date, time)):
            value = value.isoformat()

        text = str(value)
        if self.capabilities.backslash_escapes:
            text = text.replace("\\", "\\\\")
        text = text.replace("'", "''")
        return f"'{text}'"

    def _binary_literal(self, value: bytes) -> str:
        return f"X'{value.hex()}'"

    def _table_name(self, name: str, temporary: bool = False) -> str:
        if (
            temporary
            and self.capabilities.temporary_style == TemporaryTableStyle.PREFIX
            and not name.split(".")[-1].startswith("#")
        ):
            return f"#{name}"
        return name

    # ------------------------------------------------------------------
    # Clause helpers
    # ------------------------------------------------------------------

    def _render(
        self,
        text: str,
        clause: str,
        args: Optional[ArgumentList],
        parameters: List[Parameter],
        subqueries: Optional[SubqueryProcessor] = None,
        mode: Optional[str] = _VALUE,
    ) -> str:
        """Substitute placeholders in one clause.

        A ``?`` consumes the next argument: in identifier mode it is quoted
        inline, in value mode it stays a marker and the argument is appended
        to ``parameters``. With no mode, ``?`` is rejected.
        """

        def on_placeholder() -> str:
            if mode is None or args is None:
                raise validation_error(
                    f"? placeholders are not allowed in {clause}",
                    field=clause,
                    error_code=ErrorCode.ARGUMENT_MISMATCH,
                )
            value = args.take(clause)
            if mode == _IDENTIFIER:
                return self.quote_identifier(value, f"{clause} argument")
            parameters.append(Parameter.infer(value))
            return "?"

        on_subquery = subqueries.expand if subqueries is not None else None
        return substitute(text, on_placeholder, on_subquery, quotes=self.capabilities.quoted_spans)

    def _resolve_limit(self, limit: Any, args: ArgumentList) -> Optional[Tuple[int, int]]:
        """Resolve a LIMIT payload to ``(offset, count)``."""
        if limit is None:
            return None
        if isinstance(limit, int):
            return 0, limit

        values = []
        for part in limit.split(","):
            part = part.strip()
            if part == "?":
                values.append(self._limit_value(args.take("LIMIT")))
            else:
                values.append(int(part))
        if len(values) == 1:
            return 0, values[0]
        return values[0], values[1]

    @staticmethod
    def _limit_value(value: Any) -> int:
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
        raise validation_error(
            "LIMIT arguments must be non-negative integers",
            field="LIMIT",
            value=value,
            error_code=ErrorCode.INVALID_ARGUMENT,
        )

    def _limit_sql(self, offset: int, count: int) -> str:
        sql = f" LIMIT {count}"
        if offset:
            sql += f" OFFSET {offset}"
        return sql

    def _no_args(self, command: BaseCommand) -> None:
        if command.args:
            raise validation_error(
                f"{command.command_type.value} takes no placeholder arguments, {len(command.args)} given",
                error_code=ErrorCode.ARGUMENT_MISMATCH,
            )

    def _restrictions(
        self,
        command: Any,
        args: ArgumentList,
        parameters: List[Parameter],
    ) -> str:
        """WHERE / ORDER BY / LIMIT for UPDATE and DELETE.

        ORDER BY and LIMIT are dropped with a warning where the dialect
        cannot restrict UPDATE/DELETE; they are never emulated since neither
        statement returns rows.
        """
        name = command.command_type.value
        sql = ""
        if command.where_clause:
            sql += " WHERE " + self._render(command.where_clause, "WHERE", args, parameters)

        order_sql = None
        if command.order_by:
            order_sql = self._render(command.order_by, "ORDER BY", args, parameters, mode=_IDENTIFIER)

        limit = self._resolve_limit(command.limit, args)
        if limit is not None and limit[0]:
            raise validation_error(
                f"{name} LIMIT does not accept an offset",
                field="LIMIT",
                value=command.limit,
            )

        if self.capabilities.update_limit:
            if order_sql:
                sql += f" ORDER BY {order_sql}"
            if limit is not None:
                sql += f" LIMIT {limit[1]}"
        elif order_sql or limit is not None:
            logger.warning(
                f"{name} ORDER BY/LIMIT ignored: {self.dialect} cannot restrict {name}",
                extra={"db.dialect": self.dialect, "db.operation": name},
            )
        return sql

    # ------------------------------------------------------------------
    # DML
    # ------------------------------------------------------------------

    def _compile_select(
        self,
        select: Select,
        context: CompileContext,
        into: Optional[str] = None,
    ) -> Tuple[Statement, Optional[RowFilter]]:
        """Compile a SELECT into one statement plus an optional row filter.

        Arguments are consumed in FROM, WHERE, GROUP BY, HAVING, ORDER BY,
        LIMIT order, which is also textual order, so parameters line up
        with the ``?`` markers of the result.

        Args:
            select: SELECT command
            context: Compilation context; with ``subquery`` set the LIMIT row
                filter is suppressed
            into: Quoted target table for ``SELECT ... INTO``

        Returns:
            Tuple of statement and row filter (None when LIMIT is native)
        """
        args = ArgumentList(select.args, "SELECT")
        parameters: List[Parameter] = []
        subqueries = SubqueryProcessor(self._compile_subquery, select.subqueries, context, parameters)

        sql = "SELECT DISTINCT " if select.distinct else "SELECT "
        sql += self._render(select.column_list, "columns", None, parameters, subqueries, mode=None)
        if into:
            sql += f" INTO {into}"
        if select.from_clause:
            sql += " FROM " + self._render(select.from_clause, "FROM", args, parameters, subqueries, mode=_IDENTIFIER)
        if select.where_clause:
            sql += " WHERE " + self._render(select.where_clause, "WHERE", args, parameters, subqueries)
        if select.group_by:
            sql += " GROUP BY " + self._render(select.group_by, "GROUP BY", args, parameters, subqueries, mode=_IDENTIFIER)
        if select.having_clause:
            sql += " HAVING " + self._render(select.having_clause, "HAVING", args, parameters, subqueries)
        if select.order_by:
            sql += " ORDER BY " + self._render(select.order_by, "ORDER BY", args, parameters, subqueries, mode=_IDENTIFIER)

        row_filter = None
        limit = self._resolve_limit(select.limit, args)
        if limit is not None:
            offset, count = limit
            if self.capabilities.limit_syntax == LimitSyntax.LIMIT_OFFSET:
                sql += self._limit_sql(offset, count)
            elif context.subquery:
                logger.warning(
                    "LIMIT inside a subquery is not supported by this dialect and was ignored",
                    extra={"db.dialect": self.dialect, "limit": f"{offset}, {count}"},
                )
            else:
                row_filter = RowFilter(skip=offset, take=count)

        args.ensure_consumed()
        subqueries.finish()
        return Statement(sql, parameters), row_filter

    def _compile_subquery(self, select: Select, context: CompileContext) -> Statement:
        statement, _ = self._compile_select(select, context.nested())
        return statement

    def _build_select(self, command: Select, context: CompileContext) -> QueryPlan:
        statement, row_filter = self._compile_select(command, context)
        return QueryPlan(
            statements=[statement],
            row_filter=row_filter,
            export_rows=command.export_rows,
            export_hints=command.export_hints,
        )

    def _build_insert(self, command: Insert, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        table = self.quote_identifier(command.table, "table")

        if command.select is not None:
            statement = self._compile_subquery(command.select, context)
            columns = ""
            if command.columns:
                columns = f" ({', '.join(self.quote_identifier(c) for c in command.columns)})"
            return QueryPlan([Statement(f"INSERT INTO {table}{columns} {statement.sql}", statement.parameters)])

        for column, fragment in command.inline.items():
            if count_placeholders(fragment, self.capabilities.quoted_spans):
                raise validation_error(
                    f"inline value for {column!r} cannot contain ? placeholders",
                    field=column,
                )

        value_columns = command.value_columns
        names = [self.quote_identifier(c) for c in value_columns]
        names += [self.quote_identifier(c) for c in command.inline]

        rows = command.rows
        batch = self.capabilities.insert_batch_size(len(value_columns)) or len(rows)

        statements = []
        for start in range(0, len(rows), batch):
            parameters: List[Parameter] = []
            groups = []
            for row in rows[start:start + batch]:
                markers = []
                for column in value_columns:
                    parameters.append(Parameter.infer(row[column], command.kinds.get(column)))
                    markers.append("?")
                markers.extend(command.inline.values())
                groups.append(f"({', '.join(markers)})")
            statements.append(Statement(
                f"INSERT INTO {table} ({', '.join(names)}) VALUES {', '.join(groups)}",
                parameters,
            ))
        return QueryPlan(statements)

    def _build_update(self, command: Update, context: CompileContext) -> QueryPlan:
        args = ArgumentList(command.args, "UPDATE")
        parameters: List[Parameter] = []
        assignments = []

        for column, value in command.values.items():
            quoted = self.quote_identifier(column)
            if value is True:
                if not self.capabilities.update_default_keyword:
                    raise validation_error(
                        f"{self.dialect} cannot reset {column!r} to DEFAULT in an UPDATE",
                        field=column,
                    )
                assignments.append(f"{quoted} = DEFAULT")
            elif value is False:
                assignments.append(f"{quoted} = NULL")
            else:
                parameters.append(Parameter.infer(value))
                assignments.append(f"{quoted} = ?")

        for column, fragment in command.inline.items():
            if count_placeholders(fragment, self.capabilities.quoted_spans):
                raise validation_error(
                    f"inline value for {column!r} cannot contain ? placeholders",
                    field=column,
                )
            assignments.append(f"{self.quote_identifier(column)} = {fragment}")

        sql = f"UPDATE {self.quote_identifier(command.table, 'table')} SET {', '.join(assignments)}"
        sql += self._restrictions(command, args, parameters)
        args.ensure_consumed()
        return QueryPlan([Statement(sql, parameters)])

    def _build_delete(self, command: Delete, context: CompileContext) -> QueryPlan:
        args = ArgumentList(command.args, "DELETE")
        parameters: List[Parameter] = []
        sql = f"DELETE FROM {self.quote_identifier(command.table, 'table')}"
        sql += self._restrictions(command, args, parameters)
        args.ensure_consumed()
        return QueryPlan([Statement(sql, parameters)])

    def _build_truncate_table(self, command: TruncateTable, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        tables = [self.quote_identifier(table, "table") for table in command.tables]
        if not self.capabilities.truncate_statement:
            return QueryPlan([Statement(f"DELETE FROM {table}") for table in tables])
        if self.capabilities.truncate_multiple:
            return QueryPlan([Statement(f"TRUNCATE TABLE {', '.join(tables)}")])
        return QueryPlan([Statement(f"TRUNCATE TABLE {table}") for table in tables])

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _build_set(self, command: Set, context: CompileContext) -> QueryPlan:
        args = ArgumentList(command.args, "SET")
        parameters: List[Parameter] = []
        # PRAGMA cannot bind, so ? is rejected before it reaches the server
        mode = _VALUE if self.capabilities.set_parameters else None
        body = self._render(command.statement, "SET", args, parameters, mode=mode)
        args.ensure_consumed()
        return QueryPlan([Statement(f"{self.capabilities.set_keyword} {body}", parameters)])

    def _build_use(self, command: Use, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        template = self.capabilities.use_statement
        if template is None:
            logger.debug(
                "USE has no statement on this dialect, only session state changes",
                extra={"db.dialect": self.dialect},
            )
            return QueryPlan()
        return QueryPlan([Statement(template.format(name=self.quote_identifier(command.database, "database")))])

    def _build_bulk_import_mode(self, command: BulkImportMode, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        statements = self.capabilities.bulk_import_on if command.enabled else self.capabilities.bulk_import_off
        return QueryPlan([Statement(sql) for sql in statements])

    def build_insert_id(self, table: Optional[str], column: Optional[str]) -> Statement:
        """Statement returning the last generated id as column ``id``.

        Where ``insert_id_requires_column`` is set, the id is read from the
        column itself and ``insert_id_sql`` binds the quoted table name and
        the column name, in that order.

        Args:
            table: Table of the last INSERT
            column: AUTO INCREMENT column of the last INSERT, if given

        Raises:
            ValidationError: If the dialect needs the column and it is unknown
        """
        if not self.capabilities.insert_id_requires_column:
            return Statement(self.capabilities.insert_id_sql)
        if not table or not column:
            raise validation_error(
                f"{self.dialect} needs the AUTO INCREMENT column of the last INSERT to read its id",
                field="AUTO INCREMENT",
            )
        return Statement(
            self.capabilities.insert_id_sql,
            [Parameter.infer(self.quote_identifier(table, "table")), Parameter.infer(column)],
        )

    def begin_statement(self) -> Statement:
        return Statement(self.capabilities.begin_statement)

    def commit_statement(self) -> Statement:
        return Statement(self.capabilities.commit_statement)

    def rollback_statement(self) -> Statement:
        return Statement(self.capabilities.rollback_statement)

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def _build_create_database(self, command: CreateDatabase, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        sql = f"CREATE DATABASE {self.quote_identifier(command.name, 'database')}"
        if command.character_set:
            sql += f" DEFAULT CHARACTER SET {command.character_set}"
        if command.collate:
            sql += f" COLLATE {command.collate}"
        return QueryPlan([Statement(sql)])

    def _build_drop_database(self, command: DropDatabase, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        exists = "IF EXISTS " if command.if_exists else ""
        return QueryPlan([Statement(f"DROP DATABASE {exists}{self.quote_identifier(command.name, 'database')}")])

    def _create_table_prefix(self, temporary: bool) -> str:
        if temporary and self.capabilities.temporary_style == TemporaryTableStyle.KEYWORD:
            return "CREATE TEMPORARY TABLE"
        return "CREATE TABLE"

    def _table_options(self, command: CreateTable) -> str:
        if not (command.character_set or command.collate):
            return ""
        if not self.capabilities.table_charset:
            logger.debug(
                "Table CHARACTER SET/COLLATE ignored",
                extra={"db.dialect": self.dialect, "table": command.name},
            )
            return ""
        sql = ""
        if command.character_set:
            sql += f" DEFAULT CHARACTER SET {command.character_set}"
        if command.collate:
            sql += f" COLLATE {command.collate}"
        return sql

    def _build_create_table(self, command: CreateTable, context: CompileContext) -> QueryPlan:
        """Build CREATE TABLE plus any follow-up statements.

        The plan is CREATE TABLE, then one ADD INDEX per key the dialect
        cannot declare inline, then column follow-ups (e.g. comments). Keys
        the dialect cannot create at all are dropped with a warning.
        """
        self._no_args(command)
        table_name = self._table_name(command.name, command.temporary)
        table = self.quote_identifier(table_name, "table")

        if command.select is not None:
            return self._build_create_table_as(command, table, context)

        caps = self.capabilities
        primary_columns = [
            name for name, definition in command.columns.items()
            if definition.primary_key
            or (definition.auto_increment and caps.auto_increment_style == AutoIncrementStyle.ROWID)
        ]
        composite = len(primary_columns) > 1

        body: List[str] = []
        constraints: List[str] = []
        deferred: List[Statement] = []
        follow_up: List[Statement] = []

        for name, definition in command.columns.items():
            fragment = self.columns.translate(table_name, name, definition, inline_primary_key=not composite)
            body.append(fragment.sql)
            constraints.extend(fragment.constraints)
            follow_up.extend(fragment.follow_up)

        if composite:
            constraints.insert(0, f"PRIMARY KEY ({', '.join(self.quote_identifier(c) for c in primary_columns)})")

        for key in command.keys:
            if key.type == KeyType.PRIMARY and primary_columns:
                if sorted(key.columns) == sorted(primary_columns):
                    logger.debug(
                        "PRIMARY key duplicates column-level primary key, skipped",
                        extra={"db.dialect": self.dialect, "table": command.name},
                    )
                    continue
                raise validation_error(
                    f"table {command.name!r} declares conflicting primary keys",
                    field="keys",
                )

            translation = self.keys.translate(table_name, key)
            if isinstance(translation, InlineKey):
                constraints.append(translation.sql)
            elif isinstance(translation, DeferredKey):
                deferred.append(self.keys.separate_statement(table_name, key))
            else:
                logger.warning(
                    f"{key.type.value} key is not supported by {self.dialect} and was dropped",
                    extra={"db.dialect": self.dialect, "table": command.name, "key.columns": key.columns},
                )

        sql = (
            f"{self._create_table_prefix(command.temporary)} {table} "
            f"({', '.join(body + constraints)}){self._table_options(command)}"
        )
        return QueryPlan([Statement(sql)] + deferred + follow_up)

    def _build_create_table_as(self, command: CreateTable, table: str, context: CompileContext) -> QueryPlan:
        if self.capabilities.ctas:
            statement = self._compile_subquery(command.select, context)
            sql = f"{self._create_table_prefix(command.temporary)} {table}{self._table_options(command)} AS {statement.sql}"
            return QueryPlan([Statement(sql, statement.parameters)])

        statement, _ = self._compile_select(command.select, context.nested(), into=table)
        return QueryPlan([statement])

    def _build_drop_table(self, command: DropTable, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        caps = self.capabilities
        keyword = "DROP TEMPORARY TABLE" if command.temporary and caps.drop_temporary_keyword else "DROP TABLE"
        exists = "IF EXISTS " if command.if_exists else ""
        tables = [
            self.quote_identifier(self._table_name(table, command.temporary), "table")
            for table in command.tables
        ]
        if caps.drop_multiple_tables:
            return QueryPlan([Statement(f"{keyword} {exists}{', '.join(tables)}")])
        return QueryPlan([Statement(f"{keyword} {exists}{table}") for table in tables])

    def _build_add_column(self, command: AddColumn, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        table = self.quote_identifier(command.table, "table")
        fragment = self.columns.translate(command.table, command.name, command.definition)

        sql = f"ALTER TABLE {table} {self.capabilities.add_column_keyword} {fragment.sql}"
        if command.first or command.after:
            if self.capabilities.add_column_position:
                sql += " FIRST" if command.first else f" AFTER {self.quote_identifier(command.after)}"
            else:
                logger.warning(
                    "ADD COLUMN position ignored",
                    extra={"db.dialect": self.dialect, "table": command.table, "column": command.name},
                )

        statements = [Statement(sql)]
        statements += [Statement(f"ALTER TABLE {table} ADD {constraint}") for constraint in fragment.constraints]
        statements += fragment.follow_up
        return QueryPlan(statements)

    def _build_drop_column(self, command: DropColumn, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        if not self.capabilities.native_drop_column:
            return self._rebuild_without_column(command, context)
        return QueryPlan([Statement(
            f"ALTER TABLE {self.quote_identifier(command.table, 'table')} "
            f"DROP COLUMN {self.quote_identifier(command.name)}"
        )])

    def _rebuild_without_column(self, command: DropColumn, context: CompileContext) -> QueryPlan:
        """DROP COLUMN for dialects without ``native_drop_column``."""
        raise validation_error(
            f"{self.dialect} cannot drop column {command.name!r}",
            field="name",
            value=command.name,
        )

    def _build_add_index(self, command: AddIndex, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        statement = self.keys.separate_statement(command.table, command.key)
        if statement is None:
            logger.warning(
                f"{command.key.type.value} key is not supported by {self.dialect}, ADD INDEX ignored",
                extra={"db.dialect": self.dialect, "table": command.table},
            )
            return QueryPlan()
        return QueryPlan([statement])

    def _build_drop_index(self, command: DropIndex, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        return QueryPlan([self.keys.drop_statement(command.table, command.name)])

    # ------------------------------------------------------------------
    # SHOW
    # ------------------------------------------------------------------

    @staticmethod
    def _positional_reshape(*names: str) -> Callable[[List[Row]], List[Row]]:
        """Rename driver columns, by position, to the normalised names."""

        def reshape(rows: List[Row]) -> List[Row]:
            return [dict(zip(names, row.values())) for row in rows]

        return reshape

    def _static_create_database(self, command: ShowCreateDatabase) -> QueryPlan:
        return QueryPlan(static_rows=[{
            "name": command.name,
            "sql": f"CREATE DATABASE {self.quote_identifier(command.name, 'database')}",
        }])

    def _reconstruct_create_table(self, table: str) -> Callable[[List[Row]], List[Row]]:
        """Reshape ``information_schema.columns`` rows into a CREATE TABLE row.

        Only columns are reconstructed; keys and indexes are not.
        """

        def reshape(rows: List[Row]) -> List[Row]:
            if not rows:
                return []
            lines = []
            for row in rows:
                line = f"  {self.quote_identifier(row['column_name'])} {self._information_schema_type(row)}"
                if str(row.get("is_nullable", "YES")).upper() == "NO":
                    line += " NOT NULL"
                if row.get("column_default") is not None:
                    line += f" DEFAULT {row['column_default']}"
                lines.append(line)
            sql = f"CREATE TABLE {self.quote_identifier(table, 'table')} (\n" + ",\n".join(lines) + "\n)"
            return [{"name": table, "sql": sql}]

        return reshape

    @staticmethod
    def _information_schema_type(row: Row) -> str:
        data_type = str(row["data_type"]).upper()
        length = row.get("character_maximum_length")
        if length is not None:
            return f"{data_type}(MAX)" if int(length) < 0 else f"{data_type}({length})"
        if data_type in ("NUMERIC", "DECIMAL") and row.get("numeric_precision") is not None:
            return f"{data_type}({row['numeric_precision']},{row.get('numeric_scale') or 0})"
        return data_type

    _INFORMATION_SCHEMA_COLUMNS = (
        "SELECT column_name AS column_name, data_type AS data_type, "
        "character_maximum_length AS character_maximum_length, "
        "numeric_precision AS numeric_precision, numeric_scale AS numeric_scale, "
        "is_nullable AS is_nullable, column_default AS column_default "
        "FROM information_schema.columns"
    )

    @abstractmethod
    def _build_show_databases(self, command: ShowDatabases, context: CompileContext) -> QueryPlan:
        """Build SHOW DATABASES; rows are normalised to ``{"name"}``."""
        pass

    @abstractmethod
    def _build_show_tables(self, command: ShowTables, context: CompileContext) -> QueryPlan:
        """Build SHOW TABLES; rows are ``{"name"}`` plus ``"type"`` with FULL."""
        pass

    @abstractmethod
    def _build_show_create_database(self, command: ShowCreateDatabase, context: CompileContext) -> QueryPlan:
        """Build SHOW CREATE DATABASE; rows are ``{"name", "sql"}``."""
        pass

    @abstractmethod
    def _build_show_create_table(self, command: ShowCreateTable, context: CompileContext) -> QueryPlan:
        """Build SHOW CREATE TABLE; rows are ``{"name", "sql"}``."""
        pass
