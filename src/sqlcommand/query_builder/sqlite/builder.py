"""SQLite query builder implementation."""

from sqlcommand.commands import (
    CreateDatabase,
    DropColumn,
    DropDatabase,
    ShowCreateDatabase,
    ShowCreateTable,
    ShowDatabases,
    ShowTables,
)
from sqlcommand.common.exceptions import validation_error
from sqlcommand.constants.sql import AutoIncrementStyle, ColumnType, KeyType
from sqlcommand.logging import get_logger
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.plan import CompileContext, Parameter, QueryPlan, Statement


logger = get_logger(__name__)


SQLITE_CAPABILITIES = DialectCapabilities(
    name="sqlite",
    identifier_quote=('"', '"'),
    quoted_spans=(("'", "'"), ('"', '"'), ("`", "`"), ("[", "]")),
    max_parameters=999,
    update_default_keyword=False,
    inline_keys=frozenset({KeyType.PRIMARY, KeyType.FOREIGN}),
    separate_keys=frozenset({KeyType.UNIQUE, KeyType.KEY}),
    max_identifier_length=128,
    native_drop_column=False,
    truncate_statement=False,
    drop_multiple_tables=False,
    integer_types={8: "INTEGER"},
    integer_overflow_type="NUMERIC",
    float_types={8: "REAL"},
    decimal_type="NUMERIC({precision},{scale})",
    string_types={1: "VARCHAR({length})", 2: "TEXT", 3: "TEXT", 4: "TEXT"},
    fixed_string_type="CHAR({length})",
    max_string_length=1000000000,
    binary_types={1: "BLOB", 2: "BLOB", 3: "BLOB", 4: "BLOB"},
    max_binary_length=1000000000,
    temporal_types={
        ColumnType.DATE: "TEXT",
        ColumnType.TIME: "TEXT",
        ColumnType.DATETIME: "TEXT",
    },
    boolean_type="INTEGER",
    auto_increment_style=AutoIncrementStyle.ROWID,
    insert_id_sql="SELECT last_insert_rowid() AS id",
    set_keyword="PRAGMA",
    set_parameters=False,
    use_statement=None,
    bulk_import_on=["PRAGMA foreign_keys = OFF"],
    bulk_import_off=["PRAGMA foreign_keys = ON"],
)


class SQLiteQueryBuilder(QueryBuilder):
    """Query builder for SQLite.

    SQLite has no server-side databases, so CREATE/DROP DATABASE attach and
    detach database files, USE only changes session state, and SET maps to
    PRAGMA. DROP COLUMN is emulated by recreating the table from the live
    column list.
    """

    capabilities = SQLITE_CAPABILITIES

    def _build_create_database(self, command: CreateDatabase, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        if command.character_set or command.collate:
            logger.debug(
                "CREATE DATABASE character set ignored",
                extra={"db.dialect": self.dialect, "database": command.name},
            )
        return QueryPlan([Statement(
            f"ATTACH DATABASE ? AS {self.quote_identifier(command.name, 'database')}",
            [Parameter.infer(f"{command.name}.db")],
        )])

    def _build_drop_database(self, command: DropDatabase, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        return QueryPlan([Statement(f"DETACH DATABASE {self.quote_identifier(command.name, 'database')}")])

    def _rebuild_without_column(self, command: DropColumn, context: CompileContext) -> QueryPlan:
        """Recreate the table without the dropped column.

        The live column list is read through ``context.fetch``. Constraints,
        indexes and declared types of the remaining columns are not carried
        over to the new table.

        Raises:
            ValidationError: If the schema cannot be read, the column does not
                exist, or it is the only column of the table
        """
        if context.fetch is None:
            raise validation_error(
                "sqlite DROP COLUMN needs a live connection to read the table definition",
                field="table",
                value=command.table,
            )

        table = self.quote_identifier(command.table, "table")
        rows = context.fetch(Statement(f"PRAGMA table_info({table})"))
        columns = [row["name"] for row in rows]
        if command.name not in columns:
            raise validation_error(
                f"column {command.name!r} does not exist in table {command.table!r}",
                field="name",
                value=command.name,
            )

        kept = [column for column in columns if column != command.name]
        if not kept:
            raise validation_error(
                f"cannot drop {command.name!r}, the only column of table {command.table!r}",
                field="name",
                value=command.name,
            )

        logger.warning(
            "sqlite DROP COLUMN recreates the table, constraints and indexes are not preserved",
            extra={"db.dialect": self.dialect, "table": command.table, "column": command.name},
        )

        *schema, base = command.table.split(".")
        temp_name = ".".join(schema + [f"_sqlcommand_{base}_tmp"])
        temp = self.quote_identifier(temp_name, "table")
        kept_sql = ", ".join(self.quote_identifier(column) for column in kept)
        return QueryPlan([
            Statement(f"CREATE TABLE {temp} AS SELECT {kept_sql} FROM {table}"),
            Statement(f"DROP TABLE {table}"),
            Statement(f"ALTER TABLE {temp} RENAME TO {self.quote_identifier(base, 'table')}"),
        ])

    def _build_show_databases(self, command: ShowDatabases, context: CompileContext) -> QueryPlan:
        return QueryPlan([Statement("SELECT name AS name FROM pragma_database_list ORDER BY seq")])

    def _build_show_tables(self, command: ShowTables, context: CompileContext) -> QueryPlan:
        columns = "name AS name"
        if command.full:
            columns += ", CASE type WHEN 'view' THEN 'VIEW' ELSE 'BASE TABLE' END AS type"
        return QueryPlan([Statement(
            f"SELECT {columns} FROM sqlite_master "
            "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )])

    def _build_show_create_database(self, command: ShowCreateDatabase, context: CompileContext) -> QueryPlan:
        return self._static_create_database(command)

    def _build_show_create_table(self, command: ShowCreateTable, context: CompileContext) -> QueryPlan:
        return QueryPlan([Statement(
            "SELECT name AS name, sql AS sql FROM sqlite_master WHERE type = 'table' AND name = ?",
            [Parameter.infer(command.name)],
        )])
