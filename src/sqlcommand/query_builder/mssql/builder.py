"""Microsoft SQL Server query builder implementation."""

from sqlcommand.commands import CreateDatabase, ShowCreateDatabase, ShowCreateTable, ShowDatabases, ShowTables
from sqlcommand.constants.sql import (
    AutoIncrementStyle,
    ColumnType,
    KeyType,
    LimitSyntax,
    TemporaryTableStyle,
)
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.plan import CompileContext, Parameter, QueryPlan, Statement


MSSQL_CAPABILITIES = DialectCapabilities(
    name="mssql",
    identifier_quote=("[", "]"),
    quoted_spans=(("'", "'"), ('"', '"'), ("[", "]")),
    limit_syntax=LimitSyntax.EMULATED,
    max_insert_rows=1000,
    max_parameters=2099,
    ctas=False,
    temporary_style=TemporaryTableStyle.PREFIX,
    inline_keys=frozenset({KeyType.PRIMARY, KeyType.FOREIGN}),
    separate_keys=frozenset({KeyType.PRIMARY, KeyType.UNIQUE, KeyType.KEY, KeyType.FOREIGN}),
    drop_index_on_table=True,
    max_identifier_length=128,
    add_column_keyword="ADD",
    integer_types={2: "SMALLINT", 4: "INT", 8: "BIGINT"},
    integer_overflow_type="DECIMAL(20,0)",
    float_types={4: "REAL", 8: "FLOAT"},
    max_decimal_precision=38,
    max_decimal_scale=38,
    string_types={1: "NVARCHAR({length})", 2: "NVARCHAR(MAX)", 3: "NVARCHAR(MAX)", 4: "NVARCHAR(MAX)"},
    fixed_string_type="NCHAR({length})",
    max_string_length=4000,
    binary_types={1: "VARBINARY({length})", 2: "VARBINARY(MAX)", 3: "VARBINARY(MAX)", 4: "VARBINARY(MAX)"},
    fixed_binary_type="BINARY({length})",
    max_binary_length=8000,
    max_fixed_length=4000,
    temporal_types={
        ColumnType.DATE: "DATE",
        ColumnType.TIME: "TIME",
        ColumnType.DATETIME: "DATETIME2",
    },
    boolean_type="BIT",
    auto_increment_style=AutoIncrementStyle.IDENTITY,
    insert_id_sql="SELECT @@IDENTITY AS id",
    begin_statement="BEGIN TRANSACTION",
    commit_statement="COMMIT TRANSACTION",
    rollback_statement="ROLLBACK TRANSACTION",
)


class MSSQLQueryBuilder(QueryBuilder):
    """Query builder for Microsoft SQL Server (T-SQL).

    Differences from MySQL:
        - LIMIT is emulated client-side by the cursor
        - Temporary tables use the ``#`` name prefix
        - CREATE TABLE ... SELECT compiles to ``SELECT ... INTO``
        - Multi-row INSERT is split at 1000 rows or 2099 parameters
        - TINYINT is unsigned, so signed 1-byte integers use SMALLINT
    """

    capabilities = MSSQL_CAPABILITIES

    def _binary_literal(self, value: bytes) -> str:
        return f"0x{value.hex()}"

    def _build_create_database(self, command: CreateDatabase, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        sql = f"CREATE DATABASE {self.quote_identifier(command.name, 'database')}"
        if command.collate:
            sql += f" COLLATE {command.collate}"
        return QueryPlan([Statement(sql)])

    def _build_show_databases(self, command: ShowDatabases, context: CompileContext) -> QueryPlan:
        return QueryPlan([Statement("SELECT name AS name FROM sys.databases ORDER BY name")])

    def _build_show_tables(self, command: ShowTables, context: CompileContext) -> QueryPlan:
        columns = "TABLE_NAME AS name, TABLE_TYPE AS type" if command.full else "TABLE_NAME AS name"
        return QueryPlan([Statement(
            f"SELECT {columns} FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_CATALOG = DB_NAME() AND TABLE_SCHEMA = SCHEMA_NAME() ORDER BY TABLE_NAME"
        )])

    def _build_show_create_database(self, command: ShowCreateDatabase, context: CompileContext) -> QueryPlan:
        return self._static_create_database(command)

    def _build_show_create_table(self, command: ShowCreateTable, context: CompileContext) -> QueryPlan:
        table = command.name.split(".")[-1]
        return QueryPlan(
            statements=[Statement(
                f"{self._INFORMATION_SCHEMA_COLUMNS} "
                "WHERE table_schema = SCHEMA_NAME() AND table_name = ? ORDER BY ordinal_position",
                [Parameter.infer(table)],
            )],
            reshape=self._reconstruct_create_table(command.name),
        )
