"""PostgreSQL query builder implementation."""

from sqlcommand.commands import CreateDatabase, ShowCreateDatabase, ShowCreateTable, ShowDatabases, ShowTables
from sqlcommand.constants.sql import AutoIncrementStyle, ColumnType, CommentStyle, KeyType
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.plan import CompileContext, Parameter, QueryPlan, Statement


POSTGRESQL_CAPABILITIES = DialectCapabilities(
    name="postgresql",
    identifier_quote=('"', '"'),
    inline_keys=frozenset({KeyType.PRIMARY, KeyType.FOREIGN}),
    separate_keys=frozenset({KeyType.PRIMARY, KeyType.UNIQUE, KeyType.KEY, KeyType.FOREIGN}),
    max_identifier_length=63,
    truncate_multiple=True,
    integer_types={2: "SMALLINT", 4: "INTEGER", 8: "BIGINT"},
    integer_overflow_type="NUMERIC(20,0)",
    float_types={4: "REAL", 8: "DOUBLE PRECISION"},
    decimal_type="NUMERIC({precision},{scale})",
    max_decimal_precision=1000,
    max_decimal_scale=1000,
    string_types={1: "VARCHAR({length})", 2: "TEXT", 3: "TEXT", 4: "TEXT"},
    fixed_string_type="CHAR({length})",
    max_string_length=10485760,
    binary_types={1: "BYTEA", 2: "BYTEA", 3: "BYTEA", 4: "BYTEA"},
    max_binary_length=1073741823,
    max_fixed_length=10485760,
    temporal_types={
        ColumnType.DATE: "DATE",
        ColumnType.TIME: "TIME",
        ColumnType.DATETIME: "TIMESTAMP",
    },
    boolean_type="BOOLEAN",
    boolean_literals=("TRUE", "FALSE"),
    auto_increment_style=AutoIncrementStyle.SERIAL,
    serial_types={2: "SMALLSERIAL", 4: "SERIAL", 8: "BIGSERIAL"},
    comment_style=CommentStyle.STATEMENT,
    insert_id_requires_column=True,
    insert_id_sql="SELECT currval(pg_get_serial_sequence(?, ?)) AS id",
    use_statement="SET search_path TO {name}",
    bulk_import_on=["SET session_replication_role = replica"],
    bulk_import_off=["SET session_replication_role = DEFAULT"],
)


class PostgreSQLQueryBuilder(QueryBuilder):
    """Query builder for PostgreSQL.

    Differences from MySQL:
        - Secondary (KEY) indexes become CREATE INDEX follow-ups
        - FULLTEXT keys have no portable equivalent and are dropped
        - UPDATE/DELETE ignore ORDER BY and LIMIT
        - AUTO INCREMENT uses SERIAL types; the generated id is read from
          the column's sequence
        - USE switches the search path of the current database
    """

    capabilities = POSTGRESQL_CAPABILITIES

    def _binary_literal(self, value: bytes) -> str:
        return f"'\\x{value.hex()}'::bytea"

    def _build_create_database(self, command: CreateDatabase, context: CompileContext) -> QueryPlan:
        self._no_args(command)
        sql = f"CREATE DATABASE {self.quote_identifier(command.name, 'database')}"
        if command.character_set or command.collate:
            sql += " TEMPLATE template0"
        if command.character_set:
            sql += f" ENCODING {self.quote_literal(command.character_set)}"
        if command.collate:
            sql += f" LC_COLLATE {self.quote_literal(command.collate)}"
        return QueryPlan([Statement(sql)])

    def _build_show_databases(self, command: ShowDatabases, context: CompileContext) -> QueryPlan:
        return QueryPlan([Statement(
            "SELECT datname AS name FROM pg_database WHERE NOT datistemplate ORDER BY datname"
        )])

    def _build_show_tables(self, command: ShowTables, context: CompileContext) -> QueryPlan:
        columns = "table_name AS name, table_type AS type" if command.full else "table_name AS name"
        return QueryPlan([Statement(
            f"SELECT {columns} FROM information_schema.tables "
            "WHERE table_schema = current_schema() ORDER BY table_name"
        )])

    def _build_show_create_database(self, command: ShowCreateDatabase, context: CompileContext) -> QueryPlan:
        return self._static_create_database(command)

    def _build_show_create_table(self, command: ShowCreateTable, context: CompileContext) -> QueryPlan:
        table = command.name.split(".")[-1]
        return QueryPlan(
            statements=[Statement(
                f"{self._INFORMATION_SCHEMA_COLUMNS} "
                "WHERE table_schema = current_schema() AND table_name = ? ORDER BY ordinal_position",
                [Parameter.infer(table)],
            )],
            reshape=self._reconstruct_create_table(command.name),
        )
