"""MySQL / MariaDB query builder implementation."""

from sqlcommand.commands import ShowCreateDatabase, ShowCreateTable, ShowDatabases, ShowTables
from sqlcommand.constants.sql import (
    AutoIncrementStyle,
    ColumnType,
    CommentStyle,
    IndexStatementStyle,
    KeyType,
)
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.plan import CompileContext, QueryPlan, Statement


MYSQL_CAPABILITIES = DialectCapabilities(
    name="mysql",
    identifier_quote=("`", "`"),
    quoted_spans=(("'", "'"), ('"', '"'), ("`", "`")),
    update_limit=True,
    table_charset=True,
    inline_keys=frozenset(KeyType),
    separate_keys=frozenset(KeyType),
    index_statement_style=IndexStatementStyle.ALTER_TABLE,
    drop_index_on_table=True,
    max_identifier_length=64,
    add_column_position=True,
    drop_temporary_keyword=True,
    integer_types={1: "TINYINT", 2: "SMALLINT", 3: "MEDIUMINT", 4: "INT", 8: "BIGINT"},
    native_unsigned=True,
    float_types={4: "FLOAT", 8: "DOUBLE"},
    max_decimal_precision=65,
    max_decimal_scale=30,
    string_types={1: "VARCHAR({length})", 2: "TEXT", 3: "MEDIUMTEXT", 4: "LONGTEXT"},
    fixed_string_type="CHAR({length})",
    max_string_length=16383,
    binary_types={1: "VARBINARY({length})", 2: "BLOB", 3: "MEDIUMBLOB", 4: "LONGBLOB"},
    fixed_binary_type="BINARY({length})",
    max_binary_length=65535,
    max_fixed_length=255,
    temporal_types={
        ColumnType.DATE: "DATE",
        ColumnType.TIME: "TIME",
        ColumnType.DATETIME: "DATETIME",
    },
    boolean_type="TINYINT(1)",
    auto_increment_style=AutoIncrementStyle.KEYWORD,
    comment_style=CommentStyle.INLINE,
    inline_references=False,
    insert_id_sql="SELECT LAST_INSERT_ID() AS id",
    begin_statement="START TRANSACTION",
    bulk_import_on=["SET foreign_key_checks = 0", "SET unique_checks = 0"],
    bulk_import_off=["SET foreign_key_checks = 1", "SET unique_checks = 1"],
    backslash_escapes=True,
)


class MySQLQueryBuilder(QueryBuilder):
    """Query builder for MySQL and MariaDB.

    MySQL is the richest target: every key type can be declared inline,
    UPDATE/DELETE accept ORDER BY and LIMIT, and the SHOW family is native.
    Native SHOW output is renamed by position to the normalised row shape.
    """

    capabilities = MYSQL_CAPABILITIES

    def _build_show_databases(self, command: ShowDatabases, context: CompileContext) -> QueryPlan:
        return QueryPlan(
            statements=[Statement("SHOW DATABASES")],
            reshape=self._positional_reshape("name"),
        )

    def _build_show_tables(self, command: ShowTables, context: CompileContext) -> QueryPlan:
        if command.full:
            return QueryPlan(
                statements=[Statement("SHOW FULL TABLES")],
                reshape=self._positional_reshape("name", "type"),
            )
        return QueryPlan(
            statements=[Statement("SHOW TABLES")],
            reshape=self._positional_reshape("name"),
        )

    def _build_show_create_database(self, command: ShowCreateDatabase, context: CompileContext) -> QueryPlan:
        return QueryPlan(
            statements=[Statement(f"SHOW CREATE DATABASE {self.quote_identifier(command.name, 'database')}")],
            reshape=self._positional_reshape("name", "sql"),
        )

    def _build_show_create_table(self, command: ShowCreateTable, context: CompileContext) -> QueryPlan:
        return QueryPlan(
            statements=[Statement(f"SHOW CREATE TABLE {self.quote_identifier(command.name, 'table')}")],
            reshape=self._positional_reshape("name", "sql"),
        )
