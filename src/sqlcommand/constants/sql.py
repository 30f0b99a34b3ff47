"""SQL and command-related constants.

This module contains the fundamental enums shared by the command models,
the query builders and the execution engine. It has no dependencies on
other sqlcommand modules.
"""

from enum import Enum


class CommandType(str, Enum):
    """Closed vocabulary of command tags.

    The value of each member is the exact tag accepted by
    ``parse_command``. Anything outside this vocabulary is rejected with
    ``UnsupportedCommandError``.

    Categories:
    - Query: SELECT, SHOW DATABASES, SHOW TABLES, SHOW CREATE DATABASE/TABLE
    - DML: INSERT, UPDATE, DELETE, TRUNCATE TABLE
    - DDL: CREATE/DROP DATABASE, CREATE/DROP TABLE, ADD/DROP COLUMN, ADD/DROP INDEX
    - Session: SET, USE, BULK IMPORT MODE
    """

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE_TABLE = "TRUNCATE TABLE"

    SET = "SET"
    USE = "USE"

    CREATE_DATABASE = "CREATE DATABASE"
    DROP_DATABASE = "DROP DATABASE"
    CREATE_TABLE = "CREATE TABLE"
    DROP_TABLE = "DROP TABLE"
    ADD_COLUMN = "ADD COLUMN"
    DROP_COLUMN = "DROP COLUMN"
    ADD_INDEX = "ADD INDEX"
    DROP_INDEX = "DROP INDEX"

    SHOW_DATABASES = "SHOW DATABASES"
    SHOW_TABLES = "SHOW TABLES"
    SHOW_CREATE_DATABASE = "SHOW CREATE DATABASE"
    SHOW_CREATE_TABLE = "SHOW CREATE TABLE"

    BULK_IMPORT_MODE = "BULK IMPORT MODE"


class ColumnType(str, Enum):
    """Portable column type tags."""

    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    DECIMAL = "DECIMAL"
    STRING = "STRING"
    BINARY = "BINARY"
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    BOOLEAN = "BOOLEAN"


class KeyType(str, Enum):
    """Portable index/constraint type tags."""

    PRIMARY = "PRIMARY"
    KEY = "KEY"
    UNIQUE = "UNIQUE"
    FULLTEXT = "FULLTEXT"
    FOREIGN = "FOREIGN"


class ValueKind(str, Enum):
    """How a bound parameter should be handed to the driver."""

    STRING = "string"
    BINARY = "binary"
    NULL = "null"


class LimitSyntax(str, Enum):
    """How a dialect restricts the number of returned rows."""

    LIMIT_OFFSET = "limit_offset"
    EMULATED = "emulated"


class AutoIncrementStyle(str, Enum):
    """How a dialect declares an auto-incrementing column."""

    KEYWORD = "keyword"      # INT AUTO_INCREMENT
    SERIAL = "serial"        # SERIAL / BIGSERIAL replaces the type
    IDENTITY = "identity"    # INT IDENTITY(1,1)
    ROWID = "rowid"          # INTEGER PRIMARY KEY AUTOINCREMENT


class CommentStyle(str, Enum):
    """How a dialect stores column comments."""

    INLINE = "inline"
    STATEMENT = "statement"
    NONE = "none"


class IndexStatementStyle(str, Enum):
    """How indexes are added to an existing table."""

    ALTER_TABLE = "alter_table"      # ALTER TABLE t ADD KEY ...
    CREATE_INDEX = "create_index"    # CREATE INDEX n ON t (...)


class TemporaryTableStyle(str, Enum):
    """How a temporary table is declared."""

    KEYWORD = "keyword"      # CREATE TEMPORARY TABLE
    PREFIX = "prefix"        # CREATE TABLE #name


WRITE_COMMANDS = frozenset({
    CommandType.INSERT,
    CommandType.UPDATE,
    CommandType.DELETE,
    CommandType.TRUNCATE_TABLE,
    CommandType.CREATE_DATABASE,
    CommandType.DROP_DATABASE,
    CommandType.CREATE_TABLE,
    CommandType.DROP_TABLE,
    CommandType.ADD_COLUMN,
    CommandType.DROP_COLUMN,
    CommandType.ADD_INDEX,
    CommandType.DROP_INDEX,
})
