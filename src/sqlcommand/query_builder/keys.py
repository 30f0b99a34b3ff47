"""Portable key definition to dialect SQL.

Each key type resolves to one of three outcomes for a CREATE TABLE:

- ``InlineKey``: declared inside the CREATE TABLE body
- ``DeferredKey``: created by a follow-up ADD INDEX statement
- ``UnsupportedKey``: dropped from the plan
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from sqlcommand.commands.definitions import KeyDefinition
from sqlcommand.constants.sql import IndexStatementStyle, KeyType
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.plan import Statement


_NAME_UNSAFE = re.compile(r"[^0-9A-Za-z_]+")


@dataclass(frozen=True)
class InlineKey:
    sql: str


@dataclass(frozen=True)
class DeferredKey:
    key: KeyDefinition


@dataclass(frozen=True)
class UnsupportedKey:
    key: KeyDefinition


KeyTranslation = Union[InlineKey, DeferredKey, UnsupportedKey]


class KeyDefinitionTranslator:
    """Translates KeyDefinition models using a capability table.

    Args:
        capabilities: Target dialect capabilities
        quote_identifier: Dialect identifier quoting
    """

    def __init__(self, capabilities: DialectCapabilities, quote_identifier: Callable[[str], str]):
        self.capabilities = capabilities
        self.quote_identifier = quote_identifier

    def index_name(self, table: str, key: KeyDefinition) -> str:
        """Return the key name, generating ``idx_<table>_<columns>`` when absent."""
        if key.name:
            return key.name
        prefix = "fk" if key.type == KeyType.FOREIGN else "idx"
        base = table.split(".")[-1].lstrip("#")
        name = _NAME_UNSAFE.sub("_", f"{prefix}_{base}_{'_'.join(key.columns)}")
        return name[:self.capabilities.max_identifier_length]

    def translate(self, table: str, key: KeyDefinition) -> KeyTranslation:
        """Decide how a key from a CREATE TABLE is compiled."""
        key_type = KeyType(key.type)
        if self.capabilities.supports_inline_key(key_type):
            return InlineKey(self.inline_sql(table, key))
        if self.capabilities.supports_separate_key(key_type):
            return DeferredKey(key)
        return UnsupportedKey(key)

    def _columns(self, columns) -> str:
        return ", ".join(self.quote_identifier(column) for column in columns)

    def _references(self, key: KeyDefinition) -> str:
        sql = (
            f"REFERENCES {self.quote_identifier(key.references.table)} "
            f"({self._columns(key.references.columns)})"
        )
        if key.on_delete:
            sql += f" ON DELETE {key.on_delete}"
        if key.on_update:
            sql += f" ON UPDATE {key.on_update}"
        return sql

    def inline_sql(self, table: str, key: KeyDefinition) -> str:
        """Key clause as written in a CREATE TABLE body or after ALTER TABLE ... ADD."""
        key_type = KeyType(key.type)
        columns = self._columns(key.columns)
        mysql_style = self.capabilities.index_statement_style == IndexStatementStyle.ALTER_TABLE

        if key_type == KeyType.PRIMARY:
            if key.name and not mysql_style:
                return f"CONSTRAINT {self.quote_identifier(key.name)} PRIMARY KEY ({columns})"
            return f"PRIMARY KEY ({columns})"

        if key_type == KeyType.FOREIGN:
            constraint = f"CONSTRAINT {self.quote_identifier(key.name)} " if key.name else ""
            return f"{constraint}FOREIGN KEY ({columns}) {self._references(key)}"

        name = self.quote_identifier(self.index_name(table, key))
        if key_type == KeyType.UNIQUE:
            if mysql_style:
                return f"UNIQUE KEY {name} ({columns})"
            return f"CONSTRAINT {name} UNIQUE ({columns})"
        if key_type == KeyType.FULLTEXT:
            return f"FULLTEXT KEY {name} ({columns})"
        return f"KEY {name} ({columns})"

    def separate_statement(self, table: str, key: KeyDefinition) -> Optional[Statement]:
        """ADD INDEX statement for an existing table, or None if unsupported."""
        key_type = KeyType(key.type)
        if not self.capabilities.supports_separate_key(key_type):
            return None

        quoted_table = self.quote_identifier(table)
        if (
            self.capabilities.index_statement_style == IndexStatementStyle.ALTER_TABLE
            or key_type in (KeyType.PRIMARY, KeyType.FOREIGN)
        ):
            return Statement(f"ALTER TABLE {quoted_table} ADD {self.inline_sql(table, key)}")

        unique = "UNIQUE " if key_type == KeyType.UNIQUE else ""
        name = self.quote_identifier(self.index_name(table, key))
        return Statement(
            f"CREATE {unique}INDEX {name} ON {quoted_table} ({self._columns(key.columns)})"
        )

    def drop_statement(self, table: str, name: str) -> Statement:
        if self.capabilities.drop_index_on_table:
            return Statement(f"DROP INDEX {self.quote_identifier(name)} ON {self.quote_identifier(table)}")
        # schema-qualified index name where the table is
        if "." in table:
            name = f"{table.rsplit('.', 1)[0]}.{name}"
        return Statement(f"DROP INDEX {self.quote_identifier(name)}")
