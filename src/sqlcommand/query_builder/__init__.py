"""Query builder module for SQL generation across dialects.

Query builders translate typed commands into ordered statement plans. They
are responsible for SQL generation only; execution is handled by the
engine package.

Architecture:
    - capabilities.py: per-dialect capability tables
    - placeholders.py: ``?`` / ``{N}`` scanning and argument consumption
    - subquery.py: SUBQUERIES expansion
    - columns.py / keys.py: portable column and key definitions to SQL
    - base.py: the shared ``QueryBuilder`` with every statement generator
    - mysql/, postgresql/, sqlite/, mssql/: dialect builders

Design Principles:
    1. **SQL Generation Only**: builders never execute statements
    2. **Dialect differences are data**: generators consult the capability
       table; dialect classes override only where behaviour diverges
    3. **Security First**: values are bound, identifiers are quoted
    4. **Stateless**: builders keep no state between calls

Example:
    >>> from sqlcommand.commands import parse_command
    >>> from sqlcommand.query_builder import get_query_builder
    >>>
    >>> builder = get_query_builder("postgresql")
    >>> plan = builder.build(parse_command("SELECT", {"FROM": "?", "WHERE": "id = ?"}, "users", 7))
    >>> plan.sql
    ['SELECT * FROM "users" WHERE id = ?']
"""

from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.columns import ColumnDefinitionTranslator, ColumnFragment
from sqlcommand.query_builder.factory import QueryBuilderFactory, get_query_builder
from sqlcommand.query_builder.keys import DeferredKey, InlineKey, KeyDefinitionTranslator, UnsupportedKey
from sqlcommand.query_builder.mssql import MSSQL_CAPABILITIES, MSSQLQueryBuilder
from sqlcommand.query_builder.mysql import MYSQL_CAPABILITIES, MySQLQueryBuilder
from sqlcommand.query_builder.placeholders import ArgumentList, count_placeholders, substitute
from sqlcommand.query_builder.plan import CompileContext, Parameter, QueryPlan, Row, RowFilter, Statement
from sqlcommand.query_builder.postgresql import POSTGRESQL_CAPABILITIES, PostgreSQLQueryBuilder
from sqlcommand.query_builder.sqlite import SQLITE_CAPABILITIES, SQLiteQueryBuilder
from sqlcommand.query_builder.subquery import SubqueryProcessor

__all__ = [
    # Plans
    "CompileContext",
    "Parameter",
    "QueryPlan",
    "Row",
    "RowFilter",
    "Statement",
    # Translation
    "ArgumentList",
    "count_placeholders",
    "substitute",
    "SubqueryProcessor",
    "ColumnDefinitionTranslator",
    "ColumnFragment",
    "KeyDefinitionTranslator",
    "InlineKey",
    "DeferredKey",
    "UnsupportedKey",
    # Builders
    "DialectCapabilities",
    "QueryBuilder",
    "MySQLQueryBuilder",
    "PostgreSQLQueryBuilder",
    "SQLiteQueryBuilder",
    "MSSQLQueryBuilder",
    "MYSQL_CAPABILITIES",
    "POSTGRESQL_CAPABILITIES",
    "SQLITE_CAPABILITIES",
    "MSSQL_CAPABILITIES",
    # Factory
    "QueryBuilderFactory",
    "get_query_builder",
]
