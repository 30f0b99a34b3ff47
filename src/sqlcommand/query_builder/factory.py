"""Query Builder Factory.

This module provides a factory for creating dialect-specific query builders,
either from an explicit dialect name, a SQLAlchemy URL, or the active
environment settings.
"""

from typing import Dict, Optional, Type, Union

from sqlcommand.common.exceptions import configuration_error
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.mssql.builder import MSSQLQueryBuilder
from sqlcommand.query_builder.mysql.builder import MySQLQueryBuilder
from sqlcommand.query_builder.postgresql.builder import PostgreSQLQueryBuilder
from sqlcommand.query_builder.sqlite.builder import SQLiteQueryBuilder


# Backend names as they appear in SQLAlchemy URLs, mapped to dialects
_DIALECT_ALIASES: Dict[str, str] = {
    "mysql": "mysql",
    "mariadb": "mysql",
    "postgresql": "postgresql",
    "postgres": "postgresql",
    "sqlite": "sqlite",
    "mssql": "mssql",
}


class QueryBuilderFactory:
    """Factory for creating dialect-specific query builders.

    Builders are stateless, so a single instance per dialect is cached and
    shared between sessions.

    Example:
        >>> builder = QueryBuilderFactory.create("postgresql")
        >>> builder = QueryBuilderFactory.create("mysql+pymysql://app@db/app")
    """

    _builders: Dict[str, Type[QueryBuilder]] = {
        "mysql": MySQLQueryBuilder,
        "postgresql": PostgreSQLQueryBuilder,
        "sqlite": SQLiteQueryBuilder,
        "mssql": MSSQLQueryBuilder,
    }
    _instances: Dict[str, QueryBuilder] = {}

    @staticmethod
    def detect_dialect(name_or_url: str) -> str:
        """Return the dialect for a dialect name or SQLAlchemy URL.

        Args:
            name_or_url: ``"mysql"``, ``"postgresql+psycopg2://..."`` and so on

        Raises:
            SQLCommandError: If the backend is not supported
        """
        backend = name_or_url.split("://", 1)[0].split("+", 1)[0].strip().lower()
        dialect = _DIALECT_ALIASES.get(backend)
        if dialect is None:
            raise configuration_error(
                f"Unsupported dialect: {backend!r}. "
                f"Supported dialects: {', '.join(QueryBuilderFactory._builders)}",
                config_key="dialect",
            )
        return dialect

    @classmethod
    def create(cls, dialect: str) -> QueryBuilder:
        """Get the query builder for a dialect name or SQLAlchemy URL."""
        dialect = cls.detect_dialect(dialect)
        if dialect not in cls._instances:
            cls._instances[dialect] = cls._builders[dialect]()
        return cls._instances[dialect]


ConcreteQueryBuilder = Union[MySQLQueryBuilder, PostgreSQLQueryBuilder, SQLiteQueryBuilder, MSSQLQueryBuilder]


def get_query_builder(dialect: Optional[str] = None) -> ConcreteQueryBuilder:
    """Get a query builder, defaulting to the dialect of the active settings.

    Example:
        >>> from sqlcommand.query_builder import get_query_builder
        >>> builder = get_query_builder("sqlite")
        >>> builder.build(Select(columns="1")).sql
        ['SELECT 1']
    """
    if dialect is None:
        from sqlcommand.settings import get_settings

        settings = get_settings()
        dialect = settings.dialect or settings.dsn.get_secret_value()
    return QueryBuilderFactory.create(dialect)
