"""PostgreSQL query builder."""

from sqlcommand.query_builder.postgresql.builder import POSTGRESQL_CAPABILITIES, PostgreSQLQueryBuilder

__all__ = [
    "POSTGRESQL_CAPABILITIES",
    "PostgreSQLQueryBuilder",
]
