"""SQLite query builder."""

from sqlcommand.query_builder.sqlite.builder import SQLITE_CAPABILITIES, SQLiteQueryBuilder

__all__ = [
    "SQLITE_CAPABILITIES",
    "SQLiteQueryBuilder",
]
