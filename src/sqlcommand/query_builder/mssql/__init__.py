"""SQL Server query builder."""

from sqlcommand.query_builder.mssql.builder import MSSQL_CAPABILITIES, MSSQLQueryBuilder

__all__ = [
    "MSSQL_CAPABILITIES",
    "MSSQLQueryBuilder",
]
