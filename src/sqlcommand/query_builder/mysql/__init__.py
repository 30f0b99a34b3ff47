"""MySQL query builder."""

from sqlcommand.query_builder.mysql.builder import MYSQL_CAPABILITIES, MySQLQueryBuilder

__all__ = [
    "MYSQL_CAPABILITIES",
    "MySQLQueryBuilder",
]
