"""Driver interface used by the dispatcher.

A driver owns one live database connection. The dispatcher only needs to
run a compiled statement and to read rows back, so the interface stays
small; ``SQLAlchemyDriver`` is the production implementation and tests
substitute mocks.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from sqlcommand.query_builder.plan import Statement


@runtime_checkable
class ResultHandle(Protocol):
    """Rows returned by one executed statement."""

    returns_rows: bool
    rowcount: int

    def keys(self) -> List[str]:
        ...

    def fetchone(self) -> Optional[Dict[str, Any]]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Driver(Protocol):
    """One connection to a database server.

    Attributes:
        dialect: Dialect name of the server
        route: Connection slot the driver serves ('primary' or 'master')
    """

    dialect: str
    route: str

    def connect(self) -> None:
        ...

    def execute(self, statement: Statement, stream: bool = False) -> ResultHandle:
        ...

    def begin(self) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def close(self) -> None:
        ...
