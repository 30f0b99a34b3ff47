"""SQLAlchemy-backed driver.

The driver keeps a single connection open for the lifetime of a session,
since USE, SET and explicit transactions are connection state. The engine
runs in AUTOCOMMIT isolation so that BEGIN/COMMIT/ROLLBACK statements
from the capability table are the only transaction control.
"""

import itertools
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError

from sqlcommand.common.exceptions import connection_error, query_execution_error
from sqlcommand.constants.sql import ValueKind
from sqlcommand.logging import get_logger
from sqlcommand.query_builder.capabilities import DialectCapabilities
from sqlcommand.query_builder.placeholders import substitute
from sqlcommand.query_builder.plan import Statement


logger = get_logger(__name__)


class SQLAlchemyResult:
    """Wraps a CursorResult so rows come back as dicts."""

    def __init__(self, result: CursorResult, statement: Statement):
        self._result = result
        self._statement = statement
        self.returns_rows = result.returns_rows
        self.rowcount = result.rowcount

    def keys(self) -> List[str]:
        if not self.returns_rows:
            return []
        return list(self._result.keys())

    def fetchone(self) -> Optional[Dict[str, Any]]:
        if not self.returns_rows:
            return None
        try:
            row = self._result.fetchone()
        except SQLAlchemyError as exc:
            raise query_execution_error(self._statement.sql, exc)
        return None if row is None else dict(row._mapping)

    def close(self) -> None:
        self._result.close()


class SQLAlchemyDriver:
    """Driver over one SQLAlchemy connection.

    Args:
        url: SQLAlchemy database URL
        capabilities: Capability table of the dialect behind ``url``
        echo: Echo SQL emitted by the engine
        pool_pre_ping: Test pooled connections before use
        route: Connection slot this driver serves
        engine: Pre-built engine, mainly for tests
    """

    def __init__(
        self,
        url: str,
        capabilities: DialectCapabilities,
        echo: bool = False,
        pool_pre_ping: bool = True,
        route: str = "primary",
        engine: Optional[Engine] = None,
    ):
        self.url = url
        self.capabilities = capabilities
        self.dialect = capabilities.name
        self.route = route
        self.echo = echo
        self.pool_pre_ping = pool_pre_ping
        self._engine = engine
        self._connection: Optional[Connection] = None

    @property
    def engine(self) -> Engine:
        """Get or create the SQLAlchemy engine with lazy initialization."""
        if self._engine is None:
            self._engine = create_engine(
                self.url,
                echo=self.echo,
                pool_pre_ping=self.pool_pre_ping,
                isolation_level="AUTOCOMMIT",
            )
        return self._engine

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> None:
        """Open the connection if it is not open yet.

        Raises:
            ExecutionError: With CONNECTION_ERROR if the server is unreachable
        """
        if self._connection is not None:
            return
        try:
            self._connection = self.engine.connect()
        except SQLAlchemyError as exc:
            raise connection_error(
                f"Failed to connect to {self.dialect}",
                dialect=self.dialect,
                route=self.route,
                cause=exc,
            )
        logger.info(
            "Connected",
            extra={"db.dialect": self.dialect, "db.route": self.route},
        )

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self.connect()
        return self._connection

    def _to_driver(self, statement: Statement) -> Tuple[str, Union[tuple, Dict[str, Any], None]]:
        """Rewrite ``?`` markers into the DBAPI paramstyle and convert values.

        Statements go to ``exec_driver_sql`` rather than through ``text()``.
        ``text()`` treats every ``:name`` as a bind parameter, including the
        ``:30`` inside a ``'10:30'`` literal. Markers are rewritten here with
        the same quote-aware scan the builders use, so literals and quoted
        identifiers of the dialect are left untouched.
        """
        values = [self._bind_value(parameter.value, parameter.kind) for parameter in statement.parameters]
        if not values:
            return statement.sql, None

        paramstyle = self.engine.dialect.paramstyle
        quotes = self.capabilities.quoted_spans
        counter = itertools.count()
        sql = statement.sql

        if paramstyle in ("format", "pyformat"):
            # the driver applies %-formatting to the whole statement
            sql = sql.replace("%", "%%")

        if paramstyle == "qmark":
            return sql, tuple(values)
        if paramstyle == "format":
            return substitute(sql, lambda: "%s", quotes=quotes), tuple(values)
        if paramstyle == "numeric":
            return substitute(sql, lambda: f":{next(counter) + 1}", quotes=quotes), tuple(values)
        if paramstyle == "numeric_dollar":
            return substitute(sql, lambda: f"${next(counter) + 1}", quotes=quotes), tuple(values)

        names = [f"p{i}" for i in range(len(values))]
        if paramstyle == "pyformat":
            sql = substitute(sql, lambda: f"%({names[next(counter)]})s", quotes=quotes)
        else:
            sql = substitute(sql, lambda: f":{names[next(counter)]}", quotes=quotes)
        return sql, dict(zip(names, values))

    @staticmethod
    def _bind_value(value: Any, kind: ValueKind) -> Any:
        if kind == ValueKind.NULL:
            return None
        if kind == ValueKind.BINARY and value is not None:
            return bytes(value)
        return value

    def execute(self, statement: Statement, stream: bool = False) -> SQLAlchemyResult:
        """Execute one compiled statement.

        Args:
            statement: Statement with ``?`` markers
            stream: Stream rows from the server instead of buffering them

        Raises:
            ExecutionError: With QUERY_EXECUTION_ERROR if the server rejects it
        """
        sql, parameters = self._to_driver(statement)
        options: Dict[str, Any] = {}
        if parameters is None:
            options["no_parameters"] = True
        if stream:
            options["stream_results"] = True

        try:
            result = self.connection.exec_driver_sql(sql, parameters, execution_options=options)
        except SQLAlchemyError as exc:
            raise query_execution_error(statement.sql, exc)
        return SQLAlchemyResult(result, statement)

    def _run(self, sql: str) -> None:
        self.execute(Statement(sql)).close()

    def begin(self) -> None:
        self._run(self.capabilities.begin_statement)

    def commit(self) -> None:
        self._run(self.capabilities.commit_statement)

    def rollback(self) -> None:
        self._run(self.capabilities.rollback_statement)

    def close(self) -> None:
        """Close the connection and dispose of the engine."""
        try:
            if self._connection is not None:
                self._connection.close()
        finally:
            self._connection = None
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
        logger.info(
            "Disconnected",
            extra={"db.dialect": self.dialect, "db.route": self.route},
        )
