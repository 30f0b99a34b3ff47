"""DatabaseSession: the public entry point.

Ties settings, driver, router, tracker and dispatcher together for one
logical session. A session is not thread-safe; use one per thread.
"""

import uuid
from typing import Any, Callable, List, Optional, Union

from sqlcommand.commands import BaseCommand
from sqlcommand.common.exceptions import ErrorCode, ExecutionError, SQLCommandError, execution_error
from sqlcommand.engine.cursor import Cursor
from sqlcommand.engine.dispatcher import CommandDispatcher
from sqlcommand.engine.driver import Driver
from sqlcommand.engine.replication import ConnectionSlot, ReplicationRouter
from sqlcommand.engine.sqlalchemy_driver import SQLAlchemyDriver
from sqlcommand.engine.state import ConnectionState
from sqlcommand.logging import clear_session_context, get_logger, set_session_context
from sqlcommand.monitoring import QueryStats, create_query_stats
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.factory import QueryBuilderFactory
from sqlcommand.settings import DatabaseSettings, get_settings


logger = get_logger(__name__)


class DatabaseSession:
    """A connected session that executes commands.

    Use ``connect`` to build one from settings. Writes go to the master
    connection when ``master_dsn`` is configured.

    Args:
        builder: Query builder for the session dialect
        primary: Driver of the primary connection
        master_factory: Creates the master driver on the first write
        large_results: Stream rows instead of buffering them
        stats: Query accounting, created when omitted

    Example:
        >>> with DatabaseSession.connect() as db:
        ...     db.execute("INSERT", {"table": "users", "values": {"name": "x"}, "AUTO INCREMENT": "id"})
        ...     user_id = db.get_insert_id()
    """

    def __init__(
        self,
        builder: QueryBuilder,
        primary: Driver,
        master_factory: Optional[Callable[[], Driver]] = None,
        large_results: bool = False,
        stats: Optional[QueryStats] = None,
    ):
        self.session_id = str(uuid.uuid4())
        self.builder = builder
        self.state = ConnectionState(large_results=large_results)
        self.stats = stats if stats is not None else create_query_stats()
        self.router = ReplicationRouter(
            ConnectionSlot.open("primary", primary),
            builder,
            self.state,
            master_factory,
        )
        self.dispatcher = CommandDispatcher(builder, self.router, self.state, self.stats)
        self._closed = False
        set_session_context(session_id=self.session_id, dialect=builder.dialect)
        logger.info("Session opened", extra={"db.dialect": builder.dialect})

    @classmethod
    def connect(cls, settings: Optional[DatabaseSettings] = None) -> "DatabaseSession":
        """Open a session from settings.

        Args:
            settings: Connection settings; the environment settings when omitted

        Raises:
            SQLCommandError: With CONFIG_ERROR for an unsupported dialect
            ExecutionError: With CONNECTION_ERROR if the primary is unreachable
        """
        settings = settings or get_settings()
        dsn = settings.dsn.get_secret_value()
        builder = QueryBuilderFactory.create(settings.dialect or dsn)

        primary = SQLAlchemyDriver(
            dsn,
            builder.capabilities,
            echo=settings.echo,
            pool_pre_ping=settings.pool_pre_ping,
            route="primary",
        )

        master_factory = None
        if settings.master_dsn is not None:
            master_dsn = settings.master_dsn.get_secret_value()

            def master_factory() -> Driver:
                return SQLAlchemyDriver(
                    master_dsn,
                    builder.capabilities,
                    echo=settings.echo,
                    pool_pre_ping=settings.pool_pre_ping,
                    route="master",
                )

        return cls(builder, primary, master_factory, large_results=settings.large_results)

    def execute(self, command: Union[str, BaseCommand], payload: Any = None, *args: Any) -> Cursor:
        """Execute a command; see ``CommandDispatcher.execute``."""
        return self.dispatcher.execute(command, payload, *args)

    def begin(self) -> None:
        """Open a (possibly nested) transaction on every open connection."""
        self.router.begin()

    def commit(self) -> None:
        self.router.commit()

    def rollback(self) -> None:
        self.router.rollback()

    def get_insert_id(self) -> Optional[Any]:
        """Id generated by the last INSERT."""
        return self.dispatcher.insert_id()

    def use_master(self) -> None:
        """Route everything to the master connection from now on."""
        self.router.use_master()

    def set_large_results(self, enabled: bool) -> None:
        """Toggle streaming of result rows.

        While enabled, a cursor must be drained or freed before the next
        command runs on the same connection.
        """
        self.state.large_results = enabled

    @property
    def database(self) -> Optional[str]:
        return self.state.database

    @property
    def transaction_depth(self) -> int:
        return self.router.depth

    @property
    def query_count(self) -> int:
        return self.stats.count

    @property
    def query_time(self) -> float:
        return self.stats.elapsed

    @property
    def closed(self) -> bool:
        return self._closed

    def disconnect(self) -> None:
        """Commit open transactions and close every connection.

        Connections are released even when the commit fails; the first
        failure is raised afterwards as an ExecutionError.
        """
        if self._closed:
            return
        self._closed = True

        errors: List[Exception] = []
        for slot in self.router.slots:
            try:
                slot.tracker.commit_all()
            except Exception as exc:
                errors.append(exc)
        try:
            self.router.close()
        except Exception as exc:
            errors.append(exc)

        logger.info(
            "Session closed",
            extra={"query.count": self.stats.count, "query.time": f"{self.stats.elapsed:.6f}"},
        )
        clear_session_context()

        if errors:
            first = errors[0]
            if isinstance(first, ExecutionError):
                raise first
            raise execution_error(
                f"Disconnect failed: {first}",
                operation="disconnect",
                error_code=ErrorCode.DISCONNECT_ERROR,
                cause=first,
            ) from first

    def __enter__(self) -> "DatabaseSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None and self.router.depth:
            try:
                self.rollback()
            except SQLCommandError:
                logger.warning("Rollback on error failed", exc_info=True)
        self.disconnect()
