"""Command dispatch: parse, route, compile, execute."""

import time
from functools import partial
from typing import Any, Dict, List, Optional, Union

from sqlcommand.commands import BaseCommand, BulkImportMode, DropDatabase, Insert, Use, parse_command
from sqlcommand.common.exceptions import ErrorCode, SQLCommandError, execution_error, query_execution_error, validation_error
from sqlcommand.engine.cursor import Cursor
from sqlcommand.engine.replication import ConnectionSlot, ReplicationRouter
from sqlcommand.engine.state import ConnectionState
from sqlcommand.logging import get_logger
from sqlcommand.monitoring import QueryMetrics, QueryStats
from sqlcommand.query_builder.base import QueryBuilder
from sqlcommand.query_builder.plan import CompileContext, QueryPlan, Row, Statement
from sqlcommand.utils import traced


logger = get_logger(__name__)


def _span_attributes(dispatcher: "CommandDispatcher", command: Any, *_: Any, **__: Any) -> Dict[str, Any]:
    tag = command.command_type.value if isinstance(command, BaseCommand) else str(command)
    return {
        "db.system": dispatcher.builder.dialect,
        "db.operation": tag,
        "sqlcommand.route": dispatcher.router.active.name,
    }


class CommandDispatcher:
    """Executes commands against the routed connection.

    Args:
        builder: Query builder for the session dialect
        router: Replication router owning the connection slots
        state: Session state updated after successful commands
        stats: Query accounting for the session
    """

    def __init__(
        self,
        builder: QueryBuilder,
        router: ReplicationRouter,
        state: ConnectionState,
        stats: QueryStats,
    ):
        self.builder = builder
        self.router = router
        self.state = state
        self.stats = stats

    @traced(span_name="sqlcommand.execute", attribute_getter=_span_attributes)
    def execute(self, command: Union[str, BaseCommand], payload: Any = None, *args: Any) -> Cursor:
        """Execute a command and return a cursor over its rows.

        Args:
            command: A command model, or a command tag
            payload: Payload for a command tag
            *args: Positional arguments bound to ``?`` placeholders

        Returns:
            Cursor over the rows of the last statement of the plan

        Raises:
            UnsupportedCommandError: For an unknown command tag
            ValidationError: For a malformed payload or argument list
            ExecutionError: When the server rejects a statement
        """
        if isinstance(command, BaseCommand):
            if payload is not None:
                args = (payload,) + args
            if args:
                command = command.with_args(*args)
        else:
            command = parse_command(command, payload, *args)

        slot = self.router.route(command)
        context = CompileContext(master=slot.name == "master", fetch=partial(self._fetch, slot))
        plan = self.builder.build(command, context)

        cursor = self._run(plan, slot)
        self._update_state(command)
        return cursor

    def _run(self, plan: QueryPlan, slot: ConnectionSlot) -> Cursor:
        """Execute the plan's statements in order on one slot.

        Every statement but the last has its result closed immediately; the
        cursor wraps the last one.
        """
        command_name = plan.command_type.value if plan.command_type else "UNKNOWN"
        result = None
        completed = 0
        start_time = time.perf_counter()
        try:
            for index, statement in enumerate(plan.statements):
                last = index == len(plan.statements) - 1
                result = slot.driver.execute(statement, stream=last and self.state.large_results)
                completed += 1
                if not last:
                    result.close()
                    result = None
        except Exception as exc:
            duration = time.perf_counter() - start_time
            self._record(command_name, slot, completed, duration, success=False)
            failed = plan.statements[completed]
            if not isinstance(exc, SQLCommandError):
                exc = query_execution_error(failed.sql, exc)
            if completed:
                raise execution_error(
                    f"{command_name} failed at statement {completed + 1} of {len(plan)}; "
                    f"the {completed} completed statement(s) were not rolled back",
                    operation=command_name,
                    query=failed.sql,
                    error_code=ErrorCode.PARTIAL_PLAN_ERROR,
                    details={"completed": plan.sql[:completed]},
                    cause=exc,
                ) from exc
            raise exc

        duration = time.perf_counter() - start_time
        self._record(command_name, slot, completed, duration)
        return Cursor(result, plan)

    def _record(self, command: str, slot: ConnectionSlot, statements: int, duration: float, success: bool = True) -> None:
        self.stats.record(QueryMetrics(
            command=command,
            dialect=self.builder.dialect,
            route=slot.name,
            statements=statements,
            duration_seconds=duration,
            success=success,
        ))
        logger.debug(
            "Command executed" if success else "Command failed",
            extra={
                "db.dialect": self.builder.dialect,
                "db.operation": command,
                "db.route": slot.name,
                "statement.count": statements,
                "duration.seconds": f"{duration:.6f}",
            },
        )

    def _fetch(self, slot: ConnectionSlot, statement: Statement) -> List[Row]:
        """Run a read statement during compilation and return all rows."""
        result = slot.driver.execute(statement)
        try:
            rows = []
            while True:
                row = result.fetchone()
                if row is None:
                    return rows
                rows.append(row)
        finally:
            result.close()

    def _update_state(self, command: BaseCommand) -> None:
        if isinstance(command, Use):
            self.state.database = command.database
        elif isinstance(command, Insert):
            self.state.last_insert_table = command.table
            self.state.last_insert_column = command.auto_increment
        elif isinstance(command, BulkImportMode):
            self.state.bulk_import = command.enabled
        elif isinstance(command, DropDatabase) and command.name == self.state.database:
            self.state.database = None

    def insert_id(self) -> Optional[Any]:
        """Id generated by the last INSERT of this session.

        Raises:
            ValidationError: If no INSERT ran yet, or the dialect needs the
                AUTO INCREMENT column and the INSERT did not name it
        """
        if self.state.last_insert_table is None:
            raise validation_error("No INSERT has been executed in this session")
        statement = self.builder.build_insert_id(self.state.last_insert_table, self.state.last_insert_column)
        rows = self._fetch(self.router.active, statement)
        if not rows:
            return None
        return rows[0].get("id")
