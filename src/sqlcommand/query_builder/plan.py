"""Statement plans produced by the query builders.

A plan is the ordered list of ``(sql, parameters)`` statements a command
compiles to, plus the client-side post-processing the cursor applies to
the last statement's rows.
"""

from dataclasses import dataclass, field, replace
from itertools import islice
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from sqlcommand.constants.sql import CommandType, ValueKind


Row = Dict[str, Any]


@dataclass(frozen=True)
class Parameter:
    """A bound value and the kind the driver should bind it as."""

    value: Any
    kind: ValueKind = ValueKind.STRING

    @classmethod
    def infer(cls, value: Any, kind: Optional[ValueKind] = None) -> "Parameter":
        """Build a parameter, inferring its kind unless one is given."""
        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        if kind is None:
            if value is None:
                kind = ValueKind.NULL
            elif isinstance(value, bytes):
                kind = ValueKind.BINARY
            else:
                kind = ValueKind.STRING
        return cls(value=value, kind=ValueKind(kind))


@dataclass
class Statement:
    """One SQL text with ``?`` markers and its ordered parameters."""

    sql: str
    parameters: List[Parameter] = field(default_factory=list)

    @property
    def values(self) -> List[Any]:
        return [parameter.value for parameter in self.parameters]

    def __str__(self) -> str:
        return self.sql


@dataclass(frozen=True)
class RowFilter:
    """Client-side LIMIT: skip ``skip`` rows, then yield at most ``take``."""

    skip: int = 0
    take: Optional[int] = None

    def apply(self, rows: Iterable[Row]) -> Iterator[Row]:
        stop = None if self.take is None else self.skip + self.take
        return islice(rows, self.skip, stop)


@dataclass
class CompileContext:
    """Inputs to a single compilation that are not part of the command.

    Attributes:
        master: Whether the plan will run on the master connection
        subquery: Whether the SELECT is being compiled as a nested subquery
        fetch: Runs a read statement on the bound connection and returns its
            rows; needed by plans that depend on the live schema
    """

    master: bool = False
    subquery: bool = False
    fetch: Optional[Callable[[Statement], List[Row]]] = None

    def nested(self) -> "CompileContext":
        return replace(self, subquery=True)


@dataclass
class QueryPlan:
    """Ordered statements for one command plus cursor post-processing.

    Attributes:
        statements: Statements to run in order; may be empty for commands
            that only change session state
        command_type: The command the plan was compiled from
        row_filter: LIMIT emulation applied by the cursor
        reshape: Turns the driver rows into the normalised row shape
        static_rows: Rows the cursor returns without consulting the driver
        export_rows: Return buffer values as ``bytes`` for replay as INSERT
        export_hints: Collect a column to value-kind map while fetching
        master: Whether the plan was compiled for the master connection
    """

    statements: List[Statement] = field(default_factory=list)
    command_type: Optional[CommandType] = None
    row_filter: Optional[RowFilter] = None
    reshape: Optional[Callable[[List[Row]], List[Row]]] = None
    static_rows: Optional[List[Row]] = None
    export_rows: bool = False
    export_hints: bool = False
    master: bool = False

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    @property
    def sql(self) -> List[str]:
        return [statement.sql for statement in self.statements]
