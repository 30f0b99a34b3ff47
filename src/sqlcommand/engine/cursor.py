"""Result cursor returned by command execution."""

from itertools import chain
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from sqlcommand.constants.sql import ValueKind
from sqlcommand.engine.driver import ResultHandle
from sqlcommand.query_builder.plan import QueryPlan, Row


class Cursor:
    """Rows of the last statement of a plan, post-processed per the plan.

    Processing order is: static rows (no driver result), then the plan's
    reshape (which materialises the driver rows), then the LIMIT row
    filter. Without a reshape rows are pulled from the driver lazily, so a
    cursor in large-results mode must be drained or freed before the next
    statement runs on the same connection.

    Args:
        result: Driver result of the last statement, or None for plans
            with no statements
        plan: The plan the result belongs to

    Example:
        >>> cursor = session.execute("SELECT", {"FROM": "users"})
        >>> for row in cursor:
        ...     print(row["name"])
    """

    def __init__(self, result: Optional[ResultHandle], plan: QueryPlan):
        self._result = result
        self.plan = plan
        self._hints: Dict[str, ValueKind] = {}
        self._closed = False
        self._rows = self._pipeline()

    @property
    def rowcount(self) -> int:
        """Rows affected by the statement, -1 when the driver does not know."""
        if self._result is None:
            return -1 if self.plan.static_rows is None else len(self.plan.static_rows)
        return self._result.rowcount

    @property
    def columns(self) -> List[str]:
        if self.plan.static_rows:
            return list(self.plan.static_rows[0])
        if self._result is None or self.plan.reshape is not None:
            return []
        return self._result.keys()

    @property
    def hints(self) -> Dict[str, ValueKind]:
        """Column to value kind map collected so far (EXPORT HINTS).

        Pass it as ``Insert.kinds`` when replaying exported rows.
        """
        return dict(self._hints)

    def _driver_rows(self) -> Iterator[Row]:
        if self._result is None or not self._result.returns_rows:
            return
        while True:
            row = self._result.fetchone()
            if row is None:
                break
            yield row
        self.free()

    def _pipeline(self) -> Iterator[Row]:
        if self.plan.static_rows is not None:
            rows: Iterator[Row] = iter(self.plan.static_rows)
        else:
            rows = self._driver_rows()
            if self.plan.reshape is not None:
                rows = iter(self.plan.reshape(list(rows)))

        if self.plan.row_filter is not None:
            rows = self.plan.row_filter.apply(rows)

        if self.plan.export_rows or self.plan.export_hints:
            rows = (self._export(row) for row in rows)
        return rows

    def _export(self, row: Row) -> Row:
        exported = {}
        for column, value in row.items():
            if isinstance(value, (bytearray, memoryview)):
                value = bytes(value)
            if self.plan.export_hints:
                self._record_hint(column, value)
            exported[column] = value if self.plan.export_rows else row[column]
        return exported

    def _record_hint(self, column: str, value: Any) -> None:
        if value is None:
            self._hints.setdefault(column, ValueKind.NULL)
            return
        kind = ValueKind.BINARY if isinstance(value, bytes) else ValueKind.STRING
        if self._hints.get(column, ValueKind.NULL) == ValueKind.NULL:
            self._hints[column] = kind

    def fetch(self) -> Optional[Row]:
        """Next row, or None when the cursor is exhausted."""
        return next(self._rows, None)

    def fetch_all(self) -> List[Row]:
        return list(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return self._rows

    def free(self) -> None:
        """Release the driver result; remaining rows are discarded."""
        if self._closed:
            return
        self._closed = True
        self._rows = chain()
        if self._result is not None:
            self._result.close()

    def to_dataframe(self) -> pd.DataFrame:
        """Drain the remaining rows into a DataFrame."""
        columns = self.columns
        rows = self.fetch_all()
        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame.from_records(rows)

    def __enter__(self) -> "Cursor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.free()
