"""Unit tests for Cursor post-processing."""

import pandas as pd

from sqlcommand.constants.sql import ValueKind
from sqlcommand.engine import Cursor
from sqlcommand.query_builder import QueryPlan, RowFilter, Statement


class FakeResult:

    def __init__(self, rows=None, rowcount=-1):
        self.rows = list(rows or [])
        self.returns_rows = rows is not None
        self.rowcount = rowcount
        self.close_count = 0

    def keys(self):
        return list(self.rows[0]) if self.rows else []

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.close_count += 1


def plan(**kwargs):
    return QueryPlan(statements=[Statement("SELECT 1")], **kwargs)


class TestRows:

    def test_fetch_until_exhausted(self):
        result = FakeResult([{"a": 1}, {"a": 2}])
        cursor = Cursor(result, plan())

        assert cursor.columns == ["a"]
        assert cursor.fetch() == {"a": 1}
        assert cursor.fetch() == {"a": 2}
        assert cursor.fetch() is None
        assert result.close_count == 1

    def test_iteration(self):
        cursor = Cursor(FakeResult([{"a": 1}, {"a": 2}]), plan())
        assert [row["a"] for row in cursor] == [1, 2]

    def test_statement_without_rows(self):
        cursor = Cursor(FakeResult(rowcount=3), plan())
        assert cursor.rowcount == 3
        assert cursor.fetch_all() == []

    def test_free_discards_remaining_rows(self):
        result = FakeResult([{"a": 1}, {"a": 2}])
        cursor = Cursor(result, plan())
        cursor.fetch()
        cursor.free()
        cursor.free()

        assert cursor.fetch() is None
        assert result.close_count == 1

    def test_context_manager_frees(self):
        result = FakeResult([{"a": 1}])
        with Cursor(result, plan()):
            pass
        assert result.close_count == 1

    def test_no_result(self):
        cursor = Cursor(None, QueryPlan())
        assert cursor.rowcount == -1
        assert cursor.columns == []
        assert cursor.fetch() is None


class TestPostProcessing:
    """Static rows, reshape, then row filter."""

    def test_static_rows(self):
        rows = [{"name": "app", "sql": 'CREATE DATABASE "app"'}]
        cursor = Cursor(None, QueryPlan(static_rows=rows))
        assert cursor.rowcount == 1
        assert cursor.columns == ["name", "sql"]
        assert cursor.fetch_all() == rows

    def test_reshape(self):
        reshape = lambda rows: [{"name": list(row.values())[0]} for row in rows]  # noqa: E731
        cursor = Cursor(FakeResult([{"Database": "a"}, {"Database": "b"}]), plan(reshape=reshape))
        assert cursor.fetch_all() == [{"name": "a"}, {"name": "b"}]

    def test_row_filter(self):
        rows = [{"n": i} for i in range(10)]
        cursor = Cursor(FakeResult(rows), plan(row_filter=RowFilter(skip=2, take=3)))
        assert [row["n"] for row in cursor] == [2, 3, 4]

    def test_row_filter_after_reshape(self):
        reshape = lambda rows: list(reversed(rows))  # noqa: E731
        rows = [{"n": i} for i in range(5)]
        cursor = Cursor(FakeResult(rows), plan(reshape=reshape, row_filter=RowFilter(take=2)))
        assert [row["n"] for row in cursor] == [4, 3]


class TestExport:

    def test_buffers_become_bytes(self):
        rows = [{"id": 1, "data": memoryview(b"\x00\x01")}]
        cursor = Cursor(FakeResult(rows), plan(export_rows=True))
        row = cursor.fetch()
        assert row["data"] == b"\x00\x01"
        assert isinstance(row["data"], bytes)

    def test_hints(self):
        rows = [
            {"id": 1, "data": None, "note": None},
            {"id": 2, "data": bytearray(b"\xff"), "note": None},
        ]
        cursor = Cursor(FakeResult(rows), plan(export_hints=True))
        cursor.fetch_all()
        assert cursor.hints == {"id": ValueKind.STRING, "data": ValueKind.BINARY, "note": ValueKind.NULL}

    def test_hints_without_export_rows_keep_values(self):
        value = bytearray(b"\xff")
        cursor = Cursor(FakeResult([{"data": value}]), plan(export_hints=True))
        assert cursor.fetch()["data"] is value

    def test_hints_are_a_copy(self):
        cursor = Cursor(FakeResult([{"a": 1}]), plan(export_hints=True))
        cursor.fetch_all()
        cursor.hints["a"] = ValueKind.BINARY
        assert cursor.hints == {"a": ValueKind.STRING}


class TestDataFrame:

    def test_to_dataframe(self):
        cursor = Cursor(FakeResult([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]), plan())
        frame = cursor.to_dataframe()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ["a", "b"]
        assert frame["a"].tolist() == [1, 2]

    def test_empty_dataframe_keeps_columns(self):
        result = FakeResult([])
        result.returns_rows = True
        result.keys = lambda: ["a", "b"]
        frame = Cursor(result, plan()).to_dataframe()
        assert frame.empty
        assert list(frame.columns) == ["a", "b"]
