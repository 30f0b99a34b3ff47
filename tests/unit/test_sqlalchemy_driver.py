"""Unit tests for paramstyle rewriting in the SQLAlchemy driver."""

from unittest.mock import Mock

import pytest

from sqlcommand.engine.sqlalchemy_driver import SQLAlchemyDriver
from sqlcommand.query_builder import MSSQL_CAPABILITIES, POSTGRESQL_CAPABILITIES, Parameter, Statement


def make_driver(capabilities, paramstyle):
    engine = Mock()
    engine.dialect.paramstyle = paramstyle
    return SQLAlchemyDriver("test://", capabilities, engine=engine)


class TestToDriver:

    def test_no_parameters_passes_sql_through(self):
        driver = make_driver(POSTGRESQL_CAPABILITIES, "pyformat")
        assert driver._to_driver(Statement("SELECT 1")) == ("SELECT 1", None)

    def test_format_escapes_percent(self):
        driver = make_driver(POSTGRESQL_CAPABILITIES, "format")
        sql, values = driver._to_driver(Statement("SELECT * FROM t WHERE a LIKE '5%' AND b = ?", [Parameter.infer(1)]))
        assert sql == "SELECT * FROM t WHERE a LIKE '5%%' AND b = %s"
        assert values == (1,)

    def test_named_style_leaves_time_literals_alone(self):
        driver = make_driver(POSTGRESQL_CAPABILITIES, "named")
        statement = Statement("SELECT * FROM t WHERE at > '10:30' AND id = ?", [Parameter.infer(7)])
        sql, values = driver._to_driver(statement)
        assert sql == "SELECT * FROM t WHERE at > '10:30' AND id = :p0"
        assert values == {"p0": 7}

    def test_postgresql_array_brackets_are_rewritten(self):
        driver = make_driver(POSTGRESQL_CAPABILITIES, "pyformat")
        statement = Statement("SELECT * FROM t WHERE tags && ARRAY[?]", [Parameter.infer("a")])
        sql, values = driver._to_driver(statement)
        assert sql == "SELECT * FROM t WHERE tags && ARRAY[%(p0)s]"
        assert values == {"p0": "a"}

    @pytest.mark.parametrize("paramstyle,marker", [("qmark", "?"), ("numeric", ":1")])
    def test_mssql_bracket_identifiers_are_skipped(self, paramstyle, marker):
        driver = make_driver(MSSQL_CAPABILITIES, paramstyle)
        statement = Statement("SELECT * FROM t WHERE [odd?col] = ?", [Parameter.infer(1)])
        sql, values = driver._to_driver(statement)
        assert sql == f"SELECT * FROM t WHERE [odd?col] = {marker}"
        assert values == (1,)
