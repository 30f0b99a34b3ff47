"""End-to-end tests against SQLite through SQLAlchemy."""

import pytest

from sqlcommand import DatabaseSession, DatabaseSettings
from sqlcommand.common.exceptions import ErrorCode, ExecutionError
from sqlcommand.constants.sql import ValueKind


USERS = {
    "name": "users",
    "columns": {
        "id": {"type": "INTEGER", "AUTO INCREMENT": True},
        "name": ["STRING", 1, 64, {"NOT NULL": True}],
        "data": ["BINARY", 2],
    },
    "keys": [["UNIQUE", "name"]],
}


@pytest.fixture
def session():
    db = DatabaseSession.connect(DatabaseSettings(dsn="sqlite://"))
    db.execute("CREATE TABLE", USERS)
    yield db
    db.disconnect()


def count_users(db):
    return db.execute("SELECT", {"columns": "COUNT(*) AS n", "FROM": "users"}).fetch_all()[0]["n"]


class TestStatements:

    def test_insert_and_insert_id(self, session):
        session.execute("INSERT", {"table": "users", "values": {"name": "ada", "data": b"\x00\x01"}})
        assert session.get_insert_id() == 1
        session.execute("INSERT", {"table": "users", "values": {"name": "bob"}})
        assert session.get_insert_id() == 2

    def test_select_with_placeholders_and_limit(self, session):
        session.execute("INSERT", {"table": "users", "values": [{"name": n} for n in ("a", "b", "c", "d")]})

        rows = session.execute(
            "SELECT",
            {"columns": "name", "FROM": "?", "WHERE": "name <> ?", "ORDER BY": "?", "LIMIT": "1, 2"},
            "users", "a", "name",
        ).fetch_all()

        assert rows == [{"name": "c"}, {"name": "d"}]

    def test_subquery(self, session):
        session.execute("INSERT", {"table": "users", "values": [{"name": "a"}, {"name": "b"}]})
        rows = session.execute(
            "SELECT",
            {
                "columns": "name",
                "FROM": "users",
                "WHERE": "id IN {0}",
                "SUBQUERIES": [[{"columns": "MAX(id)", "FROM": "users", "WHERE": "name <> ?"}, "zzz"]],
            },
        ).fetch_all()
        assert rows == [{"name": "b"}]

    def test_update_and_delete(self, session):
        session.execute("INSERT", {"table": "users", "values": [{"name": "a"}, {"name": "b"}]})
        session.execute("UPDATE", {"table": "users", "values": {"data": False}, "inline": {"name": "name || '!'"}, "WHERE": "id = ?"}, 1)
        session.execute("DELETE", {"table": "users", "WHERE": "name = ?"}, "b")

        rows = session.execute("SELECT", {"columns": "name, data", "FROM": "users"}).fetch_all()
        assert rows == [{"name": "a!", "data": None}]

    def test_truncate(self, session):
        session.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        session.execute("TRUNCATE TABLE", "users")
        assert count_users(session) == 0

    def test_unique_key_enforced(self, session):
        session.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        with pytest.raises(ExecutionError) as exc_info:
            session.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        assert exc_info.value.error_code == ErrorCode.QUERY_EXECUTION_ERROR

    def test_query_accounting(self, session):
        before = session.query_count
        session.execute("SELECT", {"columns": "1 AS one"}).fetch_all()
        assert session.query_count == before + 1
        assert session.query_time > 0


class TestExportReplay:
    """Rows exported from a SELECT replay as an INSERT payload."""

    def test_round_trip_preserves_binary(self, session):
        session.execute("INSERT", {"table": "users", "values": [
            {"name": "a", "data": b"\x00\xff"},
            {"name": "b", "data": None},
        ]})
        session.execute("CREATE TABLE", {**USERS, "name": "users_copy", "keys": []})

        cursor = session.execute("SELECT", {"FROM": "users", "ORDER BY": "id", "EXPORT ROWS": True, "EXPORT HINTS": True})
        rows = cursor.fetch_all()
        assert cursor.hints["data"] == ValueKind.BINARY

        session.execute("INSERT", {"table": "users_copy", "values": rows, "kinds": cursor.hints})

        copied = session.execute("SELECT", {"FROM": "users_copy", "ORDER BY": "id"}).fetch_all()
        assert copied == [
            {"id": 1, "name": "a", "data": b"\x00\xff"},
            {"id": 2, "name": "b", "data": None},
        ]


class TestTransactions:

    def test_rollback(self, session):
        session.begin()
        session.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        session.rollback()

        assert count_users(session) == 0
        assert session.transaction_depth == 0

    def test_nested_commit_only_commits_outermost(self, session):
        session.begin()
        session.begin()
        session.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        session.commit()
        assert session.transaction_depth == 1

        session.rollback()
        assert count_users(session) == 0

    def test_commit(self, session):
        session.begin()
        session.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        session.commit()
        assert session.transaction_depth == 0
        assert count_users(session) == 1

    def test_context_manager_rolls_back_on_error(self, tmp_path):
        settings = DatabaseSettings(dsn=f"sqlite:///{tmp_path / 'app.db'}")
        with DatabaseSession.connect(settings) as db:
            db.execute("CREATE TABLE", USERS)

        with pytest.raises(RuntimeError):
            with DatabaseSession.connect(settings) as db:
                db.begin()
                db.execute("INSERT", {"table": "users", "values": {"name": "a"}})
                raise RuntimeError("abort")

        with DatabaseSession.connect(settings) as db:
            assert count_users(db) == 0

    def test_disconnect_commits_open_transaction(self, tmp_path):
        settings = DatabaseSettings(dsn=f"sqlite:///{tmp_path / 'app.db'}")
        db = DatabaseSession.connect(settings)
        db.execute("CREATE TABLE", USERS)
        db.begin()
        db.execute("INSERT", {"table": "users", "values": {"name": "a"}})
        db.disconnect()
        assert db.closed

        with DatabaseSession.connect(settings) as db:
            assert count_users(db) == 1


class TestSchema:

    def test_show_tables(self, session):
        session.execute("CREATE TABLE", {"name": "notes", "columns": {"body": ["STRING", 2]}})
        names = [row["name"] for row in session.execute("SHOW TABLES").fetch_all()]
        assert names == ["notes", "users"]

        full = session.execute("SHOW TABLES", {"FULL": True}).fetch_all()
        assert {"name": "notes", "type": "BASE TABLE"} in full

    def test_show_create_table(self, session):
        row = session.execute("SHOW CREATE TABLE", "users").fetch()
        assert row["name"] == "users"
        assert row["sql"].startswith('CREATE TABLE "users"')

    def test_show_databases(self, session):
        assert session.execute("SHOW DATABASES").fetch()["name"] == "main"

    def test_drop_column_emulation(self, session):
        session.execute("CREATE TABLE", {"name": "notes", "columns": {"id": "INTEGER", "body": ["STRING", 2], "extra": "INTEGER"}})
        session.execute("INSERT", {"table": "notes", "values": {"id": 1, "body": "x", "extra": 5}})

        session.execute("DROP COLUMN", ["notes", "extra"])

        assert session.execute("SELECT", {"FROM": "notes"}).fetch_all() == [{"id": 1, "body": "x"}]

    def test_add_column_and_index(self, session):
        session.execute("ADD COLUMN", {"table": "users", "name": "age", "definition": ["INTEGER", 2]})
        session.execute("ADD INDEX", {"table": "users", "key": ["KEY", "age"]})
        session.execute("DROP INDEX", ["users", "idx_users_age"])
        session.execute("INSERT", {"table": "users", "values": {"name": "a", "age": 30}})
        assert session.execute("SELECT", {"columns": "age", "FROM": "users"}).fetch() == {"age": 30}

    def test_drop_unique_key_from_create_table(self, session):
        session.execute("CREATE TABLE", {
            "name": "accounts",
            "columns": {"id": "INTEGER", "email": ["STRING", 1, 128]},
            "keys": [["UNIQUE", "email", {"NAME": "uq_email"}]],
        })
        session.execute("INSERT", {"table": "accounts", "values": {"id": 1, "email": "a@example.com"}})
        with pytest.raises(ExecutionError):
            session.execute("INSERT", {"table": "accounts", "values": {"id": 2, "email": "a@example.com"}})

        session.execute("DROP INDEX", ["accounts", "uq_email"])

        session.execute("INSERT", {"table": "accounts", "values": {"id": 2, "email": "a@example.com"}})
        assert session.execute("SELECT", {"columns": "COUNT(*) AS n", "FROM": "accounts"}).fetch() == {"n": 2}

    def test_bracket_identifiers_hide_question_marks(self, session):
        session.execute("INSERT", {"table": "users", "values": {"name": "a?"}})
        rows = session.execute("SELECT", {"columns": "[name] AS n", "FROM": "users", "WHERE": "[name] = ?"}, "a?").fetch_all()
        assert rows == [{"n": "a?"}]

    def test_use_only_changes_state(self, session):
        session.execute("USE", "main")
        assert session.database == "main"

    def test_drop_table(self, session):
        session.execute("DROP TABLE", {"tables": "users", "if_exists": True})
        assert session.execute("SHOW TABLES").fetch_all() == []


class TestReplication:

    def test_writes_switch_to_master(self, tmp_path):
        primary_dsn = f"sqlite:///{tmp_path / 'replica.db'}"
        master_dsn = f"sqlite:///{tmp_path / 'master.db'}"
        settings = DatabaseSettings(dsn=primary_dsn, master_dsn=master_dsn)

        with DatabaseSession.connect(settings) as db:
            assert db.execute("SHOW TABLES").fetch_all() == []
            db.execute("CREATE TABLE", USERS)
            assert [row["name"] for row in db.execute("SHOW TABLES").fetch_all()] == ["users"]

        with DatabaseSession.connect(DatabaseSettings(dsn=primary_dsn)) as replica:
            assert replica.execute("SHOW TABLES").fetch_all() == []
        with DatabaseSession.connect(DatabaseSettings(dsn=master_dsn)) as master:
            assert [row["name"] for row in master.execute("SHOW TABLES").fetch_all()] == ["users"]
