"""Unit tests for DDL and SHOW compilation."""

from unittest.mock import Mock

import pytest

from sqlcommand.commands import (
    AddColumn,
    AddIndex,
    CreateDatabase,
    CreateTable,
    DropColumn,
    DropDatabase,
    DropIndex,
    DropTable,
    ShowCreateDatabase,
    ShowCreateTable,
    ShowDatabases,
    ShowTables,
)
from sqlcommand.common.exceptions import ValidationError
from sqlcommand.query_builder import (
    CompileContext,
    MSSQLQueryBuilder,
    MySQLQueryBuilder,
    POSTGRESQL_CAPABILITIES,
    PostgreSQLQueryBuilder,
    SQLiteQueryBuilder,
    Statement,
)


USERS_COLUMNS = {
    "id": {"type": "INTEGER", "AUTO INCREMENT": True, "PRIMARY KEY": True},
    "email": ["STRING", 1, 255, {"NOT NULL": True}],
}


@pytest.fixture
def pg():
    return PostgreSQLQueryBuilder()


@pytest.fixture
def mysql():
    return MySQLQueryBuilder()


@pytest.fixture
def sqlite():
    return SQLiteQueryBuilder()


@pytest.fixture
def mssql():
    return MSSQLQueryBuilder()


class TestDatabases:

    def test_mysql_character_set(self, mysql):
        command = CreateDatabase(name="app", character_set="utf8mb4", collate="utf8mb4_bin")
        assert mysql.build(command).sql == ["CREATE DATABASE `app` DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_bin"]

    def test_postgresql_encoding(self, pg):
        command = CreateDatabase(name="app", character_set="UTF8", collate="C")
        assert pg.build(command).sql == [
            "CREATE DATABASE \"app\" TEMPLATE template0 ENCODING 'UTF8' LC_COLLATE 'C'"
        ]

    def test_sqlite_attaches_files(self, sqlite):
        plan = sqlite.build(CreateDatabase(name="app"))
        assert plan.sql == ['ATTACH DATABASE ? AS "app"']
        assert plan.statements[0].values == ["app.db"]
        assert sqlite.build(DropDatabase(name="app")).sql == ['DETACH DATABASE "app"']

    def test_drop_if_exists(self, pg):
        assert pg.build(DropDatabase(name="app", if_exists=True)).sql == ['DROP DATABASE IF EXISTS "app"']

    def test_invalid_character_set_name(self):
        with pytest.raises(ValueError):
            CreateDatabase(name="app", character_set="utf8; DROP")


class TestCreateTable:
    """Test CREATE TABLE plans across dialects."""

    def test_postgresql_defers_plain_keys(self, pg):
        plan = pg.build(CreateTable(name="users", columns=USERS_COLUMNS, keys=[["KEY", "email"]]))
        assert plan.sql == [
            'CREATE TABLE "users" ("id" SERIAL PRIMARY KEY, "email" VARCHAR(255) NOT NULL)',
            'CREATE INDEX "idx_users_email" ON "users" ("email")',
        ]

    def test_unique_keys_become_droppable_indexes(self, pg, sqlite, mssql):
        command = CreateTable(name="users", columns=USERS_COLUMNS, keys=[["UNIQUE", "email", {"NAME": "uq_email"}]])
        assert pg.build(command).sql[1] == 'CREATE UNIQUE INDEX "uq_email" ON "users" ("email")'
        assert sqlite.build(command).sql[1] == 'CREATE UNIQUE INDEX "uq_email" ON "users" ("email")'
        assert mssql.build(command).sql[1] == "CREATE UNIQUE INDEX [uq_email] ON [users] ([email])"
        assert "UNIQUE" not in pg.build(command).sql[0]
        assert pg.build(DropIndex(table="users", name="uq_email")).sql == ['DROP INDEX "uq_email"']

    def test_mysql_keeps_unique_keys_inline(self, mysql):
        command = CreateTable(name="users", columns=USERS_COLUMNS, keys=[["UNIQUE", "email", {"NAME": "uq_email"}]])
        plan = mysql.build(command)
        assert len(plan) == 1
        assert plan.sql[0].endswith("UNIQUE KEY `uq_email` (`email`))")

    def test_unsigned_auto_increment_keeps_its_sequence(self, pg):
        columns = {"id": {"type": "INTEGER", "size": 8, "UNSIGNED": True, "AUTO INCREMENT": True, "PRIMARY KEY": True}}
        assert pg.build(CreateTable(name="t", columns=columns)).sql == ['CREATE TABLE "t" ("id" BIGSERIAL PRIMARY KEY)']

    def test_mysql_declares_keys_inline(self, mysql):
        plan = mysql.build(CreateTable(name="users", columns=USERS_COLUMNS, keys=[["KEY", "email"]]))
        assert plan.sql == [
            "CREATE TABLE `users` (`id` INT AUTO_INCREMENT PRIMARY KEY, "
            "`email` VARCHAR(255) NOT NULL, KEY `idx_users_email` (`email`))"
        ]

    def test_auto_increment_per_dialect(self, sqlite, mssql):
        sqlite_sql = sqlite.build(CreateTable(name="users", columns=USERS_COLUMNS)).sql[0]
        mssql_sql = mssql.build(CreateTable(name="users", columns=USERS_COLUMNS)).sql[0]
        assert '"id" INTEGER PRIMARY KEY AUTOINCREMENT' in sqlite_sql
        assert "[id] INT IDENTITY(1,1) PRIMARY KEY" in mssql_sql
        assert "[email] NVARCHAR(255) NOT NULL" in mssql_sql

    def test_unsupported_key_is_dropped(self, pg):
        plan = pg.build(CreateTable(name="users", columns=USERS_COLUMNS, keys=[["FULLTEXT", "email"]]))
        assert len(plan) == 1

    def test_composite_primary_key(self, pg):
        columns = {"a": {"type": "INTEGER", "PRIMARY KEY": True}, "b": {"type": "INTEGER", "PRIMARY KEY": True}}
        assert pg.build(CreateTable(name="t", columns=columns)).sql == [
            'CREATE TABLE "t" ("a" INTEGER, "b" INTEGER, PRIMARY KEY ("a", "b"))'
        ]

    def test_duplicate_primary_key_is_skipped(self, pg):
        columns = {"a": {"type": "INTEGER", "PRIMARY KEY": True}}
        plan = pg.build(CreateTable(name="t", columns=columns, keys=[["PRIMARY", "a"]]))
        assert plan.sql == ['CREATE TABLE "t" ("a" INTEGER PRIMARY KEY)']

    def test_conflicting_primary_keys(self, pg):
        columns = {"a": {"type": "INTEGER", "PRIMARY KEY": True}, "b": "INTEGER"}
        with pytest.raises(ValidationError, match="conflicting primary keys"):
            pg.build(CreateTable(name="t", columns=columns, keys=[["PRIMARY", "b"]]))

    def test_temporary_tables(self, mysql, mssql):
        command = CreateTable(name="tmp", columns={"a": "INTEGER"}, temporary=True)
        assert mysql.build(command).sql == ["CREATE TEMPORARY TABLE `tmp` (`a` INT)"]
        assert mssql.build(command).sql == ["CREATE TABLE [#tmp] ([a] INT)"]

    def test_table_character_set(self, mysql, pg):
        command = CreateTable(name="t", columns={"a": "INTEGER"}, character_set="utf8mb4")
        assert mysql.build(command).sql == ["CREATE TABLE `t` (`a` INT) DEFAULT CHARACTER SET utf8mb4"]
        assert pg.build(command).sql == ['CREATE TABLE "t" ("a" INTEGER)']

    def test_create_table_as_select(self, pg, mssql):
        command = CreateTable(name="copy", select={"FROM": "users", "WHERE": "id > ?", "args": [10]})
        plan = pg.build(command)
        assert plan.sql == ['CREATE TABLE "copy" AS SELECT * FROM users WHERE id > ?']
        assert plan.statements[0].values == [10]
        assert mssql.build(command).sql == ["SELECT * INTO [copy] FROM users WHERE id > ?"]

    def test_column_comments(self, pg, mysql):
        command = CreateTable(name="users", columns={"name": {"type": "STRING", "length": 64, "COMMENT": "Full name"}})
        assert pg.build(command).sql == [
            'CREATE TABLE "users" ("name" VARCHAR(64))',
            "COMMENT ON COLUMN \"users\".\"name\" IS 'Full name'",
        ]
        assert mysql.build(command).sql == ["CREATE TABLE `users` (`name` VARCHAR(64) COMMENT 'Full name')"]

    def test_column_references(self, pg, mysql):
        command = CreateTable(name="orders", columns={"user_id": {"type": "INTEGER", "REFERENCES": "users(id)"}})
        assert pg.build(command).sql == ['CREATE TABLE "orders" ("user_id" INTEGER REFERENCES "users" ("id"))']
        assert mysql.build(command).sql == [
            "CREATE TABLE `orders` (`user_id` INT, FOREIGN KEY (`user_id`) REFERENCES `users` (`id`))"
        ]


class TestDropTable:

    def test_multiple_tables(self, mysql, sqlite):
        assert mysql.build(DropTable(tables=["a", "b"], if_exists=True)).sql == ["DROP TABLE IF EXISTS `a`, `b`"]
        assert sqlite.build(DropTable(tables=["a", "b"])).sql == ['DROP TABLE "a"', 'DROP TABLE "b"']

    def test_temporary(self, mysql, mssql):
        assert mysql.build(DropTable(tables="t", temporary=True)).sql == ["DROP TEMPORARY TABLE `t`"]
        assert mssql.build(DropTable(tables="t", temporary=True)).sql == ["DROP TABLE [#t]"]


class TestColumns:
    """Test ADD COLUMN and DROP COLUMN."""

    def test_add_column_position(self, mysql, pg):
        command = AddColumn(table="users", name="age", definition="INTEGER", after="name")
        assert mysql.build(command).sql == ["ALTER TABLE `users` ADD COLUMN `age` INT AFTER `name`"]
        assert pg.build(command).sql == ['ALTER TABLE "users" ADD COLUMN "age" INTEGER']

    def test_add_column_keyword(self, mssql):
        command = AddColumn(table="users", name="age", definition="INTEGER")
        assert mssql.build(command).sql == ["ALTER TABLE [users] ADD [age] INT"]

    def test_add_column_constraint_follow_up(self, mysql):
        command = AddColumn(
            table="orders",
            name="user_id",
            definition={"type": "INTEGER", "REFERENCES": "users(id)"},
        )
        assert mysql.build(command).sql == [
            "ALTER TABLE `orders` ADD COLUMN `user_id` INT",
            "ALTER TABLE `orders` ADD FOREIGN KEY (`user_id`) REFERENCES `users` (`id`)",
        ]

    def test_drop_column(self, pg):
        assert pg.build(DropColumn(table="users", name="age")).sql == ['ALTER TABLE "users" DROP COLUMN "age"']

    def test_sqlite_drop_column_recreates_table(self, sqlite):
        fetch = Mock(return_value=[{"name": "id"}, {"name": "name"}, {"name": "age"}])
        plan = sqlite.build(DropColumn(table="users", name="age"), CompileContext(fetch=fetch))

        fetch.assert_called_once_with(Statement('PRAGMA table_info("users")'))
        assert plan.sql == [
            'CREATE TABLE "_sqlcommand_users_tmp" AS SELECT "id", "name" FROM "users"',
            'DROP TABLE "users"',
            'ALTER TABLE "_sqlcommand_users_tmp" RENAME TO "users"',
        ]

    def test_sqlite_drop_column_needs_connection(self, sqlite):
        with pytest.raises(ValidationError, match="live connection"):
            sqlite.build(DropColumn(table="users", name="age"))

    def test_sqlite_drop_unknown_column(self, sqlite):
        fetch = Mock(return_value=[{"name": "id"}])
        with pytest.raises(ValidationError, match="does not exist"):
            sqlite.build(DropColumn(table="users", name="age"), CompileContext(fetch=fetch))

    def test_sqlite_drop_only_column(self, sqlite):
        fetch = Mock(return_value=[{"name": "id"}])
        with pytest.raises(ValidationError, match="only column"):
            sqlite.build(DropColumn(table="users", name="id"), CompileContext(fetch=fetch))

    def test_drop_column_follows_capability_table(self):
        class NoDropColumnBuilder(PostgreSQLQueryBuilder):
            capabilities = POSTGRESQL_CAPABILITIES.model_copy(update={"native_drop_column": False})

        with pytest.raises(ValidationError, match="cannot drop column 'age'"):
            NoDropColumnBuilder().build(DropColumn(table="users", name="age"))

    def test_sqlite_rebuild_rejects_arguments(self, sqlite):
        with pytest.raises(ValidationError):
            sqlite.build(DropColumn(table="users", name="age", args=[1]), CompileContext(fetch=Mock()))


class TestIndexes:

    def test_add_unique_index(self, pg, mysql):
        command = AddIndex(table="users", key=["UNIQUE", "email"])
        assert pg.build(command).sql == ['CREATE UNIQUE INDEX "idx_users_email" ON "users" ("email")']
        assert mysql.build(command).sql == ["ALTER TABLE `users` ADD UNIQUE KEY `idx_users_email` (`email`)"]

    def test_add_foreign_key(self, pg):
        command = AddIndex(
            table="orders",
            key={"type": "FOREIGN", "columns": "user_id", "REFERENCES": {"table": "users", "columns": "id"},
                 "ON DELETE": "cascade"},
        )
        assert pg.build(command).sql == [
            'ALTER TABLE "orders" ADD FOREIGN KEY ("user_id") REFERENCES "users" ("id") ON DELETE CASCADE'
        ]

    def test_unsupported_index_is_empty_plan(self, sqlite):
        assert len(sqlite.build(AddIndex(table="users", key=["FULLTEXT", "bio"]))) == 0

    def test_drop_index(self, mysql, pg):
        assert mysql.build(DropIndex(table="users", name="idx")).sql == ["DROP INDEX `idx` ON `users`"]
        assert pg.build(DropIndex(table="app.users", name="idx")).sql == ['DROP INDEX "app"."idx"']


class TestShow:
    """Test SHOW compilation and row normalisation."""

    def test_mysql_full_tables_reshape(self, mysql):
        plan = mysql.build(ShowTables(full=True))
        assert plan.sql == ["SHOW FULL TABLES"]
        rows = plan.reshape([{"Tables_in_app": "users", "Table_type": "BASE TABLE"}])
        assert rows == [{"name": "users", "type": "BASE TABLE"}]

    def test_mysql_show_create_table_reshape(self, mysql):
        plan = mysql.build(ShowCreateTable(name="users"))
        assert plan.sql == ["SHOW CREATE TABLE `users`"]
        assert plan.reshape([{"Table": "users", "Create Table": "CREATE TABLE ..."}]) == [
            {"name": "users", "sql": "CREATE TABLE ..."}
        ]

    def test_databases_are_named_name(self, pg, sqlite, mssql):
        for builder in (pg, sqlite, mssql):
            assert "AS name" in builder.build(ShowDatabases()).sql[0]

    def test_static_create_database(self, pg):
        plan = pg.build(ShowCreateDatabase(name="app"))
        assert len(plan) == 0
        assert plan.static_rows == [{"name": "app", "sql": 'CREATE DATABASE "app"'}]

    def test_postgresql_reconstructs_create_table(self, pg):
        plan = pg.build(ShowCreateTable(name="users"))
        assert plan.statements[0].values == ["users"]
        rows = plan.reshape([
            {
                "column_name": "id",
                "data_type": "integer",
                "character_maximum_length": None,
                "numeric_precision": 32,
                "numeric_scale": 0,
                "is_nullable": "NO",
                "column_default": "nextval('users_id_seq'::regclass)",
            },
            {
                "column_name": "email",
                "data_type": "character varying",
                "character_maximum_length": 255,
                "numeric_precision": None,
                "numeric_scale": None,
                "is_nullable": "YES",
                "column_default": None,
            },
        ])
        assert rows == [{
            "name": "users",
            "sql": (
                'CREATE TABLE "users" (\n'
                '  "id" INTEGER NOT NULL DEFAULT nextval(\'users_id_seq\'::regclass),\n'
                '  "email" CHARACTER VARYING(255)\n'
                ")"
            ),
        }]

    def test_reconstruct_missing_table(self, mssql):
        plan = mssql.build(ShowCreateTable(name="missing"))
        assert plan.reshape([]) == []

    def test_sqlite_show_create_table(self, sqlite):
        plan = sqlite.build(ShowCreateTable(name="users"))
        assert plan.statements[0].values == ["users"]
        assert plan.reshape is None
