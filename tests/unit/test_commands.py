"""Unit tests for command models and loose command parsing."""

import pytest

from sqlcommand.commands import (
    BulkImportMode,
    ColumnDefinition,
    CreateTable,
    Delete,
    DropIndex,
    DropTable,
    Insert,
    KeyDefinition,
    Select,
    Set,
    Update,
    parse_command,
    resolve_command_type,
)
from sqlcommand.common.exceptions import ErrorCode, UnsupportedCommandError, ValidationError
from sqlcommand.constants.sql import ColumnType, CommandType, KeyType


class TestResolveCommandType:

    def test_case_and_whitespace_are_normalised(self):
        assert resolve_command_type("  create   table ") == CommandType.CREATE_TABLE
        assert resolve_command_type("show create table") == CommandType.SHOW_CREATE_TABLE

    def test_unknown_tag(self):
        with pytest.raises(UnsupportedCommandError):
            resolve_command_type("MERGE")

    def test_non_string_tag(self):
        with pytest.raises(UnsupportedCommandError):
            resolve_command_type(42)

    @pytest.mark.parametrize("tag", ["INSERT INTO", "insert into", "INSERT IGNORE"])
    def test_insert_must_be_spelled_exactly(self, tag):
        with pytest.raises(ValidationError) as exc_info:
            resolve_command_type(tag)
        assert exc_info.value.error_code == ErrorCode.INVALID_ARGUMENT


class TestParseCommand:
    """Test the (tag, payload, *args) form."""

    def test_select_with_clause_keys_and_args(self):
        command = parse_command("SELECT", {"FROM": "?", "WHERE": "id = ?", "ORDER BY": ["name", "id"]}, "users", 5)
        assert isinstance(command, Select)
        assert command.from_clause == "?"
        assert command.where_clause == "id = ?"
        assert command.order_by == "name, id"
        assert command.args == ["users", 5]

    def test_string_payloads(self):
        assert parse_command("SET", "NAMES utf8mb4").statement == "NAMES utf8mb4"
        assert parse_command("USE", "app").database == "app"
        assert parse_command("DROP TABLE", "users").tables == ["users"]

    def test_array_payloads(self):
        command = parse_command("DROP INDEX", ["users", "idx_users_email"])
        assert isinstance(command, DropIndex)
        assert (command.table, command.name) == ("users", "idx_users_email")
        assert parse_command("TRUNCATE TABLE", ["a", "b"]).tables == ["a", "b"]

    def test_array_payload_wrong_length(self):
        with pytest.raises(ValidationError):
            parse_command("DROP COLUMN", ["users"])

    def test_bulk_import_mode_bool_payload(self):
        assert parse_command("BULK IMPORT MODE", False).enabled is False
        assert parse_command("BULK IMPORT MODE").enabled is True

    def test_payload_shape_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported payload shape"):
            parse_command("SELECT", 42)

    def test_unknown_payload_key_rejected(self):
        with pytest.raises(ValidationError, match="Invalid Select payload"):
            parse_command("SELECT", {"FROM": "t", "WHER": "id = 1"})

    def test_command_instance_payload(self):
        select = Select(from_clause="users")
        command = parse_command("SELECT", select, "x")
        assert command.args == ["x"]
        assert select.args == []

    def test_command_instance_of_wrong_type(self):
        with pytest.raises(ValidationError):
            parse_command("DELETE", Select(from_clause="users"))

    def test_typed_and_loose_forms_agree(self):
        loose = parse_command("UPDATE", {"table": "users", "values": {"name": "x"}, "WHERE": "id = ?"}, 7)
        typed = Update(table="users", values={"name": "x"}, where_clause="id = ?", args=[7])
        assert loose == typed


class TestCollapsedClauseGuard:
    """A clause keyword glued to its value must never compile to an unrestricted statement."""

    @pytest.mark.parametrize("key", ["WHERE = id = 1", "WHERE id = 1", "where id=1", "ORDER BY id", "LIMIT 1"])
    def test_update(self, key):
        with pytest.raises(ValidationError) as exc_info:
            parse_command("UPDATE", {"table": "users", "values": {"name": "x"}, key: True})
        assert exc_info.value.error_code == ErrorCode.COLLAPSED_CLAUSE

    def test_delete(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_command("DELETE", {"table": "users", "WHERE = id = 1": None})
        assert exc_info.value.error_code == ErrorCode.COLLAPSED_CLAUSE

    def test_create_classmethod_applies_guard(self):
        with pytest.raises(ValidationError):
            Delete.create(**{"table": "users", "WHERE id = 1": ""})

    def test_subquery_entries_are_guarded(self):
        with pytest.raises(ValidationError):
            parse_command("SELECT", {"FROM": "t", "SUBQUERIES": [[{"FROM": "u", "WHERE id = 1": ""}]]})

    def test_plain_keyword_keys_are_fine(self):
        command = parse_command("DELETE", {"table": "users", "WHERE": "id = 1"})
        assert command.where_clause == "id = 1"


class TestSelect:

    def test_subquery_pairs(self):
        command = Select.model_validate({
            "FROM": "users",
            "WHERE": "id IN {0}",
            "SUBQUERIES": [[{"columns": "user_id", "FROM": "orders", "WHERE": "total > ?"}, 100]],
        })
        assert len(command.subqueries) == 1
        assert command.subqueries[0].args == [100]

    @pytest.mark.parametrize("limit", [10, "10", "5, 10", "?", "?, ?"])
    def test_valid_limits(self, limit):
        assert Select(from_clause="t", limit=limit).limit is not None

    @pytest.mark.parametrize("limit", [-1, True, "ten", "1, 2, 3"])
    def test_invalid_limits(self, limit):
        with pytest.raises(ValidationError):
            Select.create(FROM="t", LIMIT=limit)


class TestInsert:

    def test_values_shape(self):
        command = Insert(table="users", values={"name": "x"}, auto_increment="id")
        assert command.value_columns == ["name"]
        assert command.rows == [{"name": "x"}]

    def test_auto_increment_alias(self):
        command = parse_command("INSERT", {"table": "t", "values": {"name": "x"}, "AUTO INCREMENT": "id"})
        assert command.auto_increment == "id"

    def test_values_and_select_are_exclusive(self):
        with pytest.raises(ValidationError):
            Insert.create(table="t", values={"a": 1}, select={"FROM": "u"})

    def test_multi_row_columns_must_match(self):
        with pytest.raises(ValidationError, match="same columns"):
            Insert.create(table="t", values=[{"a": 1, "b": 2}, {"b": 2, "a": 1}])

    def test_inline_and_values_cannot_overlap(self):
        with pytest.raises(ValidationError):
            Insert.create(table="t", values={"a": 1}, inline={"a": "NOW()"})

    def test_select_shape(self):
        command = Insert(table="archive", columns=["id"], select={"columns": "id", "FROM": "users"})
        assert command.select.from_clause == "users"


class TestUpdate:

    def test_requires_assignments(self):
        with pytest.raises(ValidationError):
            Update.create(table="users")

    def test_where_is_optional(self):
        assert Update(table="users", values={"active": False}).where_clause is None


class TestToPayload:
    """Commands dump back to the clause-keyword payload form."""

    def test_select(self):
        command = Select(from_clause="users", where_clause="id = ?", limit=5, args=[1])
        assert command.to_payload() == {"FROM": "users", "WHERE": "id = ?", "LIMIT": 5, "args": [1]}

    def test_update_round_trip(self):
        command = Update.create(table="users", values={"name": "x", "age": True}, WHERE="id = ?", args=[3])
        assert Update.create(**command.to_payload()) == command

    def test_nested_subquery(self):
        command = Select.model_validate({
            "FROM": "users",
            "WHERE": "id IN {0}",
            "SUBQUERIES": [[{"columns": "user_id", "FROM": "orders", "WHERE": "total > ?"}, 100]],
        })
        payload = command.to_payload()
        assert payload["SUBQUERIES"] == [
            {"columns": "user_id", "FROM": "orders", "WHERE": "total > ?", "args": [100]}
        ]
        assert Select.create(**payload) == command


class TestDefinitions:
    """Test portable column and key definitions."""

    def test_loose_column_form(self):
        definition = ColumnDefinition.model_validate(["decimal", 12, 2, {"NOT NULL": True, "DEFAULT": 0}])
        assert definition.type == ColumnType.DECIMAL
        assert (definition.precision, definition.scale) == (12, 2)
        assert definition.not_null
        assert definition.has_default

    def test_bare_type_string(self):
        definition = ColumnDefinition.model_validate("DATETIME")
        assert definition.type == ColumnType.DATETIME
        assert not definition.has_default

    def test_explicit_null_default_counts(self):
        assert ColumnDefinition(type="INTEGER", default=None).has_default

    def test_string_class_one_requires_length(self):
        with pytest.raises(ValueError, match="requires a maximum length"):
            ColumnDefinition(type="STRING", size=1)

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "INTEGER", "size": 9},
            {"type": "FLOAT", "size": 2},
            {"type": "DECIMAL", "size": 4, "length": 5},
            {"type": "STRING", "size": 5},
            {"type": "STRING", "size": 2, "AUTO INCREMENT": True},
            {"type": "DATE", "UNSIGNED": True},
        ],
    )
    def test_invalid_definitions(self, payload):
        with pytest.raises(ValueError):
            ColumnDefinition.model_validate(payload)

    def test_reference_shorthand(self):
        definition = ColumnDefinition.model_validate({"type": "INTEGER", "REFERENCES": "users(id)"})
        assert definition.references.table == "users"
        assert definition.references.column == "id"

    def test_key_loose_form_and_index_alias(self):
        key = KeyDefinition.model_validate(["index", "email", {"NAME": "idx_email"}])
        assert key.type == KeyType.KEY
        assert key.columns == ["email"]
        assert key.name == "idx_email"

    def test_foreign_key_requires_matching_reference(self):
        with pytest.raises(ValueError):
            KeyDefinition.model_validate({"type": "FOREIGN", "columns": ["a", "b"], "REFERENCES": {"table": "t", "columns": "id"}})
        with pytest.raises(ValueError):
            KeyDefinition.model_validate({"type": "UNIQUE", "columns": ["a"], "ON DELETE": "CASCADE"})

    def test_create_table_key_columns_must_exist(self):
        with pytest.raises(ValidationError, match="unknown columns"):
            CreateTable.create(
                name="users",
                columns={"id": "INTEGER"},
                keys=[["UNIQUE", "email"]],
            )

    def test_create_table_requires_one_shape(self):
        with pytest.raises(ValidationError):
            CreateTable.create(name="users")

    def test_drop_table_wraps_single_name(self):
        assert DropTable(tables="users").tables == ["users"]

    def test_session_commands(self):
        assert Set(statement="x = 1").is_write is False
        assert BulkImportMode().enabled is True
