"""Loosely-typed command input.

``parse_command`` turns a ``(tag, payload, *args)`` triple, the shape in
which commands are exported, logged or written by hand, into the matching
typed command model.
"""

from typing import Any, Dict, Type, Union

from sqlcommand.commands.base import BaseCommand
from sqlcommand.commands.ddl import (
    AddColumn,
    AddIndex,
    CreateDatabase,
    CreateTable,
    DropColumn,
    DropDatabase,
    DropIndex,
    DropTable,
)
from sqlcommand.commands.dml import Delete, Insert, Select, TruncateTable, Update
from sqlcommand.commands.session import (
    BulkImportMode,
    Set,
    ShowCreateDatabase,
    ShowCreateTable,
    ShowDatabases,
    ShowTables,
    Use,
)
from sqlcommand.common.exceptions import ErrorCode, unsupported_command_error, validation_error
from sqlcommand.constants.sql import CommandType


COMMAND_MODELS: Dict[CommandType, Type[BaseCommand]] = {
    CommandType.SELECT: Select,
    CommandType.INSERT: Insert,
    CommandType.UPDATE: Update,
    CommandType.DELETE: Delete,
    CommandType.TRUNCATE_TABLE: TruncateTable,
    CommandType.SET: Set,
    CommandType.USE: Use,
    CommandType.CREATE_DATABASE: CreateDatabase,
    CommandType.DROP_DATABASE: DropDatabase,
    CommandType.CREATE_TABLE: CreateTable,
    CommandType.DROP_TABLE: DropTable,
    CommandType.ADD_COLUMN: AddColumn,
    CommandType.DROP_COLUMN: DropColumn,
    CommandType.ADD_INDEX: AddIndex,
    CommandType.DROP_INDEX: DropIndex,
    CommandType.SHOW_DATABASES: ShowDatabases,
    CommandType.SHOW_TABLES: ShowTables,
    CommandType.SHOW_CREATE_DATABASE: ShowCreateDatabase,
    CommandType.SHOW_CREATE_TABLE: ShowCreateTable,
    CommandType.BULK_IMPORT_MODE: BulkImportMode,
}

# Field a bare-string payload is assigned to
_STRING_PAYLOAD_FIELDS = {
    CommandType.SET: "statement",
    CommandType.USE: "database",
    CommandType.CREATE_DATABASE: "name",
    CommandType.DROP_DATABASE: "name",
    CommandType.SHOW_CREATE_DATABASE: "name",
    CommandType.SHOW_CREATE_TABLE: "name",
    CommandType.TRUNCATE_TABLE: "tables",
    CommandType.DROP_TABLE: "tables",
}

# Fields a flat-array payload is spread over, in order
_ARRAY_PAYLOAD_FIELDS = {
    CommandType.DROP_INDEX: ("table", "name"),
    CommandType.DROP_COLUMN: ("table", "name"),
}

_LIST_PAYLOAD_FIELDS = {
    CommandType.TRUNCATE_TABLE: "tables",
    CommandType.DROP_TABLE: "tables",
}


def resolve_command_type(tag: Union[str, CommandType]) -> CommandType:
    """Map a command tag onto the vocabulary.

    Tags are matched case-insensitively with internal whitespace collapsed,
    so ``"select"`` and ``"CREATE  TABLE"`` resolve like their canonical
    spellings. Only letter case and spacing are forgiven: a tag with extra
    words, such as ``INSERT INTO`` or ``INSERT IGNORE``, is still rejected.

    Raises:
        ValidationError: If the tag is a misspelling of INSERT (e.g. ``INSERT INTO``)
        UnsupportedCommandError: If the tag is not in the vocabulary
    """
    if isinstance(tag, CommandType):
        return tag
    if not isinstance(tag, str):
        raise unsupported_command_error(tag)

    normalized = " ".join(tag.upper().split())
    try:
        return CommandType(normalized)
    except ValueError:
        pass

    if normalized.startswith("INSERT"):
        raise validation_error(
            f"Insertion command must be spelled exactly 'INSERT', got {tag!r}",
            field="command",
            value=tag,
            error_code=ErrorCode.INVALID_ARGUMENT,
        )
    raise unsupported_command_error(tag)


def _normalize_payload(command_type: CommandType, payload: Any) -> Dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return dict(payload)

    if isinstance(payload, str) and command_type in _STRING_PAYLOAD_FIELDS:
        return {_STRING_PAYLOAD_FIELDS[command_type]: payload}

    if isinstance(payload, (list, tuple)):
        if command_type in _LIST_PAYLOAD_FIELDS:
            return {_LIST_PAYLOAD_FIELDS[command_type]: list(payload)}
        if command_type in _ARRAY_PAYLOAD_FIELDS:
            fields = _ARRAY_PAYLOAD_FIELDS[command_type]
            if len(payload) != len(fields):
                raise validation_error(
                    f"{command_type.value} payload must be [{', '.join(fields)}]",
                    value=payload,
                )
            return dict(zip(fields, payload))

    if isinstance(payload, bool) and command_type == CommandType.BULK_IMPORT_MODE:
        return {"enabled": payload}

    raise validation_error(
        f"Unsupported payload shape for {command_type.value}: {type(payload).__name__}",
        value=payload,
    )


def parse_command(tag: Union[str, CommandType], payload: Any = None, *args: Any) -> BaseCommand:
    """Build a typed command from a tag, a payload and positional arguments.

    Args:
        tag: Command tag, e.g. ``"SELECT"`` or ``"CREATE TABLE"``
        payload: Mapping with clause keys, bare string, flat array, or an
            already-built command of the same type
        *args: Values for ``?`` placeholders, in consumption order

    Returns:
        The validated command model

    Raises:
        UnsupportedCommandError: If the tag is unknown
        ValidationError: If the payload is malformed

    Example:
        >>> parse_command("UPDATE", {"table": "users", "values": {"name": "x"}, "WHERE": "id = ?"}, 7)
    """
    command_type = resolve_command_type(tag)
    model = COMMAND_MODELS[command_type]

    if isinstance(payload, BaseCommand):
        if not isinstance(payload, model):
            raise validation_error(
                f"{type(payload).__name__} cannot be issued as {command_type.value}",
                field="command",
            )
        return payload.with_args(*args) if args else payload

    data = _normalize_payload(command_type, payload)
    if args:
        data["args"] = list(args)
    return model.create(**data)
