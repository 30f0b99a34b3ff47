"""Base command definition.

Commands are data structures that describe what the database should do,
independent of the dialect that will eventually run them. They are
compiled into statement plans by the query builders and executed by the
dispatcher.
"""

import re
from typing import Any, ClassVar, List, Mapping

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from sqlcommand.common.exceptions import ErrorCode, validation_error
from sqlcommand.constants.sql import CommandType
from sqlcommand.types.base import SQLCommandBaseModel


# A clause keyword glued to its condition, e.g. "WHERE = id = 1" or "WHERE id = 1"
_COLLAPSED_CLAUSE = re.compile(
    r"^\s*(WHERE|ORDER\s+BY|GROUP\s+BY|HAVING|LIMIT)\b(?P<rest>.*\S.*)$",
    re.IGNORECASE | re.DOTALL,
)


def check_collapsed_clauses(payload: Mapping[str, Any], command: str) -> None:
    """Reject payload keys that merge a clause keyword with its value.

    A key such as ``"WHERE id = 1"`` would otherwise be dropped or rejected
    as an unknown key, and an UPDATE or DELETE built from the rest of the
    payload would touch every row.

    Raises:
        ValidationError: If any key collapses a clause keyword and its value
    """
    for key in payload:
        if not isinstance(key, str):
            continue
        match = _COLLAPSED_CLAUSE.match(key)
        if match:
            keyword = " ".join(match.group(1).upper().split())
            raise validation_error(
                f"{command} payload key {key!r} combines the {keyword} keyword with its value; "
                f"pass {keyword!r} as the key and the condition as its value",
                field=key,
                error_code=ErrorCode.COLLAPSED_CLAUSE,
            )


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


class BaseCommand(SQLCommandBaseModel):
    """Base class for all commands.

    Every command carries its tag and the flat, ordered list of positional
    arguments substituted for ``?`` placeholders in its clause strings.

    Attributes:
        command_type: The command tag
        args: Positional argument values, consumed left to right
    """

    command_type: CommandType
    args: List[Any] = Field(default_factory=list)

    is_write: ClassVar[bool] = False

    @classmethod
    def create(cls, **payload: Any) -> "BaseCommand":
        """Build a command from a loosely-typed payload.

        Unlike the constructor, failures surface as ``ValidationError``
        from :mod:`sqlcommand.common`.

        Args:
            **payload: Field values, keyed by field name or clause keyword

        Returns:
            The validated command

        Raises:
            ValidationError: If the payload is malformed
        """
        check_collapsed_clauses(payload, cls.__name__)
        try:
            return cls(**payload)
        except PydanticValidationError as exc:
            raise validation_error(
                f"Invalid {cls.__name__} payload: {_describe(exc)}",
                cause=exc,
            ) from exc

    def with_args(self, *args: Any) -> "BaseCommand":
        """Return a copy of this command bound to ``args``."""
        return self.model_copy(update={"args": list(args)})
