"""Base model class for all sqlcommand models."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


def _plain(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {key: _plain(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_plain(item) for item in obj]
    if isinstance(obj, Enum):
        return obj.value
    return obj


class SQLCommandBaseModel(BaseModel):
    """Base model for commands, definitions and capability tables.

    Fields accept either their Python name or their clause-keyword alias
    (``"ORDER BY"``, ``"AUTO INCREMENT"``). Unknown keys are rejected.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=False,
        validate_assignment=True,
        populate_by_name=True,
        extra="forbid",
    )

    def to_payload(self) -> Dict[str, Any]:
        """Dump to the loose payload form, keyed by clause keyword.

        Fields left at their default are omitted and enums become their
        values, so the result can be logged as JSON or fed back to
        ``create``.
        """
        return _plain(self.model_dump(by_alias=True, exclude_defaults=True))
