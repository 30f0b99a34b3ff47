"""Shared model types."""

from sqlcommand.types.base import SQLCommandBaseModel

__all__ = ["SQLCommandBaseModel"]
