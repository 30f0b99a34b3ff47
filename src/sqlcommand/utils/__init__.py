"""Utility helpers for sqlcommand."""

from sqlcommand.utils.decorators import traced

__all__ = ["traced"]
