"""Logging filters for context injection.

Injects the active session and dialect into every log record so statements
can be correlated to the session that ran them.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

from sqlcommand.__version__ import __version__

session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)
dialect_var: ContextVar[Optional[str]] = ContextVar("dialect", default=None)


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        setattr(record, "session_id", session_id_var.get())
        setattr(record, "dialect", dialect_var.get())
        setattr(record, "sdk_name", "sqlcommand")
        setattr(record, "sdk_version", __version__)

        return True


def set_session_context(
    session_id: Optional[str] = None,
    dialect: Optional[str] = None,
) -> None:
    """Set session context variables."""
    if session_id is not None:
        session_id_var.set(session_id)
    if dialect is not None:
        dialect_var.set(dialect)


def clear_session_context() -> None:
    """Clear all session context variables."""
    session_id_var.set(None)
    dialect_var.set(None)
