"""Logging infrastructure for sqlcommand.

Structured logging with JSON output and context tracking.
"""

from sqlcommand.logging.filters import ContextFilter, clear_session_context, set_session_context
from sqlcommand.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "set_session_context",
    "clear_session_context",
]
