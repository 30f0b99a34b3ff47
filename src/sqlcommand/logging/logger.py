"""JSON logging for sqlcommand.

Records are rendered as one JSON object per line. ``extra`` fields such as
``db.dialect`` or ``db.route`` are emitted as top-level keys, and records
written inside a traced command carry the active trace and span ids.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from opentelemetry import trace

# SQL text in log records is cut to this many characters
MAX_STATEMENT_LENGTH = 1000

_STATEMENT_KEYS = ("query", "db.statement")

_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"asctime", "message"}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _span_ids() -> Dict[str, str]:
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return {}
    return {
        "trace_id": format(context.trace_id, "032x"),
        "span_id": format(context.span_id, "016x"),
    }


class CustomJsonFormatter(logging.Formatter):
    """Formats a record as JSON with its extras, trace ids and exception."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key in entry:
                continue
            if key in _STATEMENT_KEYS and isinstance(value, str) and len(value) > MAX_STATEMENT_LENGTH:
                value = value[:MAX_STATEMENT_LENGTH] + "..."
            entry[key] = value

        entry.update(_span_ids())

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """Route the ``sqlcommand`` logger tree to stdout as JSON.

    Args:
        level: Log level name; ``DatabaseSettings.log_level`` when omitted
    """
    if level is None:
        from sqlcommand.settings import get_settings

        level = get_settings().log_level

    level = level.upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "sqlcommand.logging.logger.CustomJsonFormatter"},
        },
        "filters": {
            "session_context": {"()": "sqlcommand.logging.filters.ContextFilter"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json",
                "filters": ["session_context"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "sqlcommand": {"level": level, "handlers": ["stdout"], "propagate": False},
        },
    })
