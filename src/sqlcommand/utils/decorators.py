"""Tracing decorator for command execution."""

import functools
from typing import Any, Callable, Dict, Optional, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from sqlcommand.common.exceptions import SQLCommandError
from sqlcommand.logging import get_logger
from sqlcommand.telemetry import get_tracer


F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.CLIENT,
    attribute_getter: Optional[Callable[..., Dict[str, Any]]] = None,
) -> Callable[[F], F]:
    """Run the wrapped call inside an OpenTelemetry span.

    Args:
        span_name: Span name; defaults to ``sqlcommand.<qualname>``
        kind: Span kind; CLIENT since spans wrap calls to a database
        attribute_getter: Called with the wrapped call's arguments to
            produce span attributes; None values are skipped

    On failure the exception is recorded on the span and re-raised.
    SQLCommandError instances also tag the span with their error code.
    """

    def decorator(func: F) -> F:
        name = span_name or f"sqlcommand.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attributes: Dict[str, Any] = {}
            if attribute_getter is not None:
                try:
                    attributes = attribute_getter(*args, **kwargs) or {}
                except Exception:
                    logger.warning("Span attributes unavailable for %s", name, exc_info=True)

            with get_tracer().start_as_current_span(name, kind=kind) as span:
                for key, value in attributes.items():
                    if value is not None:
                        span.set_attribute(key, value)
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if isinstance(exc, SQLCommandError):
                        span.set_attribute("sqlcommand.error_code", exc.error_code.value)
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper  # type: ignore[return-value]

    return decorator
