"""OpenTelemetry tracer and meter for the sqlcommand instrumentation scope.

Nothing here configures providers. Applications install a TracerProvider
or MeterProvider; until they do, the API returns no-op instruments.
"""

from opentelemetry import metrics, trace

from sqlcommand.__version__ import __version__

__all__ = [
    "INSTRUMENTATION_SCOPE",
    "get_tracer",
    "get_meter",
]

INSTRUMENTATION_SCOPE = "sqlcommand"


def get_tracer(scope: str = INSTRUMENTATION_SCOPE) -> trace.Tracer:
    return trace.get_tracer(scope, __version__)


def get_meter(scope: str = INSTRUMENTATION_SCOPE) -> metrics.Meter:
    return metrics.get_meter(scope, __version__)
