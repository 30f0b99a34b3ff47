"""Query accounting for a session.

Keeps the per-session statement count and cumulative elapsed time and
mirrors each observation to OpenTelemetry instruments.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlcommand.telemetry import get_meter


@dataclass
class QueryMetrics:
    """Metrics for a single dispatched command.

    Attributes:
        command: Command tag (e.g. 'SELECT', 'CREATE TABLE')
        dialect: Dialect the plan was compiled for
        route: Connection slot the plan ran on ('primary' or 'master')
        statements: Number of statements executed
        duration_seconds: Wall time spent in the driver
        success: Whether every statement succeeded
    """

    command: str
    dialect: str
    route: str
    statements: int
    duration_seconds: float
    success: bool = True

    def attributes(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "dialect": self.dialect,
            "route": self.route,
            "success": self.success,
        }


@dataclass
class QueryStats:
    """Running totals for a session.

    Attributes:
        count: Number of statements executed
        elapsed: Cumulative seconds spent executing statements
        history: Most recent command metrics, newest last
    """

    count: int = 0
    elapsed: float = 0.0
    history: List[QueryMetrics] = field(default_factory=list)
    max_history: int = 100
    _recorder: Optional["MetricsRecorder"] = field(default=None, repr=False)

    def record(self, metrics: QueryMetrics) -> None:
        """Add a command's figures to the running totals.

        Args:
            metrics: Figures for one dispatched command
        """
        self.count += metrics.statements
        self.elapsed += metrics.duration_seconds
        self.history.append(metrics)
        if len(self.history) > self.max_history:
            del self.history[0]

        if self._recorder is not None:
            self._recorder.record(metrics)

    def reset(self) -> None:
        self.count = 0
        self.elapsed = 0.0
        self.history.clear()


class MetricsRecorder:
    """Exports query metrics through OpenTelemetry.

    Without a configured MeterProvider the OpenTelemetry API hands back
    no-op instruments, so recording is always safe.
    """

    def __init__(self, meter_name: str = "sqlcommand"):
        self.meter = get_meter(meter_name)
        self.query_counter = self.meter.create_counter(
            "sqlcommand.queries",
            description="Statements executed",
            unit="statements",
        )
        self.duration_histogram = self.meter.create_histogram(
            "sqlcommand.query.duration",
            description="Time spent executing a command plan",
            unit="s",
        )

    def record(self, metrics: QueryMetrics) -> None:
        attrs = metrics.attributes()
        self.query_counter.add(metrics.statements, attributes=attrs)
        self.duration_histogram.record(metrics.duration_seconds, attributes=attrs)


def create_query_stats(export: bool = True) -> QueryStats:
    """Create a QueryStats, optionally wired to OpenTelemetry."""
    return QueryStats(_recorder=MetricsRecorder() if export else None)
