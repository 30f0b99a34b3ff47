"""Monitoring infrastructure for query metrics."""

from sqlcommand.monitoring.metrics import MetricsRecorder, QueryMetrics, QueryStats, create_query_stats

__all__ = [
    "QueryMetrics",
    "QueryStats",
    "MetricsRecorder",
    "create_query_stats",
]
