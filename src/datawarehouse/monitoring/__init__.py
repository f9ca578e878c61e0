"""Monitoring infrastructure for load metrics and telemetry."""

from datawarehouse.monitoring.metrics import LoadMetrics, MetricsCollector

__all__ = [
    "LoadMetrics",
    "MetricsCollector",
]
