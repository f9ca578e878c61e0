"""Metrics collection for Silver loads.

This module records one :class:`LoadMetrics` entry per entity load and
exports counters and histograms through OpenTelemetry. Without a configured
SDK the instruments are no-ops; the in-memory list still backs
:meth:`MetricsCollector.get_metrics_summary`.
"""

import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from datawarehouse.__version__ import __version__
from datawarehouse.logging import get_logger
from datawarehouse.telemetry import get_meter


@dataclass
class LoadMetrics:
    """Container for the metrics of a single entity load.

    Attributes:
        step: Run-log step name (e.g. ``LOAD_CRM_SALES``)
        layer: Data layer written
        table_name: Target table
        rows_read: Rows read from the source table
        rows_written: Rows written to the target table
        duration_seconds: Load duration in seconds
        success: Whether the load succeeded
        error_code: Error code if the load failed
        timestamp: When the load finished
    """

    step: str
    layer: str
    table_name: str
    rows_read: int
    rows_written: int
    duration_seconds: float
    success: bool
    error_code: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data


class MetricsCollector:
    """Collector for load metrics exported to OpenTelemetry."""

    def __init__(self, meter_name: str = "datawarehouse"):
        self.logger = get_logger(__name__)
        self._metrics: List[LoadMetrics] = []
        self._lock = threading.Lock()
        self.meter = get_meter(meter_name, __version__)
        self._setup_instruments()

    def _setup_instruments(self) -> None:
        """Setup OpenTelemetry instruments."""
        self.load_counter = self.meter.create_counter(
            "dwh_entity_loads_total",
            description="Total number of entity loads",
            unit="loads"
        )

        self.rows_counter = self.meter.create_counter(
            "dwh_rows_written_total",
            description="Total rows written to target tables",
            unit="rows"
        )

        self.error_counter = self.meter.create_counter(
            "dwh_load_failures_total",
            description="Total number of failed entity loads",
            unit="errors"
        )

        self.duration_histogram = self.meter.create_histogram(
            "dwh_load_duration_seconds",
            description="Duration of entity loads",
            unit="seconds"
        )

    def record_load(self, metrics: LoadMetrics) -> None:
        """Record an entity load."""
        with self._lock:
            self._metrics.append(metrics)

        attributes = {
            "step": metrics.step,
            "layer": metrics.layer,
            "table": metrics.table_name,
            "success": str(metrics.success).lower(),
        }

        self.load_counter.add(1, attributes)
        self.rows_counter.add(metrics.rows_written, attributes)
        if not metrics.success:
            self.error_counter.add(1, {**attributes, "error_code": metrics.error_code or "unknown"})
        self.duration_histogram.record(metrics.duration_seconds, attributes)

        self.logger.debug("Load metrics recorded", extra=metrics.to_dict())

    @property
    def metrics(self) -> List[LoadMetrics]:
        with self._lock:
            return list(self._metrics)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Summarize all recorded loads."""
        recorded = self.metrics
        if not recorded:
            return {
                "total_loads": 0,
                "successful_loads": 0,
                "failed_loads": 0,
                "total_rows_read": 0,
                "total_rows_written": 0,
                "total_duration_seconds": 0.0,
                "errors_by_code": {},
            }

        failed = [m for m in recorded if not m.success]
        return {
            "total_loads": len(recorded),
            "successful_loads": len(recorded) - len(failed),
            "failed_loads": len(failed),
            "total_rows_read": sum(m.rows_read for m in recorded),
            "total_rows_written": sum(m.rows_written for m in recorded),
            "total_duration_seconds": sum(m.duration_seconds for m in recorded),
            "errors_by_code": self._group_errors(failed),
        }

    def _group_errors(self, failed_metrics: List[LoadMetrics]) -> Dict[str, int]:
        errors: Dict[str, int] = {}
        for metric in failed_metrics:
            code = metric.error_code or "unknown"
            errors[code] = errors.get(code, 0) + 1
        return errors
