"""OpenTelemetry access points for the warehouse pipeline.

Only the OpenTelemetry API is a dependency. The host process decides whether
an SDK is installed; without one every tracer and meter returned here is a
no-op and spans carry an invalid context.
"""

from typing import Optional

from opentelemetry import metrics, trace

from datawarehouse.__version__ import __version__

INSTRUMENTATION_NAME = "datawarehouse"

__all__ = [
    "INSTRUMENTATION_NAME",
    "get_tracer",
    "get_meter",
    "current_trace_ids",
]


def get_tracer(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None) -> trace.Tracer:
    return trace.get_tracer(name, version or __version__)


def get_meter(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None) -> metrics.Meter:
    return metrics.get_meter(name, version or __version__)


def current_trace_ids() -> Optional[tuple]:
    """Hex ``(trace_id, span_id)`` of the active span, or None outside a recorded span."""
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return None
    return format(context.trace_id, "032x"), format(context.span_id, "016x")
