import functools
from typing import Any, Callable, Dict, Optional, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from datawarehouse.telemetry import get_tracer


F = TypeVar('F', bound=Callable[..., Any])

ROWS_ATTRIBUTE = "datawarehouse.rows"

logger = None


def _get_logger():
    """Get logger instance lazily."""
    global logger
    if logger is None:
        from datawarehouse.logging import get_logger
        logger = get_logger(__name__)
    return logger


def _row_count(result: Any) -> Optional[int]:
    if isinstance(result, bool):
        return None
    if isinstance(result, int):
        return result
    if hasattr(result, "__len__"):
        return len(result)
    return None


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    attribute_getter: Optional[Callable[..., Optional[Dict[str, Any]]]] = None,
    record_rows: bool = False,
) -> Callable[[F], F]:
    """Instrument a storage or pipeline call with an OpenTelemetry span.

    Args:
        span_name: Explicit span name. Defaults to ``datawarehouse.<qualname>``.
        kind: Span kind, defaults to INTERNAL.
        attributes: Static span attributes to attach.
        attribute_getter: Called with the function's arguments; returns
            attributes such as the physical table name.
        record_rows: Set ``datawarehouse.rows`` from the result, which is
            either a row count or a sized object such as a DataFrame.

    Example:
        >>> @traced("datawarehouse.storage.read_table", record_rows=True)
        ... def read_table(layer, table_name): ...
    """

    def decorator(func: F) -> F:
        name = span_name or f"datawarehouse.{func.__qualname__}"

        def _collect_attributes(args: tuple, kwargs: dict) -> Dict[str, Any]:
            collected: Dict[str, Any] = {}
            if attributes:
                collected.update({k: v for k, v in attributes.items() if v is not None})

            if attribute_getter:
                try:
                    dynamic_attrs = attribute_getter(*args, **kwargs)
                except Exception as exc:  # pragma: no cover
                    _get_logger().warning("trace attribute getter failed: %s", exc)
                    dynamic_attrs = None

                if dynamic_attrs:
                    collected.update({k: v for k, v in dynamic_attrs.items() if v is not None})

            return collected

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_tracer(func.__module__)

            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in _collect_attributes(args, kwargs).items():
                    span.set_attribute(key, value)

                try:
                    result = func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

                if record_rows:
                    rows = _row_count(result)
                    if rows is not None:
                        span.set_attribute(ROWS_ATTRIBUTE, rows)
                return result

        return sync_wrapper  # type: ignore[return-value]

    return decorator
