"""Structured run log for pipeline steps.

A :class:`RunLog` is created per run and passed to whatever executes the
steps. Each step emits a RUNNING event on entry and exactly one terminal
event (OK, FAILED or SKIPPED) on exit, carrying timestamps, duration and row
counts. Events are kept in memory, written to the JSON log and forwarded to
an optional sink.
"""

from __future__ import annotations

import threading
import time
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

import pandas as pd
from opentelemetry.trace import Status, StatusCode

from datawarehouse.constants import StepStatus
from datawarehouse.logging import get_logger
from datawarehouse.logging.filters import run_id_var, step_var
from datawarehouse.telemetry import get_tracer
from datawarehouse.types.run import StepEvent
from datawarehouse.utils.datetime import get_current_timestamp

logger = get_logger(__name__)

EventSink = Callable[[StepEvent], None]


class StepHandle:
    """Mutable view of a running step, yielded by :meth:`RunLog.step`.

    The body of the step records row counts on it, and may mark the step
    skipped or failed without raising.
    """

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        self.message = message
        self.rows_read: Optional[int] = None
        self.rows_written: Optional[int] = None
        self.error_code: Optional[str] = None
        self._status = StepStatus.OK

    @property
    def status(self) -> StepStatus:
        return self._status

    def skip(self, message: Optional[str] = None) -> None:
        self._status = StepStatus.SKIPPED
        if message:
            self.message = message

    def fail(self, message: Optional[str] = None, error_code: Optional[str] = None) -> None:
        self._status = StepStatus.FAILED
        if message:
            self.message = message
        if error_code:
            self.error_code = error_code


class RunLog:
    """Explicit step-event emitter for one pipeline run.

    Example:
        >>> run_log = RunLog()
        >>> with run_log.step("LOAD_CRM_CUSTOMERS", "Load silver.crm_cust_info") as step:
        ...     step.rows_written = 18484
        >>> [e.status for e in run_log.events]
        ['RUNNING', 'OK']
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        time_zone: Optional[str] = None,
        sink: Optional[EventSink] = None,
    ):
        self.run_id = run_id or str(uuid.uuid4())
        self.time_zone = time_zone
        self._sink = sink
        self._events: List[StepEvent] = []
        self._lock = threading.Lock()

    @property
    def events(self) -> List[StepEvent]:
        with self._lock:
            return list(self._events)

    def emit(self, event: StepEvent) -> None:
        with self._lock:
            self._events.append(event)

        payload = {
            "run_id": event.run_id,
            "step_name": event.step,
            "status": event.status,
            "duration.seconds": event.duration_seconds,
            "rows_read": event.rows_read,
            "rows_written": event.rows_written,
        }
        if event.status == StepStatus.FAILED.value:
            logger.error(event.message or f"Step {event.step} failed", extra={**payload, "error_code": event.error_code})
        else:
            logger.info(event.message or f"Step {event.step} {event.status}", extra=payload)

        if self._sink is not None:
            self._sink(event)

    @contextmanager
    def step(self, name: str, message: Optional[str] = None) -> Iterator[StepHandle]:
        """Run a named step, emitting RUNNING and then its terminal event.

        Exceptions raised by the body are recorded as FAILED and re-raised.
        """
        handle = StepHandle(name, message)
        start_ts = get_current_timestamp(self.time_zone)
        started = time.perf_counter()
        run_token = run_id_var.set(self.run_id)
        step_token = step_var.set(name)

        self.emit(StepEvent(run_id=self.run_id, step=name, status=StepStatus.RUNNING, message=message, start_ts=start_ts))

        tracer = get_tracer("datawarehouse")
        try:
            with tracer.start_as_current_span(f"datawarehouse.step.{name}") as span:
                span.set_attribute("datawarehouse.run_id", self.run_id)
                span.set_attribute("datawarehouse.step", name)
                try:
                    yield handle
                except Exception as exc:
                    handle.fail(str(exc), getattr(getattr(exc, "error_code", None), "value", None))
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise
                finally:
                    self._finish(handle, start_ts, started)
        finally:
            step_var.reset(step_token)
            run_id_var.reset(run_token)

    def _finish(self, handle: StepHandle, start_ts, started: float) -> None:
        self.emit(
            StepEvent(
                run_id=self.run_id,
                step=handle.name,
                status=handle.status,
                message=handle.message,
                start_ts=start_ts,
                end_ts=get_current_timestamp(self.time_zone),
                duration_seconds=time.perf_counter() - started,
                rows_read=handle.rows_read,
                rows_written=handle.rows_written,
                error_code=handle.error_code,
            )
        )

    def to_frame(self) -> pd.DataFrame:
        """Terminal events as rows of the run-log table."""
        rows = [event.to_log_row() for event in self.events if event.is_terminal]
        return pd.DataFrame(
            rows,
            columns=["run_id", "step", "status", "message", "start_ts", "end_ts", "duration_seconds"],
        )
