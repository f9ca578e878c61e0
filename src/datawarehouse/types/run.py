"""Run-log types: step events, entity results and the run report."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from datawarehouse.constants.medallion import StepStatus, TOTAL_STEP
from datawarehouse.types.base import DWBaseModel


class StepEvent(DWBaseModel):
    """One structured run-log event.

    A step emits a RUNNING event when it starts and a terminal event (OK,
    FAILED or SKIPPED) when it ends. Terminal events carry ``end_ts`` and
    ``duration_seconds``.
    """
    run_id: str
    step: str
    status: StepStatus
    message: Optional[str] = None
    start_ts: datetime
    end_ts: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    rows_read: Optional[int] = None
    rows_written: Optional[int] = None
    error_code: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != StepStatus.RUNNING.value

    def to_log_row(self) -> Dict[str, Any]:
        """Row shaped like the ``silver_load_log`` table."""
        return {
            "run_id": self.run_id,
            "step": self.step,
            "status": self.status,
            "message": self.message,
            "start_ts": self.start_ts,
            "end_ts": self.end_ts,
            "duration_seconds": int(self.duration_seconds) if self.duration_seconds is not None else None,
        }


class EntityResult(DWBaseModel):
    """Outcome of loading one Silver entity."""
    entity: str
    step: str
    status: StepStatus
    rows_read: int = 0
    rows_written: int = 0
    duration_seconds: float = 0.0
    error: Optional[Dict[str, Any]] = None


class RunReport(DWBaseModel):
    """Summary of a Silver run.

    Attributes:
        run_id: Unique id shared by every event of the run.
        load_ts: Processing timestamp stamped on every Silver row.
        events: All run-log events in emission order.
        results: Per-entity outcomes keyed by Silver table name.
    """
    run_id: str
    load_ts: datetime
    events: List[StepEvent] = Field(default_factory=list)
    results: Dict[str, EntityResult] = Field(default_factory=dict)

    @property
    def failed_steps(self) -> List[str]:
        return [r.step for r in self.results.values() if r.status == StepStatus.FAILED.value]

    @property
    def succeeded(self) -> bool:
        return not self.failed_steps

    def terminal_events(self) -> List[StepEvent]:
        return [e for e in self.events if e.is_terminal]

    def total_event(self) -> Optional[StepEvent]:
        """Final TOTAL event, if the run has finished."""
        for event in reversed(self.events):
            if event.step == TOTAL_STEP and event.is_terminal:
                return event
        return None


class TransformContext(DWBaseModel):
    """Run-wide values handed to every entity transform.

    Attributes:
        run_id: Id of the current run.
        load_ts: Processing timestamp stamped on every output row.
        today: Calendar date used for "in the future" checks.
    """
    run_id: str
    load_ts: datetime
    today: date
