"""Run-level observability: structured step events."""

from datawarehouse.observability.run_log import RunLog, StepHandle

__all__ = ["RunLog", "StepHandle"]
