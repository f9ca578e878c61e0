"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
enabling correlation of logs across the steps of a pipeline run.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional
from datawarehouse.__version__ import __version__

run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
step_var: ContextVar[Optional[str]] = ContextVar("step", default=None)

_static_context: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records.

    This filter extracts values from context variables and adds them to
    log records, so every line emitted while a step runs carries the run id
    and step name.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        for key, var in (("run_id", run_id_var), ("step", step_var)):
            value = var.get()
            if value is not None or not hasattr(record, key):
                setattr(record, key, value)
        setattr(record, "sdk_name", "datawarehouse")
        setattr(record, "package_version", __version__)

        for key, value in _static_context.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Set process-level values stamped on every record (environment, region, ...)."""
    _static_context.clear()
    if environment is not None:
        _static_context["environment"] = environment
    if extra:
        _static_context.update(extra)


def set_run_context(
    run_id: Optional[str] = None,
    step: Optional[str] = None,
) -> None:
    """Set run context variables."""
    if run_id is not None:
        run_id_var.set(run_id)
    if step is not None:
        step_var.set(step)


def clear_run_context() -> None:
    """Clear all run context variables."""
    run_id_var.set(None)
    step_var.set(None)
