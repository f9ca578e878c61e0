"""Core logging setup and configuration.

This module wires structured JSON logging with run-context propagation and
OpenTelemetry correlation while keeping configuration declarative via
``logging.config.dictConfig``.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Set

from datawarehouse.telemetry import current_trace_ids

# Libraries whose INFO output drowns the pipeline's own events.
_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _build_reserved_keys() -> Set[str]:
    """Collect standard ``LogRecord`` attributes to avoid duplicating them."""
    probe = logging.LogRecord(
        name="datawarehouse.probe",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="",
        args=(),
        exc_info=None,
    )
    reserved = set(probe.__dict__.keys())
    reserved.update({"asctime", "message"})
    return reserved


_RESERVED_LOG_RECORD_KEYS = _build_reserved_keys()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """One JSON object per line: message, level, run context, extras and trace ids.

    Trace ids come from the OpenTelemetry logging instrumentation when it
    is installed, otherwise from the span active while formatting.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_KEYS and not key.startswith("otel")
        }

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()

        if hasattr(record, "otelTraceID"):
            log_record["trace_id"] = record.otelTraceID
            log_record["span_id"] = getattr(record, "otelSpanID", None)
        else:
            ids = current_trace_ids()
            if ids is not None:
                log_record["trace_id"], log_record["span_id"] = ids

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def setup_logging(level: str = "INFO", library_level: str = "WARNING") -> None:
    """Configure structured logging backed by ``logging.config.dictConfig``.

    Args:
        level: Log level of the pipeline (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        library_level: Level applied to SQLAlchemy's engine and pool loggers.
    """
    config_dict: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "dw_json": {
                "()": "datawarehouse.logging.logger.CustomJsonFormatter",
            }
        },
        "filters": {
            "dw_context": {
                "()": "datawarehouse.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level.upper(),
                "formatter": "dw_json",
                "filters": ["dw_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            name: {"level": library_level.upper()} for name in _NOISY_LOGGERS
        },
        "root": {
            "level": level.upper(),
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(config_dict)
