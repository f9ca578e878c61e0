"""Logging infrastructure for the warehouse pipeline.

This module provides structured logging with JSON output and run-context
tracking (run id, current step).
"""

from datawarehouse.logging.filters import ContextFilter
from datawarehouse.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
]
