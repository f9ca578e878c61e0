"""Utility functions and helpers for the warehouse pipeline."""

from datawarehouse.utils.datetime import get_current_date, get_current_timestamp
from datawarehouse.utils.decorators import traced

__all__ = [
    "get_current_timestamp",
    "get_current_date",
    "traced",
]
