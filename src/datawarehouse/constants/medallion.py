"""Medallion architecture constants and enumerations.

This module contains the layer and run-status enum types used throughout
the warehouse pipeline for table qualification and step bookkeeping.
"""

from enum import Enum


class Layer(str, Enum):
    """Data layer type enumeration.

    Medallion Architecture:
        BRONZE: Raw ingested data, unvalidated
        SILVER: Cleaned, deduplicated, standardized data at source grain
        GOLD: Business-facing star schema built from Silver
    """

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class StepStatus(str, Enum):
    """Status of a single run-log step.

    RUNNING is emitted when a step starts; every step ends in exactly one of
    OK, FAILED or SKIPPED.
    """

    RUNNING = "RUNNING"
    OK = "OK"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class CheckStatus(str, Enum):
    """Outcome of a data quality check."""

    PASS = "PASS"
    FAIL = "FAIL"


class CheckSeverity(str, Enum):
    """How a failing quality check affects the overall verdict.

    ERROR checks fail the report; WARN checks (orphans, suspicious dates)
    are surfaced but never fatal.
    """

    ERROR = "ERROR"
    WARN = "WARN"


TOTAL_STEP = "TOTAL"
LOAD_TIMESTAMP_COLUMN = "dwh_load_ts"
