"""Constants module for the warehouse pipeline.

This module contains all constant values and enumerations used throughout
the package. It has no dependencies on other package modules.

Organization:
    - medallion: Layer, step status and quality check enumerations
    - domains: Canonical code-to-label mappings used by the Silver normalizers
"""

from datawarehouse.constants.medallion import (
    CheckSeverity,
    CheckStatus,
    Layer,
    LOAD_TIMESTAMP_COLUMN,
    StepStatus,
    TOTAL_STEP,
)
from datawarehouse.constants.domains import NOT_AVAILABLE

__all__ = [
    "Layer",
    "StepStatus",
    "CheckStatus",
    "CheckSeverity",
    "TOTAL_STEP",
    "LOAD_TIMESTAMP_COLUMN",
    "NOT_AVAILABLE",
]
