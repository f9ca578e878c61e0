"""Bronze/Silver/Gold warehouse pipeline for CRM and ERP sources.

Quick start:
    >>> from datawarehouse import run_silver_load, build_gold_layer
    >>> report = run_silver_load()
    >>> gold = build_gold_layer()
"""

from datawarehouse.__version__ import __version__
from datawarehouse.api import (
    build_gold_layer,
    check_gold_quality,
    check_silver_quality,
    configure_logging,
    run_silver_load,
)
from datawarehouse.common.exceptions import DWError, ErrorCode
from datawarehouse.settings import get_settings

__all__ = [
    "__version__",
    "run_silver_load",
    "build_gold_layer",
    "check_silver_quality",
    "check_gold_quality",
    "configure_logging",
    "DWError",
    "ErrorCode",
    "get_settings",
]
