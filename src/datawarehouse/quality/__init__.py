"""Data quality checks for Silver and Gold outputs."""

from datawarehouse.quality.checks import run_gold_checks, run_silver_checks

__all__ = ["run_silver_checks", "run_gold_checks"]
