from .medallion import (
    build_gold_layer,
    check_gold_quality,
    check_silver_quality,
    configure_logging,
    run_silver_load,
)

__all__ = [
    "run_silver_load",
    "build_gold_layer",
    "check_silver_quality",
    "check_gold_quality",
    "configure_logging",
]
