"""Shared pydantic types for the warehouse pipeline."""

from datawarehouse.types.base import DWBaseModel
from datawarehouse.types.metadata import SilverEntityMetadata
from datawarehouse.types.quality import QualityCheckResult, QualityReport
from datawarehouse.types.run import EntityResult, RunReport, StepEvent, TransformContext

__all__ = [
    "DWBaseModel",
    "SilverEntityMetadata",
    "StepEvent",
    "EntityResult",
    "RunReport",
    "TransformContext",
    "QualityCheckResult",
    "QualityReport",
]
