"""Metadata types for Silver entity registration.

The ``@silver_entity`` decorator attaches a :class:`SilverEntityMetadata`
instance to each transform so the processor can discover what to read,
what to write and how to name the run-log step.
"""

from typing import List, Optional

from pydantic import Field

from datawarehouse.constants.medallion import CheckSeverity
from datawarehouse.types.base import DWBaseModel


class SilverEntityMetadata(DWBaseModel):
    """Metadata for one Silver entity load.

    Attributes:
        target_table: Silver table name that is fully replaced by the load.
        source_table: Bronze table name read as an immutable snapshot.
        step_name: Run-log step name (e.g. ``LOAD_CRM_CUSTOMERS``).
        description: Human-readable description used in log messages.
        business_key: Columns forming the entity's business key in Silver.
            The Silver quality checks test these for duplicates and the
            leading column for missing values; empty skips both checks.
        key_severity: Severity of the duplicate-key check.
        order: Load order within a run (registration order by default).
        disabled: If True, the entity is skipped and recorded as SKIPPED.
    """
    target_table: str
    source_table: str
    step_name: str
    description: Optional[str] = None
    business_key: List[str] = Field(default_factory=list)
    key_severity: CheckSeverity = CheckSeverity.ERROR
    order: int = 0
    disabled: bool = False
