"""Decorator for Silver entity transforms.

This module provides ``silver_entity``, which attaches
:class:`SilverEntityMetadata` to a transform function and registers it for
discovery by the Silver processor.
"""

from typing import Callable, List, Optional

import pandas as pd

from datawarehouse.constants.medallion import CheckSeverity
from datawarehouse.types.metadata import SilverEntityMetadata
from datawarehouse.types.run import TransformContext

EntityTransform = Callable[[pd.DataFrame, TransformContext], pd.DataFrame]

_registry: List[EntityTransform] = []


def silver_entity(
    target_table: str,
    step_name: str,
    source_table: Optional[str] = None,
    description: Optional[str] = None,
    business_key: Optional[List[str]] = None,
    key_severity: CheckSeverity = CheckSeverity.ERROR,
    disabled: bool = False,
) -> Callable[[EntityTransform], EntityTransform]:
    """Register a function as the transform of one Silver entity.

    The transform receives the Bronze snapshot and the run's
    :class:`TransformContext` and returns the cleaned rowset without the load
    timestamp; the processor stamps it.

    Args:
        target_table: Silver table the transform fully replaces.
        step_name: Run-log step name, e.g. ``LOAD_CRM_CUSTOMERS``.
        source_table: Bronze table to read. Defaults to ``target_table``.
        description: Message recorded on the RUNNING event.
        business_key: Silver columns forming the business key.
        key_severity: Severity of the duplicate-key quality check.
        disabled: If True, the processor records the entity as SKIPPED.

    Returns:
        The unchanged function with ``_silver_metadata`` attached.

    Example:
        >>> @silver_entity(
        ...     target_table="erp_px_cat_g1v2",
        ...     step_name="LOAD_ERP_PX_CAT_G1V2",
        ...     description="Loading ERP product categories into Silver",
        ... )
        ... def load_product_categories(frame, context):
        ...     return frame
    """
    def decorator(func: EntityTransform) -> EntityTransform:
        metadata = SilverEntityMetadata(
            target_table=target_table,
            source_table=source_table or target_table,
            step_name=step_name,
            description=description,
            business_key=business_key or [],
            key_severity=key_severity,
            order=len(_registry),
            disabled=disabled,
        )
        func._silver_metadata = metadata
        _registry.append(func)
        return func

    return decorator


def get_metadata(func: EntityTransform) -> SilverEntityMetadata:
    metadata = getattr(func, "_silver_metadata", None)
    if metadata is None:
        raise ValueError(f"{getattr(func, '__name__', func)!r} is not decorated with @silver_entity")
    return metadata


def registered_entities() -> List[EntityTransform]:
    """Registered transforms in load order."""
    return sorted(_registry, key=lambda func: get_metadata(func).order)
