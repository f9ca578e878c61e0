"""Common exceptions for the warehouse pipeline.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All exceptions inherit from DWError
    and include structured error information.

    Field-level defects (bad codes, malformed dates, invalid measures) never
    raise; they are repaired to sentinels inside the Silver transforms. Only
    structural failures (unreadable source, unwritable target) surface as
    DWError, and the Silver processor isolates those per entity.
"""

from datawarehouse.common.exceptions import (
    DWError,
    ErrorCode,
    # Helper functions
    configuration_error,
    validation_error,
    missing_columns_error,
    resource_not_found_error,
    source_read_error,
    load_error,
    transformation_error,
    layer_processing_error,
    data_quality_error,
)

__all__ = [
    # Base Exception and Error Codes
    "DWError",
    "ErrorCode",
    # Helper functions
    "configuration_error",
    "validation_error",
    "missing_columns_error",
    "resource_not_found_error",
    "source_read_error",
    "load_error",
    "transformation_error",
    "layer_processing_error",
    "data_quality_error",
]
