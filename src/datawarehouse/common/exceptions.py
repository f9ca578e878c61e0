from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for warehouse operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific number range for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors (1xxx)
        VALIDATION_*: Input validation errors (2xxx)
        RESOURCE_*: Resource availability errors (5xxx)
        EXECUTION_*: Runtime execution errors (4xxx)
        DATA_*: Data quality and integrity errors (6xxx)
        OPERATION_*: High-level operation errors (8xxx)
    """
    # Configuration errors (1xxx)
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_INVALID = "CONFIG_003"

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VALIDATION_001"
    MISSING_COLUMN = "VALIDATION_005"

    # Execution errors (4xxx)
    TRANSFORMATION_ERROR = "EXECUTION_005"

    # Resource errors (5xxx)
    RESOURCE_NOT_FOUND = "RESOURCE_001"
    TABLE_NOT_FOUND = "RESOURCE_002"

    # Data errors (6xxx)
    DATA_QUALITY_ERROR = "DATA_001"

    # Operation errors (8xxx)
    OPERATION_ERROR = "OPERATION_001"
    LAYER_PROCESSING_ERROR = "OPERATION_002"
    SOURCE_READ_ERROR = "OPERATION_006"
    LOAD_ERROR = "OPERATION_007"


class DWError(Exception):
    """Base exception for all warehouse pipeline errors.

    This exception class uses error codes for categorization
    instead of creating numerous specific exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.OPERATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize warehouse error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from datawarehouse.logging import get_logger
        logger = get_logger(__name__)
        logger.error(
            message,
            extra={
                "error_code": error_code.value,
                "details": self.details,
            },
            exc_info=cause is not None,
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: str,
        **kwargs
    ) -> "DWError":
        """Create exception from error code.

        Args:
            error_code: Error code
            message: Error message
            **kwargs: Additional arguments for DWError

        Returns:
            DWError instance
        """
        return cls(message=message, error_code=error_code, **kwargs)


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> DWError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        DWError with CONFIG_ERROR code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return DWError(
        message=message,
        error_code=ErrorCode.CONFIG_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    **kwargs
) -> DWError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value
        **kwargs: Additional error details

    Returns:
        DWError with VALIDATION_ERROR code
    """
    details = kwargs.get('details', {})
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return DWError(
        message=message,
        error_code=ErrorCode.VALIDATION_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def missing_columns_error(
    table_name: str,
    missing: Any,
    **kwargs
) -> DWError:
    """Create an error for a source rowset lacking required columns."""
    details = kwargs.get('details', {})
    details["table_name"] = table_name
    details["missing_columns"] = sorted(missing)

    return DWError(
        message=f"Table '{table_name}' is missing required columns: {', '.join(sorted(missing))}",
        error_code=ErrorCode.MISSING_COLUMN,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def resource_not_found_error(
    message: str,
    resource_type: Optional[str] = None,
    resource_name: Optional[str] = None,
    **kwargs
) -> DWError:
    """Create a resource not found error.

    Args:
        message: Error message
        resource_type: Type of resource (table, file, etc.)
        resource_name: Name of the missing resource
        **kwargs: Additional error details

    Returns:
        DWError with TABLE_NOT_FOUND code for tables, RESOURCE_NOT_FOUND otherwise
    """
    details = kwargs.get('details', {})
    if resource_type:
        details["resource_type"] = resource_type
    if resource_name:
        details["resource_name"] = resource_name

    error_code = ErrorCode.TABLE_NOT_FOUND if resource_type == "table" else ErrorCode.RESOURCE_NOT_FOUND
    return DWError(
        message=message,
        error_code=error_code,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def source_read_error(
    table_name: str,
    original_error: Exception,
    **kwargs
) -> DWError:
    """Create an error for a Bronze table that could not be read.

    Args:
        table_name: Qualified name of the source table
        original_error: The underlying exception
        **kwargs: Additional error details

    Returns:
        DWError with SOURCE_READ_ERROR code
    """
    details = kwargs.get('details', {})
    details["table_name"] = table_name

    return DWError(
        message=f"Failed to read source table {table_name}: {str(original_error)}",
        error_code=ErrorCode.SOURCE_READ_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def load_error(
    table_name: str,
    original_error: Exception,
    **kwargs
) -> DWError:
    """Create an error for a target table that could not be replaced.

    Args:
        table_name: Qualified name of the target table
        original_error: The underlying exception
        **kwargs: Additional error details

    Returns:
        DWError with LOAD_ERROR code
    """
    details = kwargs.get('details', {})
    details["table_name"] = table_name

    return DWError(
        message=f"Failed to load table {table_name}: {str(original_error)}",
        error_code=ErrorCode.LOAD_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def transformation_error(
    entity: str,
    original_error: Exception,
    **kwargs
) -> DWError:
    """Create an error for an entity transform that raised unexpectedly."""
    details = kwargs.get('details', {})
    details["entity"] = entity

    return DWError(
        message=f"Transformation of {entity} failed: {str(original_error)}",
        error_code=ErrorCode.TRANSFORMATION_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )


def layer_processing_error(
    layer: str,
    failed_steps: Any,
    **kwargs
) -> DWError:
    """Create an error summarizing the failed steps of a layer run.

    Args:
        layer: Layer that was processed
        failed_steps: Names of the steps that failed
        **kwargs: Additional error details

    Returns:
        DWError with LAYER_PROCESSING_ERROR code
    """
    details = kwargs.get('details', {})
    details["layer"] = layer
    details["failed_steps"] = list(failed_steps)

    return DWError(
        message=f"{layer} load finished with failed steps: {', '.join(failed_steps)}",
        error_code=ErrorCode.LAYER_PROCESSING_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def data_quality_error(layer: str, failed_checks: Any, **kwargs) -> DWError:
    """Create an error for ERROR-severity quality checks that did not pass."""
    details = kwargs.get('details', {})
    details["layer"] = layer
    details["failed_checks"] = list(failed_checks)

    return DWError(
        message=f"{layer} quality checks failed: {', '.join(failed_checks)}",
        error_code=ErrorCode.DATA_QUALITY_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )
