"""Base model for the warehouse's pydantic types."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class DWBaseModel(BaseModel):
    """Base model shared by the metadata, run-log and quality types.

    Enum fields are stored as their values, so step statuses and check
    severities compare equal to plain strings and land in the JSON log and
    the run-log table without conversion.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_assignment=True
    )

    def to_dict(self, include_none: bool = False) -> Dict[str, Any]:
        """JSON-ready dictionary; dates and timestamps become ISO strings.

        Args:
            include_none: Keep fields whose value is None.
        """
        return self.model_dump(mode="json", exclude_none=not include_none)
