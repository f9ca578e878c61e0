from typing import FrozenSet

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProcessingSettings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="PROCESSING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    time_zone: str = Field(
        default="UTC",
        description="Time zone used for the load timestamp and the 'today' used by birth-date checks"
    )

    max_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Number of entities loaded concurrently. 1 loads them one after another."
    )

    persist_run_log: bool = Field(
        default=True,
        description="Append run-log events to the run-log table in the Silver layer"
    )

    run_log_table: str = Field(
        default="load_log",
        description="Name of the run-log table within the Silver layer"
    )

    disabled_entities: str = Field(
        default="",
        description="Comma-separated Silver tables or step names to skip (e.g. 'erp_loc_a101,LOAD_CRM_SALES')"
    )

    @field_validator('time_zone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate that the timezone is valid."""
        try:
            pytz.timezone(v)
            return v
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}. Use pytz timezone names like 'Europe/Berlin'")

    @field_validator('run_log_table')
    @classmethod
    def validate_run_log_table(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Run-log table name cannot be empty")
        return v.strip()

    @property
    def disabled_entity_set(self) -> FrozenSet[str]:
        """Disabled entity names, stripped, empty items dropped."""
        return frozenset(item.strip() for item in self.disabled_entities.split(",") if item.strip())
