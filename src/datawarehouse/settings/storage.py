"""Warehouse storage configuration settings."""

from typing import Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from datawarehouse.constants import Layer


class StorageSettings(BaseSettings):
    """Where the Bronze, Silver and Gold tables live.

    By default all layers share one SQLite database and tables are
    disambiguated with a layer prefix (``silver_crm_cust_info``). Setting
    ``use_schemas`` switches to schema-qualified names
    (``silver.crm_cust_info``) for engines that support schemas.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite:///datawarehouse.db",
        description="SQLAlchemy database URL of the warehouse"
    )
    bronze_schema: str = Field(default="bronze", description="Schema or table prefix for the Bronze layer")
    silver_schema: str = Field(default="silver", description="Schema or table prefix for the Silver layer")
    gold_schema: str = Field(default="gold", description="Schema or table prefix for the Gold layer")
    use_schemas: bool = Field(
        default=False,
        description="Qualify tables with database schemas instead of layer prefixes"
    )
    chunk_size: int = Field(
        default=10_000,
        ge=1,
        le=1_000_000,
        description="Rows per batch for bulk inserts"
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or "://" not in v:
            raise ValueError(f"Invalid database URL: {v!r}. Expected e.g. 'sqlite:///datawarehouse.db'")
        return v

    @property
    def layer_schemas(self) -> Dict[str, str]:
        return {
            Layer.BRONZE.value: self.bronze_schema,
            Layer.SILVER.value: self.silver_schema,
            Layer.GOLD.value: self.gold_schema,
        }
