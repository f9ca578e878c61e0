from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DWBaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    environment: str = Field(
        default="dev",
        description="Deployment environment (e.g., dev, qa, prod, local). Added to every log record."
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level used by setup_logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
