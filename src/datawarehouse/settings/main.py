import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import DWBaseSettings
from .processing import ProcessingSettings
from .storage import StorageSettings

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _Settings(DWBaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Warehouse database configuration"
    )
    processing: ProcessingSettings = Field(
        default_factory=ProcessingSettings,
        description="Silver load processing configuration"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Use one of {', '.join(_LOG_LEVELS)}")
        return level

    def is_entity_disabled(self, target_table: str, step_name: str) -> bool:
        """Check whether an entity is switched off by table or step name."""
        disabled = self.processing.disabled_entity_set
        return target_table in disabled or step_name in disabled


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    Settings are loaded from environment variables and ``.env`` on first
    access. Nested values use ``__`` (``PROCESSING__MAX_WORKERS=4``); the
    storage and processing groups also accept their own prefixes
    (``STORAGE_DATABASE_URL``, ``PROCESSING_TIME_ZONE``).

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists.

    Returns:
        _Settings: The singleton Settings instance
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()
        logging.getLogger(__name__).debug(
            "Loaded settings",
            extra={"environment": _settings.environment, "database_url": _settings.storage.database_url},
        )

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
