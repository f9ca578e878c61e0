"""Configuration for the warehouse pipeline.

Settings are read from environment variables and an optional ``.env`` file
through pydantic-settings. Use :func:`get_settings` to obtain the shared
instance.
"""

from .base import DWBaseSettings
from .main import _Settings, _reload_settings, get_settings
from .processing import ProcessingSettings
from .storage import StorageSettings

Settings = _Settings

__all__ = [
    "DWBaseSettings",
    "Settings",
    "StorageSettings",
    "ProcessingSettings",
    "get_settings",
    "_reload_settings",
]
