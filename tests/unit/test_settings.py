"""Unit tests for the settings layer."""

import pytest
from pydantic import ValidationError

from datawarehouse.settings import ProcessingSettings, Settings, StorageSettings, _reload_settings, get_settings
from datawarehouse.settings import main as settings_main


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_main, "_settings", None)
    for name in ("STORAGE_DATABASE_URL", "PROCESSING_TIME_ZONE", "PROCESSING_DISABLED_ENTITIES", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestStorageSettings:

    def test_defaults(self, clean_env):
        settings = StorageSettings()
        assert settings.database_url == "sqlite:///datawarehouse.db"
        assert settings.use_schemas is False
        assert settings.layer_schemas == {"bronze": "bronze", "silver": "silver", "gold": "gold"}

    def test_invalid_url_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            StorageSettings(database_url="datawarehouse.db")

    def test_env_prefix(self, clean_env):
        clean_env.setenv("STORAGE_DATABASE_URL", "sqlite:///from-env.db")
        assert StorageSettings().database_url == "sqlite:///from-env.db"


class TestProcessingSettings:

    def test_unknown_timezone_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            ProcessingSettings(time_zone="Mars/Olympus_Mons")

    def test_valid_timezone_is_kept(self, clean_env):
        assert ProcessingSettings(time_zone="Europe/Berlin").time_zone == "Europe/Berlin"

    def test_disabled_entity_set(self, clean_env):
        settings = ProcessingSettings(disabled_entities=" erp_loc_a101, ,LOAD_CRM_SALES ")
        assert settings.disabled_entity_set == frozenset({"erp_loc_a101", "LOAD_CRM_SALES"})

    def test_worker_bounds(self, clean_env):
        with pytest.raises(ValidationError):
            ProcessingSettings(max_workers=0)

    def test_blank_run_log_table_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            ProcessingSettings(run_log_table="  ")


class TestSettings:

    def test_log_level_normalized(self, clean_env):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_is_entity_disabled(self, clean_env):
        settings = Settings(processing=ProcessingSettings(disabled_entities="LOAD_CRM_SALES"))
        assert settings.is_entity_disabled("crm_sales_details", "LOAD_CRM_SALES")
        assert not settings.is_entity_disabled("crm_cust_info", "LOAD_CRM_CUSTOMERS")

    def test_singleton_and_reload(self, clean_env):
        first = get_settings()
        assert get_settings() is first

        clean_env.setenv("PROCESSING_TIME_ZONE", "Europe/Berlin")
        reloaded = _reload_settings()

        assert reloaded is not first
        assert reloaded.processing.time_zone == "Europe/Berlin"
