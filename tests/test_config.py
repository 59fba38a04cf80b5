"""Tests for configuration loading."""

import pytest

from expenseshub.config import AppSettings, MongoSettings, get_settings, validate_all_settings


class TestAppSettings:
    """Tests for application settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("APP_TIMEZONE", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.app_timezone == "UTC"
        assert settings.app_name == "expenseshub"
        assert settings.tzinfo.key == "UTC"

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(app_timezone="Mars/Olympus_Mons")

    def test_log_level_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(log_level="chatty")

    def test_cors_origins_list(self):
        settings = AppSettings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("APP_TIMEZONE", "Europe/Madrid")
        assert AppSettings().app_timezone == "Europe/Madrid"


class TestMongoSettings:
    """Tests for MongoDB settings."""

    def test_unconfigured_without_uri(self):
        assert MongoSettings(uri=None).is_configured is False

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
        monkeypatch.setenv("MONGODB_DB_NAME", "expenses_test")

        settings = MongoSettings()

        assert settings.is_configured
        assert settings.db_name == "expenses_test"


class TestValidateAllSettings:
    """Tests for the startup configuration report."""

    @pytest.fixture(autouse=True)
    def fresh_settings(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_reports_missing_database(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "")

        status = validate_all_settings()

        assert status["app"] is True
        assert status["mongo"] is False
        assert status["mongo_error"] == "MONGODB_URI is not set"

    def test_reports_configured_database(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")

        assert validate_all_settings() == {"mongo": True, "app": True}

    def test_reports_invalid_app_settings(self, monkeypatch):
        monkeypatch.setenv("APP_TIMEZONE", "Mars/Olympus_Mons")

        status = validate_all_settings()

        assert status["app"] is False
        assert "app_error" in status
