"""
Tests for the configuration module.
"""

import pytest

from church_office.config import AppSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    """Tests for the application settings."""

    def test_defaults(self, monkeypatch):
        """Test the settings used when nothing is configured."""
        monkeypatch.delenv("DEBUG_MODE", raising=False)
        monkeypatch.delenv("APP_ENVIRONMENT", raising=False)
        settings = AppSettings()

        assert settings.debug_mode is False
        assert settings.app_environment == "development"
        assert settings.church_name == "Dashboard Iglesia"

    def test_debug_mode_from_environment(self, monkeypatch):
        """Test debug mode and environment are read from variables."""
        monkeypatch.setenv("DEBUG_MODE", "true")
        monkeypatch.setenv("APP_ENVIRONMENT", "production")

        settings = get_settings().app
        assert settings.debug_mode is True
        assert settings.app_environment == "production"


class TestValidateAllSettings:
    """Tests for the startup status check."""

    def test_missing_database_url(self, monkeypatch):
        """Test an unconfigured database is reported with its error."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        status = validate_all_settings()

        assert status["database"] is False
        assert "url" in status["database_error"].lower()
        assert status["session"] is True
        assert status["app"] is True

    def test_configured_database(self, monkeypatch):
        """Test a configured database passes."""
        monkeypatch.setenv("DATABASE_URL", "sqlite:///iglesia.db")
        assert validate_all_settings()["database"] is True

    def test_malformed_database_url(self, monkeypatch):
        """Test a value that is not a URL."""
        monkeypatch.setenv("DATABASE_URL", "iglesia")
        status = validate_all_settings()

        assert status["database"] is False
        assert "Not a database URL" in status["database_error"]
