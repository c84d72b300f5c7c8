"""Tests for environment-driven settings."""

import logging

import pytest
from pydantic import ValidationError

from restadmin.errors import ConfigurationError
from restadmin.settings import AdminEnv, RestAdminSettings


class TestFromEnv:
    """Tests for reading RESTADMIN_* variables."""

    def test_defaults(self):
        """Test defaults with no variables set."""
        settings = RestAdminSettings.from_env({})

        assert settings.env == AdminEnv.DEVELOPMENT
        assert settings.api_url is None
        assert settings.http_timeout == 30.0
        assert settings.strict_identifiers is True
        assert settings.log_level == "INFO"
        assert settings.log_dir is None

    def test_values(self):
        """Test every variable is read."""
        settings = RestAdminSettings.from_env(
            {
                "RESTADMIN_ENV": "prod",
                "RESTADMIN_API_URL": "http://api.test",
                "RESTADMIN_HTTP_TIMEOUT": "2.5",
                "RESTADMIN_STRICT_IDENTIFIERS": "false",
                "RESTADMIN_LOG_LEVEL": "debug",
                "RESTADMIN_LOG_DIR": "/tmp/logs",
            }
        )

        assert settings.is_production
        assert settings.api_url == "http://api.test"
        assert settings.http_timeout == 2.5
        assert settings.strict_identifiers is False
        assert settings.log_level == "DEBUG"
        assert settings.log_level_number == logging.DEBUG
        assert settings.log_dir == "/tmp/logs"

    def test_env_aliases(self):
        """Test environment name aliases."""
        assert RestAdminSettings.from_env({"RESTADMIN_ENV": "testing"}).env == AdminEnv.TEST
        assert RestAdminSettings.from_env({"RESTADMIN_ENV": "dev"}).env == AdminEnv.DEVELOPMENT

    def test_unknown_env_warns(self, caplog):
        """Test an unknown environment warns and falls back."""
        with caplog.at_level(logging.WARNING):
            settings = RestAdminSettings.from_env({"RESTADMIN_ENV": "staging"})

        assert settings.env == AdminEnv.DEVELOPMENT
        assert "staging" in caplog.text

    def test_non_boolean_strict_keeps_default(self, caplog):
        """Test a non-boolean strict flag keeps the default."""
        with caplog.at_level(logging.WARNING):
            settings = RestAdminSettings.from_env({"RESTADMIN_STRICT_IDENTIFIERS": "maybe"})

        assert settings.strict_identifiers is True
        assert "STRICT_IDENTIFIERS" in caplog.text

    def test_reads_os_environ(self, monkeypatch):
        """Test os.environ is read by default."""
        monkeypatch.setenv("RESTADMIN_API_URL", "http://from-env.test")

        assert RestAdminSettings.from_env().api_url == "http://from-env.test"


class TestValidation:
    """Tests for settings validation."""

    def test_invalid_log_level(self):
        """Test an unknown log level is rejected."""
        with pytest.raises(ValidationError):
            RestAdminSettings(log_level="LOUD")

    def test_invalid_timeout(self):
        """Test a non-positive timeout is rejected."""
        with pytest.raises(ValidationError):
            RestAdminSettings(http_timeout=0)

    def test_invalid_timeout_from_env(self):
        """Test a non-numeric timeout variable is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            RestAdminSettings.from_env({"RESTADMIN_HTTP_TIMEOUT": "abc"})

        assert "http_timeout" in str(exc_info.value)

    def test_invalid_log_level_from_env(self):
        """Test an unknown log level variable is a configuration error."""
        with pytest.raises(ConfigurationError):
            RestAdminSettings.from_env({"RESTADMIN_LOG_LEVEL": "LOUD"})
