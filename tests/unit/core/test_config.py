"""Unit tests for configuration management."""

import json
import logging
import os

import pytest
from pydantic import ValidationError

from attributeai.core.config import (
    AttributionConfig,
    Environment,
    JsonFormatter,
    LogFormat,
    LoggingConfig,
    Settings,
    get_settings,
    setup_logging,
)
from attributeai.core.exceptions import ConfigurationError
from attributeai.models import AttributionParams


class TestAttributionConfig:
    """Test attribution defaults."""

    def test_defaults(self):
        """Test default values."""
        config = AttributionConfig()

        assert config.default_half_life_days == 7.0
        assert config.position_first_weight == 0.4
        assert config.position_last_weight == 0.4
        assert config.default_dimension_key is None
        assert config.unset_dimension_label == "(not set)"

    def test_to_params(self):
        """Test building model parameters."""
        config = AttributionConfig(default_half_life_days=3.0, position_first_weight=0.3)

        assert config.to_params() == AttributionParams(
            half_life_days=3.0, position_first_weight=0.3, position_last_weight=0.4
        )

    @pytest.mark.parametrize("half_life", [0, -2.5])
    def test_half_life_must_be_positive(self, half_life):
        """Test half-life validation."""
        with pytest.raises(ValidationError):
            AttributionConfig(default_half_life_days=half_life)

    def test_position_weights_must_leave_room(self):
        """Test first and last weights may not exceed 1.0 together."""
        with pytest.raises(ValidationError, match="must not exceed 1.0"):
            AttributionConfig(position_first_weight=0.6, position_last_weight=0.6)


class TestLoggingConfig:
    """Test logging configuration."""

    def test_defaults(self):
        """Test default values."""
        config = LoggingConfig()

        assert config.level == "INFO"
        assert config.format == LogFormat.JSON
        assert config.log_file is None


class TestSettings:
    """Test settings loading."""

    def test_defaults(self, settings):
        """Test settings defaults without environment overrides."""
        assert settings.environment == Environment.DEVELOPMENT
        assert settings.debug is False
        assert settings.attribution == AttributionConfig()
        assert settings.logging.format == LogFormat.JSON

    def test_nested_environment_variables(self, clean_env, monkeypatch):
        """Test nested settings from ATTR_ variables."""
        monkeypatch.setenv("ATTR_ENVIRONMENT", "production")
        monkeypatch.setenv("ATTR_ATTRIBUTION__DEFAULT_HALF_LIFE_DAYS", "3.5")
        monkeypatch.setenv("ATTR_ATTRIBUTION__DEFAULT_DIMENSION_KEY", "weather")
        monkeypatch.setenv("ATTR_LOGGING__FORMAT", "text")

        settings = Settings()

        assert settings.environment == Environment.PRODUCTION
        assert settings.attribution.default_half_life_days == 3.5
        assert settings.attribution.default_dimension_key == "weather"
        assert settings.logging.format == LogFormat.TEXT

    def test_from_env_file(self, clean_env, tmp_path):
        """Test loading variables from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "ATTR_ATTRIBUTION__POSITION_FIRST_WEIGHT=0.3\n"
            "ATTR_LOGGING__LEVEL=DEBUG\n"
        )

        settings = Settings.from_env(env_file)

        assert settings.attribution.position_first_weight == 0.3
        assert settings.logging.level == "DEBUG"
        assert os.environ["ATTR_LOGGING__LEVEL"] == "DEBUG"

    def test_invalid_environment_value(self, clean_env, monkeypatch):
        """Test invalid values fail validation."""
        monkeypatch.setenv("ATTR_ATTRIBUTION__DEFAULT_HALF_LIFE_DAYS", "-1")

        with pytest.raises(ValidationError):
            Settings()


class TestGetSettings:
    """Test cached settings access."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        """Reset the settings cache around each test."""
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_cached(self, clean_env):
        """Test the same instance is returned."""
        assert get_settings() is get_settings()

    def test_configuration_error(self, clean_env, monkeypatch, caplog):
        """Test invalid configuration is logged and raised."""
        monkeypatch.setenv("ATTR_ATTRIBUTION__POSITION_LAST_WEIGHT", "2")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(ConfigurationError):
                get_settings()

        assert "Configuration error" in caplog.text


class TestSetupLogging:
    """Test logging setup."""

    def test_json_formatter(self):
        """Test records are rendered as JSON."""
        record = logging.LogRecord(
            "attributeai.test", logging.WARNING, __file__, 10, "skipped %s", ("C1",), None
        )

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "attributeai.test"
        assert data["message"] == "skipped C1"

    def test_console_only_by_default(self, settings):
        """Test only a console handler is added without a log file."""
        root_logger = logging.getLogger()
        before = len(root_logger.handlers)

        setup_logging(settings)

        added = root_logger.handlers[before:]
        assert len(added) == 1
        assert isinstance(added[0].formatter, JsonFormatter)
        assert root_logger.level == logging.INFO

    def test_file_handler(self, settings, tmp_path):
        """Test a file handler is added when a log file is configured."""
        log_file = tmp_path / "logs" / "attributeai.log"
        configured = settings.model_copy(
            update={
                "logging": LoggingConfig(level="debug", format=LogFormat.TEXT, log_file=log_file)
            }
        )
        root_logger = logging.getLogger()
        before = len(root_logger.handlers)

        setup_logging(configured)
        logging.getLogger("attributeai.test").debug("hello")

        added = root_logger.handlers[before:]
        assert any(isinstance(h, logging.FileHandler) for h in added)
        for handler in added:
            handler.flush()
        assert "hello" in log_file.read_text()

    def test_unknown_level(self, settings):
        """Test an unknown log level is a configuration error."""
        configured = settings.model_copy(update={"logging": LoggingConfig(level="LOUD")})

        with pytest.raises(ConfigurationError):
            setup_logging(configured)
