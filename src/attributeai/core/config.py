"""Configuration management for AttributeAI."""

import json
import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from attributeai.core.exceptions import ConfigurationError
from attributeai.models.attribution import AttributionParams


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    TEXT = "text"


class AttributionConfig(BaseModel):
    """Default attribution parameters used when a caller supplies none."""

    default_half_life_days: float = Field(
        default=7.0, gt=0, description="Time-decay half-life in days"
    )
    position_first_weight: float = Field(
        default=0.4, gt=0, lt=1, description="Position-based credit for the first touch"
    )
    position_last_weight: float = Field(
        default=0.4, gt=0, lt=1, description="Position-based credit for the last touch"
    )
    default_dimension_key: str | None = Field(
        default=None,
        description="Named tag to correlate by (None uses the default tag)",
    )
    unset_dimension_label: str = Field(
        default="(not set)",
        min_length=1,
        description="Bucket for touchpoints without a dimension value",
    )

    @model_validator(mode="after")
    def validate_position_weights(self) -> "AttributionConfig":
        """First and last weights must leave a non-negative middle share."""
        if self.position_first_weight + self.position_last_weight > 1.0 + 1e-9:
            raise ValueError(
                "position_first_weight + position_last_weight must not exceed 1.0"
            )
        return self

    def to_params(self) -> AttributionParams:
        """Build model parameters from the configured defaults."""
        return AttributionParams(
            half_life_days=self.default_half_life_days,
            position_first_weight=self.position_first_weight,
            position_last_weight=self.position_last_weight,
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: LogFormat = LogFormat.JSON
    log_file: Path | None = None


class Settings(BaseSettings):
    """Application settings.

    Environment Variables:
        ATTR_ENVIRONMENT=development
        ATTR_ATTRIBUTION__DEFAULT_HALF_LIFE_DAYS=7
        ATTR_ATTRIBUTION__POSITION_FIRST_WEIGHT=0.4
        ATTR_ATTRIBUTION__POSITION_LAST_WEIGHT=0.4
        ATTR_ATTRIBUTION__DEFAULT_DIMENSION_KEY=weather
        ATTR_LOGGING__LEVEL=INFO
        ATTR_LOGGING__FORMAT=json
        ATTR_LOGGING__LOG_FILE=logs/attributeai.log
    """

    model_config = SettingsConfigDict(
        env_prefix="ATTR_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    attribution: AttributionConfig = Field(default_factory=AttributionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Load settings from environment, reading a .env file first if present."""
        if env_file:
            load_dotenv(env_file)
        else:
            # Try to load .env from project root
            root_dir = Path(__file__).parent.parent.parent.parent
            env_path = root_dir / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings.from_env()
    except (ValidationError, ValueError) as e:
        logging.error(f"Configuration error: {e}")
        raise ConfigurationError(f"Invalid configuration: {e}") from e


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), None)
    if not isinstance(log_level, int):
        raise ConfigurationError(f"Unknown log level: {settings.logging.level}")

    if settings.logging.format == LogFormat.JSON:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler
    if settings.logging.log_file:
        log_path = Path(settings.logging.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
