"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup with pydantic
- Forgiving parsing: malformed numbers fall back to defaults
"""

import logging
import os
from functools import lru_cache
from typing import Literal, cast

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from dose.services.adherence import DEFAULT_ON_TARGET_THRESHOLD, DEFAULT_WINDOW_DAYS
from dose.services.repository import DEFAULT_EVENTS_KEY, DEFAULT_MEDICATIONS_KEY

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class StorageConfig(BaseModel):
    """Where the two persistence slots live."""

    data_dir: str = Field(default="./data", description="Directory holding the slot files")
    medications_key: str = Field(
        default=DEFAULT_MEDICATIONS_KEY, min_length=1, description="Slot for the registry"
    )
    events_key: str = Field(
        default=DEFAULT_EVENTS_KEY, min_length=1, description="Slot for the dose log"
    )

    @model_validator(mode="after")
    def distinct_keys(self) -> "StorageConfig":
        if self.medications_key == self.events_key:
            raise ValueError("medications and dose log must use different slots")
        return self


class AdherenceConfig(BaseModel):
    """Rolling window and classification thresholds."""

    window_days: int = Field(default=DEFAULT_WINDOW_DAYS, gt=0, description="History length")
    on_target_threshold: int = Field(
        default=DEFAULT_ON_TARGET_THRESHOLD,
        ge=0,
        le=100,
        description="Lowest adherence rate counted as on target",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Logging level")
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    adherence: AdherenceConfig = Field(default_factory=AdherenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> LogLevel:
        v = val.strip().upper()
        return cast(
            LogLevel, v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO"
        )

    def _parse_int(val: str | None, default: int) -> int:
        if val is None:
            return default
        try:
            return int(val.strip())
        except ValueError:
            return default

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    storage_config = StorageConfig(
        data_dir=os.getenv("DOSE_DATA_DIR", "./data"),
        medications_key=os.getenv("DOSE_MEDICATIONS_KEY", DEFAULT_MEDICATIONS_KEY),
        events_key=os.getenv("DOSE_LOGS_KEY", DEFAULT_EVENTS_KEY),
    )

    adherence_config = AdherenceConfig(
        window_days=_parse_int(os.getenv("DOSE_HISTORY_DAYS"), DEFAULT_WINDOW_DAYS),
        on_target_threshold=_parse_int(
            os.getenv("DOSE_ON_TARGET_THRESHOLD"), DEFAULT_ON_TARGET_THRESHOLD
        ),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        storage=storage_config,
        adherence=adherence_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def configure_logging(config: LoggingConfig) -> None:
    """Route structlog through stdlib logging with the configured renderer."""
    logging.basicConfig(level=config.level, format="%(message)s", force=True)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level} ({config.logging.format})")

    print("\nSTORAGE")
    print(f"Data Directory: {config.storage.data_dir}")
    print(f"Slots: {config.storage.medications_key}, {config.storage.events_key}")

    print("\nADHERENCE")
    print(f"History Window: {config.adherence.window_days} days")
    print(f"On-Target Threshold: {config.adherence.on_target_threshold}%")


if __name__ == "__main__":
    print_config_summary()
