"""Configuration settings using Pydantic with environment variables."""
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .models import AppConfig, NotificationConfig, ScheduleConfig, ScraperConfig

logger = logging.getLogger(__name__)

REQUIRED_VARIABLES = ("BOT_TOKEN", "CHAT_ID")

# environment variable -> Settings field
ENV_FIELDS: Dict[str, str] = {
    "BOT_TOKEN": "bot_token",
    "CHAT_ID": "chat_id",
    "MATCH_PAGE_URL": "page_url",
    "CHECK_INTERVAL_MINUTES": "check_interval",
    "OPERATIONAL_INTERVAL_HOURS": "operational_interval",
    "REQUEST_TIMEOUT": "request_timeout",
    "RETRY_DELAY": "retry_delay",
    "LOG_LEVEL": "log_level",
}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    """Application settings with validation."""

    # Required settings
    bot_token: str = Field(..., description="Telegram bot token")
    chat_id: str = Field(..., description="The only chat allowed to talk to the bot")

    # Optional settings with defaults
    page_url: str = Field(
        "https://fckairat.com/match",
        description="Match page to watch",
    )
    check_interval: float = Field(
        2.0,
        description="Minutes between status checks",
    )
    operational_interval: float = Field(
        3.0,
        description="Hours between operational notifications",
    )
    request_timeout: float = Field(
        10.0,
        description="Timeout in seconds for fetching the match page",
    )
    retry_delay: float = Field(
        2.0,
        description="Delay in seconds before the single retry of a failed fetch",
    )
    log_level: str = Field(
        "INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("bot_token", "chat_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("page_url")
    @classmethod
    def validate_page_url(cls, v: str) -> str:
        """Validate match page URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("MATCH_PAGE_URL must start with http:// or https://")
        return v

    @field_validator("check_interval", "operational_interval", "request_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL is a valid logging level."""
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}")
        return v.upper()

    def to_app_config(self) -> AppConfig:
        return AppConfig(
            scraper=ScraperConfig(
                page_url=self.page_url,
                timeout=self.request_timeout,
                retry_delay=self.retry_delay,
            ),
            notification=NotificationConfig(
                bot_token=self.bot_token,
                chat_id=self.chat_id,
            ),
            schedule=ScheduleConfig(
                check_interval=self.check_interval,
                operational_interval=self.operational_interval,
            ),
            log_level=self.log_level,
        )


def missing_variables(environ: Mapping[str, str]) -> list:
    """Names of the required variables that are unset or blank."""
    return [name for name in REQUIRED_VARIABLES if not environ.get(name, "").strip()]


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Settings:
    """Load settings from the environment.

    Args:
        environ: Variables to read. Defaults to ``os.environ`` after loading
            the ``.env`` file.
        env_file: Path of the ``.env`` file; defaults to ``./.env``.

    Raises:
        ConfigError: A required variable is missing or a value is invalid.
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file or Path(".") / ".env")
        environ = os.environ

    missing = missing_variables(environ)
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}",
            missing=missing,
        )

    values = {
        field: environ[name]
        for name, field in ENV_FIELDS.items()
        if environ.get(name, "").strip()
    }
    try:
        return Settings(**values)
    except ValidationError as e:
        errors = "; ".join(
            f"{_env_name(err['loc'][0])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {errors}") from e


def _env_name(field: object) -> str:
    for name, candidate in ENV_FIELDS.items():
        if candidate == field:
            return name
    return str(field)


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load the application configuration from the environment."""
    return load_settings(environ).to_app_config()
