"""
Configuration management for ShiftLedger.

Runtime configuration (where the data lives, which timezone calendar days
are evaluated in, logging) comes from the environment and an optional .env
file. Business settings such as pay rates and the site directory are data,
loaded from settings.json and passed explicitly to each computation.
"""

import datetime as dt
from pathlib import Path
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PAY_FREQUENCIES = ("weekly", "bi-weekly", "semi-monthly", "monthly")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_CHOICES = {
    "default_pay_frequency": PAY_FREQUENCIES,
    "log_format": ("standard", "json"),
    "environment": ("development", "testing", "production"),
}


def _one_of(value: str, choices: Tuple[str, ...], name: str) -> str:
    if value not in choices:
        raise ValueError(f"{name} must be one of: {', '.join(choices)}")
    return value


class ShiftLedgerConfig(BaseSettings):
    """Configuration settings for ShiftLedger."""

    # Data Configuration
    data_dir: Path = Field(default=Path("data"), alias="SHIFTLEDGER_DATA_DIR")
    timezone: str = Field(default="UTC", alias="TIMEZONE")
    default_pay_frequency: str = Field(
        default="monthly", alias="DEFAULT_PAY_FREQUENCY"
    )

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="standard", alias="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Ensure the timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("default_pay_frequency", "log_format", "environment")
    @classmethod
    def validate_lowercase_choice(cls, v, info: ValidationInfo):
        return _one_of(v.lower(), _CHOICES[info.field_name], info.field_name)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        return _one_of(v.upper(), LOG_LEVELS, "log_level")

    @property
    def tz(self) -> dt.tzinfo:
        """The configured timezone as a tzinfo."""
        return ZoneInfo(self.timezone)


def load_config(env_file: Optional[str] = None) -> ShiftLedgerConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return ShiftLedgerConfig()


# Global configuration instance
_config: Optional[ShiftLedgerConfig] = None


def get_config() -> ShiftLedgerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> ShiftLedgerConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
