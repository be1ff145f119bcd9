"""
Configuration management module using Pydantic Settings.

Process-wide settings (where data lives, how logs look) come from environment
variables prefixed with ``TERMIN_API_`` or from a ``.env`` file. The per-user
request defaults (timeout, history size, ...) are a separate document kept by
the storage layer.
"""

import os
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from terminapi.constants import DEFAULT_DATA_DIR


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Every field can be overridden with ``TERMIN_API_<FIELD_NAME>``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TERMIN_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Storage
    data_dir: str = Field(
        default=DEFAULT_DATA_DIR,
        description="Root directory for collections, environments, config and history"
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level"
    )
    log_format: Literal["structured", "simple"] = Field(
        default="simple",
        description="Log format type"
    )
    sanitize_logs: bool = Field(
        default=True,
        description="Redact credentials from structured log fields"
    )

    @field_validator("data_dir")
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        """Expand ``~`` and normalize the storage path."""
        return os.path.normpath(os.path.expanduser(v))

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        return v.upper() if isinstance(v, str) else v


# Global settings instance
settings = Settings()
