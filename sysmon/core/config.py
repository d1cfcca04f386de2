"""Configuration management using Pydantic Settings.

This module handles loading configuration from environment variables
(prefixed with ``SYSMON_``) and an optional ``.env`` file.
"""

import logging
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sysmon.core.constants import (
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_LOG_FILE_PATH,
)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SYSMON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sampling
    interval_seconds: float = Field(DEFAULT_INTERVAL_SECONDS, description="Sampling interval in seconds")
    disk_path: Optional[str] = Field(None, description="Mount point or drive to measure (platform default if unset)")

    # Sinks
    enable_console_output: bool = Field(True, description="Print snapshots to the console")
    enable_file_logging: bool = Field(True, description="Append snapshots to a log file")
    enable_api_publisher: bool = Field(True, description="POST snapshots to the API endpoint")
    log_file_path: str = Field(DEFAULT_LOG_FILE_PATH, description="File logger output path")
    api_endpoint: str = Field("", description="Remote API endpoint URL")
    api_timeout_seconds: float = Field(DEFAULT_API_TIMEOUT_SECONDS, description="API request timeout in seconds")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    @field_validator("interval_seconds")
    @classmethod
    def check_interval(cls, v: float) -> float:
        """Sampling interval must be strictly positive."""
        if v <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls()
