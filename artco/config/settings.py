"""
Settings Module for Artco

Every tunable of the engine, its probers, logging and the status
server, read from ARTCO_* environment variables or a .env file.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from artco.config.constants import Defaults


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class MonitoringSettings(BaseSettingsConfig):
    """
    Monitoring Engine Configuration Settings

    Controls the polling cadence, worker shutdown and the
    watchers registered by the bundled application.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARTCO_MONITOR_",
        env_file=".env",
        extra="ignore"
    )

    # Scheduler cadence
    ping_interval_millis: int = Field(
        default=Defaults.PING_INTERVAL_MILLIS,
        gt=0,
        description="Milliseconds between two polling passes"
    )
    timeout_until_first_ping: int = Field(
        default=Defaults.TIMEOUT_UNTIL_FIRST_PING,
        ge=0,
        description="Milliseconds to wait before the first polling pass"
    )

    # Worker lifecycle
    worker_terminate_timeout: float = Field(
        default=Defaults.WORKER_TERMINATE_TIMEOUT,
        ge=0,
        description="Seconds to wait for a worker thread to exit on terminate"
    )

    # HTTP prober defaults
    http_request_timeout_millis: Optional[int] = Field(
        default=None,
        gt=0,
        description="Request timeout applied to HTTP probers (None = no timeout)"
    )
    user_agent: str = Field(
        default=Defaults.USER_AGENT,
        description="User-Agent header sent by HTTP probers"
    )

    # Watchers registered by the application entry point
    echo_enabled: bool = Field(
        default=True,
        description="Register the built-in echo watcher"
    )
    http_targets: Dict[str, str] = Field(
        default_factory=dict,
        description="Mapping of identity -> URL for HTTP watchers"
    )
    tcp_targets: Dict[str, str] = Field(
        default_factory=dict,
        description="Mapping of identity -> host:port for TCP watchers"
    )
    minimum_repoll_interval_millis: Optional[int] = Field(
        default=None,
        gt=0,
        description="Minimum interval between two pings of one watcher"
    )


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings

    Controls the loguru sinks installed by setup_logging().
    """

    model_config = SettingsConfigDict(
        env_prefix="ARTCO_LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )

    # Console output
    console_enabled: bool = Field(
        default=True,
        description="Enable console logging"
    )
    colorize: bool = Field(
        default=True,
        description="Colorize console output"
    )

    # File output
    file_enabled: bool = Field(
        default=False,
        description="Enable file logging"
    )
    file_path: Path = Field(
        default=Path("logs/artco.log"),
        description="Log file path"
    )
    file_rotation: str = Field(
        default="10 MB",
        description="Log file rotation size or interval"
    )
    file_retention: str = Field(
        default="7 days",
        description="How long rotated log files are kept"
    )
    serialize: bool = Field(
        default=False,
        description="Write the log file as JSON lines"
    )

    # Error logging (separate file for errors)
    error_file_enabled: bool = Field(
        default=False,
        description="Enable separate error log file"
    )
    error_file_path: Path = Field(
        default=Path("logs/errors.log"),
        description="Error log file path"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept lower-case level names from the environment."""
        if isinstance(v, str):
            return v.upper()
        return v


class StatusServerSettings(BaseSettingsConfig):
    """
    Status Server Configuration Settings

    The status server exposes the latest snapshot of every watcher.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARTCO_STATUS_",
        env_file=".env",
        extra="ignore"
    )

    enabled: bool = Field(
        default=False,
        description="Start the HTTP status server"
    )
    host: str = Field(
        default=Defaults.STATUS_HOST,
        description="Status server bind address"
    )
    port: int = Field(
        default=Defaults.STATUS_PORT,
        ge=1,
        le=65535,
        description="Status server port"
    )


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARTCO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application info
    app_name: str = Field(
        default="Artco",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Nested settings
    monitoring: MonitoringSettings = Field(
        default_factory=MonitoringSettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )
    status: StatusServerSettings = Field(
        default_factory=StatusServerSettings
    )


class StartupConfiguration(BaseModel):
    """
    Configuration accepted by ``Artco.start()``.

    Fields left out fall back to the defaults instead of
    being dropped.
    """

    ping_interval_millis: float = Field(
        default=Defaults.PING_INTERVAL_MILLIS,
        gt=0,
        description="Milliseconds between two polling passes"
    )
    timeout_until_first_ping: float = Field(
        default=Defaults.TIMEOUT_UNTIL_FIRST_PING,
        ge=0,
        description="Milliseconds to wait before the first polling pass"
    )

    @classmethod
    def from_settings(cls, settings: MonitoringSettings) -> "StartupConfiguration":
        return cls(
            ping_interval_millis=settings.ping_interval_millis,
            timeout_until_first_ping=settings.timeout_until_first_ping,
        )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, built once from the environment."""
    return Settings()
