"""
Configuration Package for Artco

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Protocol constants and defaults
"""

from artco.config.settings import (
    Settings,
    MonitoringSettings,
    LoggingSettings,
    StatusServerSettings,
    StartupConfiguration,
    get_settings,
)

from artco.config.constants import (
    ProtocolEvent,
    Defaults,
    Limits,
)

__all__ = [
    # Settings
    "Settings",
    "MonitoringSettings",
    "LoggingSettings",
    "StatusServerSettings",
    "StartupConfiguration",
    "get_settings",

    # Constants
    "ProtocolEvent",
    "Defaults",
    "Limits",
]
