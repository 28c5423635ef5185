"""
============================================================================
ARTCO - LOGGING UTILITY
============================================================================
Loguru based logging with console, rotating file and error file sinks.

Modules obtain a named logger through ``get_logger("Name")``; the sinks
are installed once by ``setup_logging()`` from the application entry
point. Until then loguru's default stderr sink is used.
============================================================================
"""

import sys
from typing import Optional

from loguru import logger

from artco.config.settings import LoggingSettings, get_settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure logging sinks.

    Replaces every existing loguru sink with the ones described by
    *settings* (defaults to the cached application settings).
    """
    settings = settings or get_settings().logging

    # Remove default loguru handler
    logger.remove()
    logger.configure(extra={"name": "artco"})

    log_level = settings.level.value

    # Console Handler
    if settings.console_enabled:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=log_level,
            colorize=settings.colorize,
            backtrace=True,
            diagnose=False,
        )

    # File Handler
    if settings.file_enabled:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.file_path,
            format=FILE_FORMAT,
            level=log_level,
            rotation=settings.file_rotation,
            retention=settings.file_retention,
            compression="zip",
            serialize=settings.serialize,
            backtrace=True,
            diagnose=False,
        )

    # Error log file (separate file for errors)
    if settings.error_file_enabled:
        settings.error_file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.error_file_path,
            format=FILE_FORMAT,
            level="ERROR",
            rotation="1 day",
            retention=settings.file_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.bind(name="Logging").info(
        f"Logging system initialized (level={log_level}, "
        f"console={settings.console_enabled}, file={settings.file_enabled})"
    )


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name, rendered in every record

    Returns:
        Logger instance
    """
    return logger.bind(name=name or "artco")
