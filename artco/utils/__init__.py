"""
Utilities Package for Artco

Logging, elapsed-time measurement, formatting helpers and
target validation.
"""

from artco.utils.logger import get_logger, setup_logging
from artco.utils.clock import Clock, now_millis
from artco.utils.helpers import TimeHelper, StringHelper
from artco.utils.validators import URLValidator

__all__ = [
    "get_logger",
    "setup_logging",
    "Clock",
    "now_millis",
    "TimeHelper",
    "StringHelper",
    "URLValidator",
]
