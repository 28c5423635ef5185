import sys

from loguru import logger

from artco.config.settings import LoggingSettings
from artco.utils.logger import get_logger, setup_logging


def test_file_sink_records_bound_name(tmp_path):
    log_file = tmp_path / "logs" / "artco.log"
    error_file = tmp_path / "logs" / "errors.log"
    settings = LoggingSettings(
        console_enabled=False,
        file_enabled=True,
        file_path=log_file,
        error_file_enabled=True,
        error_file_path=error_file,
        level="debug",
    )
    try:
        setup_logging(settings)
        get_logger("Scheduler").debug("polling pass done")
        get_logger("Artco").error("worker failed")
    finally:
        logger.remove()
        logger.add(sys.stderr)

    content = log_file.read_text()
    assert "Scheduler" in content
    assert "polling pass done" in content

    errors = error_file.read_text()
    assert "worker failed" in errors
    assert "polling pass done" not in errors
