"""
Logging configuration.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from oas_runner.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "oas_runner.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Libraries that log every request they make
QUIET_LOGGERS = ("urllib3", "httpx", "faker")

_installed_handlers = []


def setup_logging(log_dir=None, level=None):
    """
    Configure application logging.

    Safe to call more than once: handlers installed by an earlier call are
    replaced, so a changed LOG_DIR or LOG_LEVEL takes effect.

    Args:
        log_dir: Directory for the rotating log file (defaults to settings.LOG_DIR)
        level: Level name (defaults to settings.LOG_LEVEL)

    Returns:
        Path of the log file
    """
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = RotatingFileHandler(
        log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
    )
    stream_handler = logging.StreamHandler(sys.stdout)

    root = logging.getLogger()
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    for handler in (file_handler, stream_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed_handlers.append(handler)

    level_name = (level or settings.LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
