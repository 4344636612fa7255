import logging
from logging.handlers import RotatingFileHandler
import sys

from app.config import LOG_DIR, LOG_LEVEL

LOG_FILE = LOG_DIR / "attendance.log"

# Main logger; modules log through children of it (see get_logger)
logger = logging.getLogger("attendance_system")

FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def setup_logging(level: str = LOG_LEVEL, log_file=LOG_FILE) -> logging.Logger:
    """
    Attaches the rotating file handler and the console handler to the
    'attendance_system' logger. Safe to call more than once.
    """
    logger.setLevel(getattr(logging, level, logging.INFO))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(FORMAT)

    # Create logs directory if missing
    try:
        log_file.parent.mkdir(exist_ok=True, parents=True)
        # File Handler (rotates when 5MB)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        # Logging isn't set up yet, so report straight to stderr
        print(f"ERROR: Could not create log file at {log_file}: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.info("Logging configuration loaded successfully.")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger, e.g. get_logger("store") -> 'attendance_system.store'."""
    return logger.getChild(name)
