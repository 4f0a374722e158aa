# core/logging_config.py
import logging
from typing import Optional

from core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "maintdesk"


def set_log_level(level_name: str) -> None:
    """Apply a level name such as ``DEBUG``; unknown names fall back to INFO."""
    level = getattr(logging, str(level_name).upper(), None)
    logging.getLogger(LOGGER_NAME).setLevel(level if isinstance(level, int) else logging.INFO)


def setup_logger(level_name: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    set_log_level(level_name or settings.LOG_LEVEL)

    # Avoid duplicate handlers when the app container is rebuilt (tests, reloads)
    if logger.handlers:
        return logger

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    return logger


logger = setup_logger()
