"""
Logging Configuration

Single place that configures the root logger for applications and
scripts embedding the engine. Library modules only create their own
loggers with ``logging.getLogger(__name__)``.
"""

import logging
from typing import Optional

from .config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging for the engine.

    Args:
        level: Log level name (DEBUG, INFO, ...). Defaults to settings.log_level.

    Returns:
        The ``fourb`` package logger
    """
    level_name = (level or get_settings().log_level).upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, force=True)

    logger = logging.getLogger("fourb")
    logger.setLevel(numeric_level)
    logger.debug(f"Logging configured at {level_name}")
    return logger
