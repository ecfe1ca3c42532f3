"""
Logging Configuration
Sets up the 'companion' logger from arguments or the environment.

Environment:
    COMPANION_LOG_LEVEL: Level name (debug, info, ...), default info.
    COMPANION_LOG_FILE: Optional path of a log file, truncated on start.
"""
import logging
import os
import sys
from typing import Optional

from companion.config import LOG_FILE_ENV, LOG_LEVEL_ENV

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'


def level_from_name(name: Optional[str], default: int = logging.INFO) -> int:
    """Resolve a level name such as 'debug' to its logging constant."""
    if not name:
        return default
    value = getattr(logging, name.strip().upper(), None)
    return value if isinstance(value, int) else default


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger of the 'companion' namespace and returns it.

    Args:
        level: Logging level. Read from COMPANION_LOG_LEVEL when omitted.
        log_file: Path of a log file. Read from COMPANION_LOG_FILE when omitted;
            an empty value means console only.
    """
    if level is None:
        level = level_from_name(os.environ.get(LOG_LEVEL_ENV))
    if log_file is None:
        log_file = os.environ.get(LOG_FILE_ENV) or None

    logger = logging.getLogger("companion")
    logger.setLevel(level)

    # re-running replaces the handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging initialized at {logging.getLevelName(level)}"
                + (f", writing to {log_file}." if log_file else "."))
    return logger
