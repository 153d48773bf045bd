"""
Logging configuration for the HF Propagation Dashboard.

Console output always; a size-rotated log file when one is configured
(production defaults to logs/hf_propagation.log). Chatty third-party loggers
are held at WARNING unless the application itself logs below that.
"""

import logging
import logging.handlers
import os
from typing import List, Optional

from config import get_config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5
NOISY_LOGGERS = ('urllib3', 'werkzeug')


def _resolve_level(level: Optional[str], config) -> int:
    name = (level or config.LOG_LEVEL or ('DEBUG' if config.DEBUG else 'INFO')).upper()
    numeric_level = getattr(logging, name, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {name}")
    return numeric_level


def _build_handlers(numeric_level: int, log_file: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding='utf-8'
        ))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a logger, replacing any handlers it already has.

    Args:
        name: Logger name (root logger when omitted)
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: LOG_LEVEL, then DEBUG/INFO by mode)
        log_file: Rotating log file path (default: LOG_FILE)

    Returns:
        The configured logger
    """
    config = get_config()
    numeric_level = _resolve_level(level, config)
    if log_file is None:
        log_file = config.LOG_FILE

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    for handler in _build_handlers(numeric_level, log_file):
        logger.addHandler(handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    return logger


def get_logger(name: str = __name__) -> logging.Logger:
    """Get a logger, configuring it on first use when nothing above it is."""
    logger = logging.getLogger(name)
    if not logger.handlers and not logging.getLogger().handlers:
        setup_logging(name)
    return logger
