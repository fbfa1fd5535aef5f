"""Structured logging configuration."""

import logging
import sys

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL
}


def setup_logging(level: str = "INFO", format_type: str = "structured") -> logging.Logger:
    """Setup logging for the which engine and return its package logger."""
    log_level = LEVELS.get(level.upper(), logging.INFO)

    if format_type == "structured":
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        formatter = logging.Formatter(
            '%(levelname)s - %(message)s'
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logger = logging.getLogger('which_core')
    logger.setLevel(log_level)

    return logger
