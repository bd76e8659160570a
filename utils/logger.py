"""
Logging utilities for the Event Media API.
"""
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_logger(name, level=None):
    """
    Create and configure a logger with the given name.

    Args:
        name (str): The name for the logger.
        level (str, optional): Log level name; defaults to the LOG_LEVEL
            environment variable or INFO.

    Returns:
        logging.Logger: Configured logger instance.
    """
    level = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Modules call get_logger at import; only attach the handler once
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def set_level(level):
    """Apply a log level to every logger created through get_logger."""
    level = level.upper()
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and logger.handlers and not logger.propagate:
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)
