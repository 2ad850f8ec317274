"""
Logging configuration for the reading_sources package.

Every stage logs through a child of the "reading_sources" logger, so one call
to setup_logger() (done by the CLI, or by a host application) controls the
whole package.
"""

import logging
import sys
from typing import Optional, Union


def setup_logger(
    name: str = "reading_sources",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level, as a number or a name like "DEBUG" (default: INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    # Handlers are only installed once; later calls just adjust the level
    # (the CLI calls this again after reading --log-level).
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    # Format: timestamp - module - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "reading_sources.orchestrator") inherit the package
    logger's handlers and level, and their name shows which stage or which
    source adapter produced each message.

    Args:
        module_name: Name of the module (e.g., 'orchestrator', 'sources.mangapill')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"reading_sources.{module_name}")
