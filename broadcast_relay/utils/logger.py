"""Broadcast Relay logging

Console logging goes through rich, with an optional plain log file. Only
the package root logger ("broadcast_relay") carries handlers; module
loggers are its children and inherit them.
"""

import logging
import sys
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER = "broadcast_relay"


def configure_logging(
    name: Optional[str] = ROOT_LOGGER,
    level: Optional[str] = "info",
    log_file: Optional[str] = None,
    enable_rich: Optional[bool] = True,
) -> logging.Logger:
    """Configure a logger

    Args:
        name: logger name
        level: log level name
        log_file: optional log file path
        enable_rich: use the rich console handler instead of a plain stream

    Returns:
        The configured logger
    """
    level = (level or "INFO").upper()
    enable_rich = enable_rich if enable_rich is not None else True

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Reconfiguring replaces handlers instead of stacking them
    logger.handlers.clear()

    default_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if enable_rich:
        rich_handler = RichHandler(
            rich_tracebacks=True, show_time=True, show_level=True, show_path=False
        )
        rich_handler.setLevel(level)
        logger.addHandler(rich_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(default_format))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(default_format))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a logger

    Args:
        name: logger name, normally a dotted child of "broadcast_relay"

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
