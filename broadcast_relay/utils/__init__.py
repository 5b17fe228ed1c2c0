"""Broadcast Relay utilities

Infrastructure support:
- configuration (RelayConfig)
- logging (configure_logging, get_logger)
"""

from .config import RelayConfig

from .logger import (
    get_logger,
    configure_logging,
)

__all__ = [
    # configuration
    "RelayConfig",
    # logging
    "get_logger",
    "configure_logging",
]
