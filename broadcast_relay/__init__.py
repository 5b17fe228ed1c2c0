"""
Broadcast Relay

Minimal WebSocket broadcast hub and interactive peer
"""

__version__ = "1.0.0"
__description__ = "Minimal bidirectional WebSocket broadcast relay"

from .hub import HubServer, ConnectionSet, Connection, start_hub_server
from .client import PeerClient, StdinLineSource
from .shutdown import ShutdownCoordinator, ShutdownState
from .utils import RelayConfig, configure_logging, get_logger
from .exceptions import (
    RelayError,
    BindError,
    ConnectError,
    TransportError,
    UsageError,
)

__all__ = [
    "__version__",
    "__description__",
    # Hub
    "HubServer",
    "ConnectionSet",
    "Connection",
    "start_hub_server",
    # Peer
    "PeerClient",
    "StdinLineSource",
    # Shutdown
    "ShutdownCoordinator",
    "ShutdownState",
    # Utils
    "RelayConfig",
    "configure_logging",
    "get_logger",
    # Exceptions
    "RelayError",
    "BindError",
    "ConnectError",
    "TransportError",
    "UsageError",
]


def get_version() -> str:
    """Get the current version of broadcast relay."""
    return __version__


# Aliases
Hub = HubServer
Peer = PeerClient
