"""
Hub server module

Connection set management and broadcast fanout:
- server implementation
- connection set
"""

from .server import HubServer, start_hub_server, SHUTDOWN_CLOSE_CODE, SHUTDOWN_CLOSE_REASON
from .manager import ConnectionSet, Connection

__all__ = [
    "HubServer",
    "start_hub_server",
    "SHUTDOWN_CLOSE_CODE",
    "SHUTDOWN_CLOSE_REASON",
    "ConnectionSet",
    "Connection",
]
