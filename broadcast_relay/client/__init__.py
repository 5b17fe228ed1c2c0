"""
Client module

Interactive peer for a broadcast hub
"""

from .peer import PeerClient, make_display_console, CLIENT_EXIT_CODE, CLIENT_EXIT_REASON
from .lines import StdinLineSource

__all__ = [
    "PeerClient",
    "make_display_console",
    "CLIENT_EXIT_CODE",
    "CLIENT_EXIT_REASON",
    "StdinLineSource",
]
