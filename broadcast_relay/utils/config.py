"""Broadcast Relay configuration

Unified configuration for the hub and the peer. Supports environment
variables, defaults and runtime updates.
Priority: command line > environment > defaults
"""

import os
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from ..exceptions import UsageError


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise UsageError(
            f"Invalid value for {name}: {raw!r}", {"variable": name, "value": raw}
        ) from None


@dataclass
class RelayConfig:
    """Broadcast relay configuration

    Holds the options of both run modes. The port is shared: the hub listens
    on it and the peer connects to it.
    """

    # Network
    port: int = 8080
    hub_host: str = ""
    peer_host: str = "localhost"
    scheme: str = "ws"

    # WebSocket
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 20.0
    close_timeout: Optional[float] = 10.0
    max_size: Optional[int] = 2**20

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    enable_rich_logging: bool = True

    custom: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Create a configuration from environment variables

        ``PORT`` sets the shared port, every other option is read from
        ``RELAY_<NAME>``.

        Returns:
            Configuration read from the environment

        Raises:
            UsageError: a numeric variable could not be parsed
        """
        config = cls()

        config.port = _env_number("PORT", config.port, int)
        config.hub_host = os.getenv("RELAY_HUB_HOST", config.hub_host)
        config.peer_host = os.getenv("RELAY_PEER_HOST", config.peer_host)
        config.scheme = os.getenv("RELAY_SCHEME", config.scheme)

        config.ping_interval = _env_number(
            "RELAY_PING_INTERVAL", config.ping_interval, float
        )
        config.ping_timeout = _env_number(
            "RELAY_PING_TIMEOUT", config.ping_timeout, float
        )
        config.close_timeout = _env_number(
            "RELAY_CLOSE_TIMEOUT", config.close_timeout, float
        )
        config.max_size = _env_number("RELAY_MAX_SIZE", config.max_size, int)

        config.log_level = os.getenv("RELAY_LOG_LEVEL", config.log_level)
        config.log_file = os.getenv("RELAY_LOG_FILE", config.log_file)
        config.enable_rich_logging = (
            os.getenv("RELAY_ENABLE_RICH_LOGGING", "true").lower() == "true"
        )

        return config

    @property
    def peer_url(self) -> str:
        """Address the peer connects to"""
        return f"{self.scheme}://{self.peer_host}:{self.port}"

    def transport_options(self) -> Dict[str, Any]:
        """Keyword arguments shared by ``websockets.serve`` and ``websockets.connect``"""
        return {
            "ping_interval": self.ping_interval,
            "ping_timeout": self.ping_timeout,
            "close_timeout": self.close_timeout,
            "max_size": self.max_size,
        }

    def update(self, **kwargs) -> None:
        """Update configuration values

        ``None`` values are ignored so unset command line flags keep the
        environment value.

        Args:
            **kwargs: values to update
        """
        for key, value in kwargs.items():
            if value is None:
                continue
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                self.custom[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value

        Args:
            key: option name
            default: value returned when the option is unknown

        Returns:
            The option value
        """
        if hasattr(self, key):
            return getattr(self, key)
        return self.custom.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary

        Returns:
            Dictionary form of the configuration
        """
        result = {
            "port": self.port,
            "hub_host": self.hub_host,
            "peer_host": self.peer_host,
            "scheme": self.scheme,
            "ping_interval": self.ping_interval,
            "ping_timeout": self.ping_timeout,
            "close_timeout": self.close_timeout,
            "max_size": self.max_size,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "enable_rich_logging": self.enable_rich_logging,
        }

        result.update(self.custom)
        return result
