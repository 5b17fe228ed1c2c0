"""Hub WebSocket server"""

import websockets
from typing import Optional
from websockets.exceptions import ConnectionClosedError

from .manager import Connection, ConnectionSet, Payload
from ..exceptions import BindError, TransportError
from ..utils import get_logger

# Close code sent to every client when the hub shuts down ("going away")
SHUTDOWN_CLOSE_CODE = 1001
SHUTDOWN_CLOSE_REASON = "Server shutting down"


class HubServer:
    """Broadcast hub

    Accepts any number of WebSocket clients and relays every message it
    receives, unchanged, to all connected clients including the sender.
    """

    def __init__(
        self,
        host: str = "",
        port: int = 8080,
        ping_interval: Optional[float] = 20.0,
        ping_timeout: Optional[float] = 20.0,
        close_timeout: Optional[float] = 10.0,
        max_size: Optional[int] = 2**20,
    ):
        self.host = host
        self.port = port
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.close_timeout = close_timeout
        self.max_size = max_size

        self.connections = ConnectionSet()

        self.server = None
        self.running = False

        self.logger = get_logger("broadcast_relay.hub.server")

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when started with port 0"""
        if not self.server:
            return None
        for sock in self.server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self) -> None:
        """Start listening

        Raises:
            BindError: the port could not be bound
        """
        if self.running:
            self.logger.warning("Hub is already running")
            return

        try:
            self.server = await websockets.serve(
                self._handle_client,
                self.host or None,
                self.port,
                ping_interval=self.ping_interval,
                ping_timeout=self.ping_timeout,
                close_timeout=self.close_timeout,
                max_size=self.max_size,
            )
        except OSError as e:
            self.logger.error(f"Failed to bind port {self.port}: {e}")
            raise BindError(
                f"Cannot listen on {self.host or '*'}:{self.port}: {e.strerror or e}",
                {"host": self.host, "port": self.port, "errno": e.errno},
            ) from e

        self.running = True
        self.logger.info(
            f"Broadcast server started, listening on ws://{self.host or 'localhost'}:{self.bound_port}"
        )

    async def stop(
        self, code: int = SHUTDOWN_CLOSE_CODE, reason: str = SHUTDOWN_CLOSE_REASON
    ) -> None:
        """Close every client, then the listener"""
        if not self.running:
            return

        self.logger.info("Shutting down server...")
        self.running = False

        try:
            closing = await self.connections.close_all(code, reason)
            self.logger.debug(f"Requested close on {closing} connection(s)")

            if self.server:
                self.server.close()
                await self.server.wait_closed()
                self.server = None

            self.logger.info("Server has closed.")

        except Exception as e:
            self.logger.error(f"Error while stopping server: {e}")

    async def _handle_client(self, websocket) -> None:
        """Run one client connection from accept to close

        Args:
            websocket: accepted WebSocket connection
        """
        connection = Connection(websocket)
        self.on_connect(connection)

        try:
            async for payload in websocket:
                await self.on_message(connection, payload)

        except ConnectionClosedError as e:
            self.on_error(
                connection, TransportError(f"connection closed abnormally: {e}")
            )
        except Exception as e:
            self.on_error(connection, TransportError(f"connection failed: {e}"))

        finally:
            self.on_close(connection)

    # -------- connection events --------

    def on_connect(self, connection: Connection) -> None:
        self.connections.add(connection)
        self.logger.info(
            f"New client connected: {connection.remote_address}. "
            f"Total clients: {len(self.connections)}"
        )

    async def on_message(self, connection: Connection, payload: Payload) -> None:
        """Relay one inbound message to every open member

        Args:
            connection: sender
            payload: message body, never parsed
        """
        self.logger.debug(f"Received from {connection.remote_address}: {payload!r}")
        delivered = await self.connections.broadcast(payload)
        self.logger.info(
            f"Relayed message from {connection.remote_address} to {delivered} client(s)"
        )

    def on_close(self, connection: Connection) -> None:
        if self.connections.discard(connection):
            self.logger.info(
                f"Client disconnected: {connection.remote_address}. "
                f"Total clients: {len(self.connections)}"
            )

    def on_error(self, connection: Connection, error: Exception) -> None:
        self.logger.error(f"WebSocket error on {connection.remote_address}: {error}")
        self.on_close(connection)

    def get_stats(self) -> dict:
        """Get server statistics

        Returns:
            Statistics dictionary
        """
        return {
            "server": {
                "running": self.running,
                "host": self.host,
                "port": self.bound_port or self.port,
            },
            "connections": {
                "total": len(self.connections),
                "open": len(self.connections.open_members()),
            },
        }


async def start_hub_server(host: str = "", port: int = 8080, **options) -> HubServer:
    """Create and start a hub

    Args:
        host: listen address, empty for all interfaces
        port: listen port
        **options: transport options passed to HubServer

    Returns:
        Running hub instance
    """
    server = HubServer(host, port, **options)
    await server.start()
    return server
