"""Interactive peer client"""

import asyncio
import websockets
from typing import AsyncIterable, Optional, Union
from rich.console import Console
from websockets import State
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from .lines import StdinLineSource
from ..exceptions import ConnectError, TransportError
from ..shutdown import ShutdownCoordinator
from ..utils import get_logger

CLIENT_EXIT_CODE = 1000
CLIENT_EXIT_REASON = "Client exit"


def make_display_console(**kwargs) -> Console:
    """Console that prints relayed payloads exactly as received"""
    return Console(markup=False, highlight=False, emoji=False, soft_wrap=True, **kwargs)


class PeerClient:
    """Peer connected to a broadcast hub

    Sends every operator line to the hub and prints every message the hub
    relays back. A close from the hub side ends the process normally.
    """

    def __init__(
        self,
        url: str,
        shutdown: ShutdownCoordinator,
        lines: Optional[AsyncIterable[str]] = None,
        console: Optional[Console] = None,
        **transport_options,
    ):
        self.url = url
        self.shutdown = shutdown
        self.lines = lines if lines is not None else StdinLineSource()
        self.console = console or make_display_console()
        self.transport_options = transport_options

        self.websocket = None
        self._receive_task: Optional[asyncio.Task] = None
        self._input_task: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None

        self.logger = get_logger("broadcast_relay.client.peer")

    @property
    def state(self) -> State:
        if self.websocket is None:
            return State.CLOSED
        return self.websocket.state

    async def connect(self) -> None:
        """Open the connection to the hub

        Raises:
            ConnectError: hub unreachable, refused or failed the handshake
        """
        self.logger.info(f"Connecting to hub: {self.url}")
        try:
            self.websocket = await websockets.connect(self.url, **self.transport_options)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self.logger.debug(f"Connection to {self.url} failed: {e}")
            raise ConnectError(
                f"Cannot connect to {self.url}: {e}", {"url": self.url}
            ) from e

    def start(self) -> None:
        """Start the receive loop and the input pump"""
        self.console.print(
            f"Connected to server at {self.url}. Type messages and hit Enter to send."
        )
        self._receive_task = asyncio.ensure_future(self._receive_loop())
        self._input_task = asyncio.ensure_future(self._pump_input())

    async def _pump_input(self) -> None:
        async for line in self.lines:
            await self.send_line(line)
        self.logger.debug("Input exhausted, no more lines will be sent")

    async def send_line(self, line: str) -> bool:
        """Send one operator line, or drop it if the connection is not open

        Returns:
            Whether the line was sent
        """
        if self.state is not State.OPEN:
            self.console.print("Connection is not open. Unable to send message.")
            return False

        try:
            await self.websocket.send(line)
            return True
        except ConnectionClosed as e:
            self.logger.warning(f"Send failed, connection closed: {e}")
            self.console.print("Connection is not open. Unable to send message.")
            return False

    async def _receive_loop(self) -> None:
        try:
            async for payload in self.websocket:
                self.on_message(payload)
        except ConnectionClosedError as e:
            self.on_error(TransportError(f"connection closed abnormally: {e}"))
        except Exception as e:
            self.on_error(TransportError(f"receive failed: {e}"))

        self.on_close(self.websocket.close_code, self.websocket.close_reason)

    # -------- connection events --------

    def on_message(self, payload: Union[str, bytes]) -> None:
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="replace")
        self.console.print(f"> {payload}")

    def on_close(self, code: Optional[int], reason: Optional[str]) -> None:
        self.console.print(
            f"Disconnected from server (code: {code}, reason: {reason or ''})"
        )
        self.shutdown.exit(0)

    def on_error(self, error: Exception) -> None:
        self.logger.error(f"WebSocket error: {error}")

    def close(self, code: int = CLIENT_EXIT_CODE, reason: str = CLIENT_EXIT_REASON) -> None:
        """Start the close handshake without waiting for the hub to answer"""
        self.logger.info("Disconnecting client...")
        if self.state is State.OPEN:
            self._close_task = asyncio.ensure_future(
                self.websocket.close(code=code, reason=reason)
            )
