"""Hub connection set"""

import asyncio
from typing import Iterator, List, Set, Union

from websockets import State

from ..exceptions import TransportError
from ..utils import get_logger

Payload = Union[str, bytes]


class Connection:
    """One accepted client connection

    Identity is the object itself; two wrappers are never created for the
    same websocket.
    """

    def __init__(self, websocket):
        self.websocket = websocket
        self.remote_address = getattr(websocket, "remote_address", None)

    @property
    def state(self) -> State:
        return self.websocket.state

    @property
    def is_open(self) -> bool:
        return self.websocket.state is State.OPEN

    async def send(self, payload: Payload) -> None:
        """Send one payload unchanged

        Raises:
            TransportError: the frame could not be written
        """
        try:
            await self.websocket.send(payload)
        except Exception as e:
            raise TransportError(
                f"send to {self.remote_address} failed: {e}",
                {"remote_address": str(self.remote_address)},
            ) from e

    async def close(self, code: int, reason: str) -> None:
        await self.websocket.close(code=code, reason=reason)

    def __repr__(self) -> str:
        return f"<Connection {self.remote_address} ({self.state.name})>"


class ConnectionSet:
    """Live connections of a hub

    Members are added when a client is accepted and removed exactly once
    when its handler finishes. Not thread safe: every call is expected on
    the event loop thread.
    """

    def __init__(self):
        self._members: Set[Connection] = set()
        self.logger = get_logger("broadcast_relay.hub.manager")

    def add(self, connection: Connection) -> None:
        self._members.add(connection)

    def discard(self, connection: Connection) -> bool:
        """Remove a connection

        Args:
            connection: connection to remove

        Returns:
            True if it was a member, False if it was already gone
        """
        if connection not in self._members:
            return False
        self._members.remove(connection)
        return True

    def open_members(self) -> List[Connection]:
        return [member for member in self._members if member.is_open]

    async def broadcast(self, payload: Payload) -> int:
        """Send a payload to every open member, the sender included

        Sends run concurrently so one slow member does not hold up the
        rest. A failed send is logged and skipped; the member's own handler
        takes care of removing it.

        Args:
            payload: message to relay, unchanged

        Returns:
            Number of members the payload was delivered to
        """
        targets = self.open_members()
        if not targets:
            return 0

        results = await asyncio.gather(
            *(member.send(payload) for member in targets), return_exceptions=True
        )

        delivered = 0
        for member, result in zip(targets, results):
            if isinstance(result, Exception):
                self.logger.warning(f"Broadcast to {member.remote_address} failed: {result}")
            else:
                delivered += 1
        return delivered

    async def close_all(self, code: int, reason: str) -> int:
        """Start the close handshake on every open member

        Returns:
            Number of members asked to close
        """
        targets = self.open_members()
        results = await asyncio.gather(
            *(member.close(code, reason) for member in targets), return_exceptions=True
        )
        for member, result in zip(targets, results):
            if isinstance(result, Exception):
                self.logger.debug(f"Closing {member.remote_address} failed: {result}")
        return len(targets)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, connection: object) -> bool:
        return connection in self._members

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._members))
