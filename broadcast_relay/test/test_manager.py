#!/usr/bin/env python3
"""Tests for the hub connection set and the hub callbacks

Connections are backed by small fakes so membership and fanout can be
checked without sockets.
"""

import asyncio

from websockets import State

from broadcast_relay.hub import Connection, ConnectionSet, HubServer


class FakeWebSocket:
    """Minimal stand-in for a server side websocket"""

    def __init__(self, name: str, state: State = State.OPEN, fail: bool = False):
        self.remote_address = (name, 0)
        self.state = state
        self.fail = fail
        self.sent = []
        self.closed_with = None

    async def send(self, payload):
        if self.fail:
            raise ConnectionResetError("connection reset by peer")
        self.sent.append(payload)

    async def close(self, code=1000, reason=""):
        self.closed_with = (code, reason)
        self.state = State.CLOSED


def make_members(count, **kwargs):
    return [Connection(FakeWebSocket(f"peer{i}", **kwargs)) for i in range(count)]


def test_add_and_discard():
    """Set size follows joins and leaves"""
    members = ConnectionSet()
    joined = make_members(5)
    for connection in joined:
        members.add(connection)

    assert len(members) == 5

    assert members.discard(joined[0]) is True
    assert members.discard(joined[0]) is False
    assert len(members) == 4
    assert joined[0] not in members
    assert joined[1] in members


def test_broadcast_reaches_every_open_member():
    """Every open member, sender included, gets exactly one copy"""
    members = ConnectionSet()
    joined = make_members(3)
    for connection in joined:
        members.add(connection)

    delivered = asyncio.run(members.broadcast("hello"))

    assert delivered == 3
    for connection in joined:
        assert connection.websocket.sent == ["hello"]


def test_broadcast_keeps_payload_type():
    members = ConnectionSet()
    connection = Connection(FakeWebSocket("peer"))
    members.add(connection)

    asyncio.run(members.broadcast(b"\x00\xffraw"))

    assert connection.websocket.sent == [b"\x00\xffraw"]


def test_broadcast_skips_members_not_open():
    members = ConnectionSet()
    open_member = Connection(FakeWebSocket("open"))
    closing = Connection(FakeWebSocket("closing", state=State.CLOSING))
    closed = Connection(FakeWebSocket("closed", state=State.CLOSED))
    for connection in (open_member, closing, closed):
        members.add(connection)

    delivered = asyncio.run(members.broadcast("hi"))

    assert delivered == 1
    assert open_member.websocket.sent == ["hi"]
    assert closing.websocket.sent == []
    assert closed.websocket.sent == []


def test_broadcast_isolates_send_failures():
    """A failing member neither raises nor stops delivery to the others"""
    members = ConnectionSet()
    healthy = make_members(2)
    broken = Connection(FakeWebSocket("broken", fail=True))
    for connection in healthy + [broken]:
        members.add(connection)

    delivered = asyncio.run(members.broadcast("hi"))

    assert delivered == 2
    for connection in healthy:
        assert connection.websocket.sent == ["hi"]
    # Removal is left to the member's own close callback
    assert broken in members


def test_broadcast_on_empty_set():
    assert asyncio.run(ConnectionSet().broadcast("nobody")) == 0


def test_close_all():
    members = ConnectionSet()
    joined = make_members(3)
    already_closed = Connection(FakeWebSocket("gone", state=State.CLOSED))
    for connection in joined + [already_closed]:
        members.add(connection)

    asked = asyncio.run(members.close_all(1001, "Server shutting down"))

    assert asked == 3
    for connection in joined:
        assert connection.websocket.closed_with == (1001, "Server shutting down")
    assert already_closed.websocket.closed_with is None


def test_hub_callbacks_remove_once():
    """on_error followed by on_close removes the connection a single time"""
    hub = HubServer("127.0.0.1", 0)
    first, second = make_members(2)
    hub.on_connect(first)
    hub.on_connect(second)
    assert len(hub.connections) == 2

    hub.on_error(first, ConnectionResetError("reset"))
    assert len(hub.connections) == 1

    hub.on_close(first)
    hub.on_close(first)
    assert len(hub.connections) == 1
    assert second in hub.connections


def test_hub_echoes_to_single_sender():
    """A lone member still receives its own message"""
    hub = HubServer("127.0.0.1", 0)
    sender = Connection(FakeWebSocket("only"))
    hub.on_connect(sender)

    asyncio.run(hub.on_message(sender, "hello"))

    assert sender.websocket.sent == ["hello"]


def test_hub_messages_keep_order_per_member():
    hub = HubServer("127.0.0.1", 0)
    joined = make_members(3)
    for connection in joined:
        hub.on_connect(connection)

    async def relay_all():
        for index in range(5):
            await hub.on_message(joined[0], f"msg{index}")

    asyncio.run(relay_all())

    expected = [f"msg{index}" for index in range(5)]
    for connection in joined:
        assert connection.websocket.sent == expected


def test_hub_stats():
    hub = HubServer("127.0.0.1", 0)
    hub.on_connect(Connection(FakeWebSocket("a")))
    hub.on_connect(Connection(FakeWebSocket("b", state=State.CLOSING)))

    stats = hub.get_stats()

    assert stats["server"]["running"] is False
    assert stats["connections"] == {"total": 2, "open": 1}
