from datetime import datetime

import pytest

from docare.infrastructure.realtime.connection_manager import ConnectionManager


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


@pytest.mark.asyncio
async def test_send_to_online_user():
    cm = ConnectionManager()
    ws = FakeWebSocket()
    cm.connect("u1", ws)
    stamp = datetime(2024, 1, 1, 12, 0)
    assert await cm.send_to_user("u1", "message:received", {"at": stamp}) is True
    assert ws.sent == [{"event": "message:received", "data": {"at": "2024-01-01T12:00:00"}}]


@pytest.mark.asyncio
async def test_send_to_offline_user_is_noop():
    cm = ConnectionManager()
    assert await cm.send_to_user("ghost", "x", {}) is False


@pytest.mark.asyncio
async def test_failed_send_drops_connection():
    cm = ConnectionManager()
    cm.connect("u1", FakeWebSocket(fail=True))
    assert await cm.send_to_user("u1", "x", {}) is False
    assert not cm.is_online("u1")


@pytest.mark.asyncio
async def test_broadcast_skips_excluded():
    cm = ConnectionManager()
    a, b, c = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
    cm.connect("a", a)
    cm.connect("b", b)
    cm.connect("c", c)
    assert await cm.broadcast("presence:changed", {"user_id": "a"}, exclude=["a"]) == 2
    assert a.sent == []
    assert len(b.sent) == 1 and len(c.sent) == 1


def test_reconnect_replaces_socket_and_ignores_stale_disconnect():
    cm = ConnectionManager()
    old, new = FakeWebSocket(), FakeWebSocket()
    assert cm.connect("u1", old) is None
    assert cm.connect("u1", new) is old
    cm.disconnect("u1", old)
    assert cm.is_online("u1")
    cm.disconnect("u1", new)
    assert cm.online_users() == []
