from types import SimpleNamespace

import pytest

from kitten_deck.errors import StoreUnavailable
from kitten_deck.main import broadcast_snapshot
from kitten_deck.manager import ConnectionManager

pytestmark = pytest.mark.asyncio


class RecordingSocket:
    def __init__(self):
        self.sent = []

    async def accept(self):
        pass

    async def send_json(self, message):
        self.sent.append(message)


class BrokenSessionQuery:
    async def snapshot(self):
        raise StoreUnavailable("scan_keys", RuntimeError("down"))


def make_app(session_query, manager):
    return SimpleNamespace(
        state=SimpleNamespace(session_query=session_query, connection_manager=manager)
    )


async def test_broadcast_snapshot_pushes_statuses(session_query, status_store):
    await status_store.set_field("alice", "defuse", 1)
    manager = ConnectionManager()
    socket = RecordingSocket()
    await manager.connect(socket)

    await broadcast_snapshot(make_app(session_query, manager))

    assert socket.sent == [[{"defuse": "1", "username": "alice"}]]


async def test_broadcast_snapshot_skips_a_failed_snapshot():
    manager = ConnectionManager()
    socket = RecordingSocket()
    await manager.connect(socket)

    await broadcast_snapshot(make_app(BrokenSessionQuery(), manager))

    assert socket.sent == []
    assert manager.active_connections == [socket]
