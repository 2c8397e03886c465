import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from kitten_deck.errors import StoreUnavailable

pytestmark = pytest.mark.asyncio


async def test_snapshot_without_players(session_query):
    assert await session_query.snapshot() == []


async def test_snapshot_lists_every_status_record(session_query, status_store, deck_store):
    await status_store.set_field("alice", "defuse", 1)
    await status_store.set_field("bob", "defuse", 0)
    await deck_store.push_many("carol", ["Cat"])

    users_data = await session_query.snapshot()

    assert sorted(users_data, key=lambda u: u["username"]) == [
        {"defuse": "1", "username": "alice"},
        {"defuse": "0", "username": "bob"},
    ]


async def test_snapshot_skips_unreadable_records(
    monkeypatch, redis_client, session_query, status_store
):
    await status_store.set_field("alice", "defuse", 1)
    await status_store.set_field("bob", "defuse", 1)
    hgetall = redis_client.hgetall

    async def flaky_hgetall(key):
        if key == "user:bob":
            raise RedisConnectionError("bob unreachable")
        return await hgetall(key)

    monkeypatch.setattr(redis_client, "hgetall", flaky_hgetall)

    assert await session_query.snapshot() == [{"defuse": "1", "username": "alice"}]


async def test_snapshot_fails_when_keys_cannot_be_listed(monkeypatch, redis_client, session_query):
    def failing_scan_iter(*args, **kwargs):
        raise RedisConnectionError("scan refused")

    monkeypatch.setattr(redis_client, "scan_iter", failing_scan_iter)

    with pytest.raises(StoreUnavailable):
        await session_query.snapshot()
