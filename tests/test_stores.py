import pytest

from kitten_deck.errors import StoreUnavailable
from kitten_deck.stores.deck_store import deck_key
from kitten_deck.stores.player_records import delete_player_records
from kitten_deck.stores.status_store import player_id_from_status_key, status_key

pytestmark = pytest.mark.asyncio


async def test_key_shapes():
    assert deck_key("alice") == "deck:alice"
    assert status_key("alice") == "user:alice"
    assert player_id_from_status_key("user:alice") == "alice"


async def test_remove_one_takes_a_single_occurrence(deck_store):
    await deck_store.push_many("alice", ["Cat", "Defuse", "Cat"])

    assert await deck_store.remove_one("alice", "Cat") == 1
    assert await deck_store.get_all("alice") == ["Defuse", "Cat"]
    assert await deck_store.remove_one("alice", "Shuffle") == 0


async def test_replace_overwrites_previous_cards(deck_store):
    await deck_store.push_many("alice", ["Cat", "Cat", "Cat"])
    await deck_store.replace("alice", ["Shuffle", "Defuse"])

    assert await deck_store.get_all("alice") == ["Shuffle", "Defuse"]


async def test_delete_deck_and_status(deck_store, status_store):
    await deck_store.push_many("alice", ["Cat"])
    await status_store.set_field("alice", "defuse", 1)

    await deck_store.delete("alice")
    await status_store.delete("alice")

    assert await deck_store.get_all("alice") == []
    assert await status_store.get_field("alice", "defuse") is None


async def test_delete_player_records_removes_both_keys(redis_client, deck_store, status_store):
    await deck_store.push_many("alice", ["Cat"])
    await status_store.set_field("alice", "defuse", 0)
    await deck_store.push_many("bob", ["Cat"])

    await delete_player_records(redis_client, "alice")

    assert await redis_client.exists("deck:alice", "user:alice") == 0
    assert await deck_store.get_all("bob") == ["Cat"]


async def test_scan_keys_only_lists_status_records(deck_store, status_store):
    await deck_store.push_many("alice", ["Cat"])
    await status_store.set_field("alice", "defuse", 1)
    await status_store.set_field("bob", "defuse", 0)

    assert sorted(await status_store.scan_keys()) == ["user:alice", "user:bob"]


async def test_store_errors_are_wrapped(monkeypatch, redis_client, deck_store, status_store, store_down):
    monkeypatch.setattr(redis_client, "lrange", store_down("lrange"))
    monkeypatch.setattr(redis_client, "hset", store_down("hset"))

    with pytest.raises(StoreUnavailable) as excinfo:
        await deck_store.get_all("alice")
    assert excinfo.value.operation == "get_all"

    with pytest.raises(StoreUnavailable):
        await status_store.set_field("alice", "defuse", 1)


async def test_push_many_if_absent_only_fills_a_missing_deck(deck_store):
    assert await deck_store.push_many_if_absent("alice", ["Cat", "Defuse"]) is True
    assert await deck_store.push_many_if_absent("alice", ["Shuffle"]) is False
    assert await deck_store.get_all("alice") == ["Cat", "Defuse"]


async def test_push_many_if_absent_wraps_store_errors(failing_pipeline, deck_store):
    with pytest.raises(StoreUnavailable) as excinfo:
        await deck_store.push_many_if_absent("alice", ["Cat"])
    assert excinfo.value.operation == "push_many_if_absent"
