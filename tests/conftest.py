import random

import pytest
from fakeredis import FakeAsyncRedis, FakeRedis, FakeServer
from redis.exceptions import ConnectionError as RedisConnectionError

from kitten_deck.player_locks import PlayerLockManager
from kitten_deck.services.deck_lifecycle import DeckLifecycleManager
from kitten_deck.services.draw_resolver import DrawResolver
from kitten_deck.services.session_query import SessionQuery
from kitten_deck.stores.deck_store import DeckStore
from kitten_deck.stores.status_store import StatusStore


@pytest.fixture()
def redis_server():
    return FakeServer()


@pytest.fixture()
def redis_client(redis_server):
    return FakeAsyncRedis(server=redis_server, decode_responses=True)


@pytest.fixture()
def sync_redis(redis_server):
    # Same data as redis_client, for seeding from synchronous tests
    return FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def locks():
    return PlayerLockManager()


@pytest.fixture()
def deck_store(redis_client):
    return DeckStore(redis_client)


@pytest.fixture()
def status_store(redis_client):
    return StatusStore(redis_client)


@pytest.fixture()
def lifecycle(deck_store, locks, rng):
    return DeckLifecycleManager(deck_store, locks, rng)


@pytest.fixture()
def draw_resolver(deck_store, status_store, lifecycle, locks, rng):
    return DrawResolver(deck_store, status_store, lifecycle, locks, rng)


@pytest.fixture()
def session_query(status_store):
    return SessionQuery(status_store)


@pytest.fixture()
def store_down():
    """Build an async replacement for a client method that always fails"""

    def factory(name):
        async def failing(*args, **kwargs):
            raise RedisConnectionError(f"{name} refused")

        return failing

    return factory


@pytest.fixture()
def failing_pipeline(monkeypatch, redis_client, store_down):
    """Make EXEC of every pipeline the client opens fail"""
    real_pipeline = redis_client.pipeline

    def pipeline(*args, **kwargs):
        pipe = real_pipeline(*args, **kwargs)
        pipe.execute = store_down("execute")
        return pipe

    monkeypatch.setattr(redis_client, "pipeline", pipeline)
