import logging
import random
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from redis.asyncio import Redis
from starlette.middleware.cors import CORSMiddleware

from kitten_deck.errors import StoreUnavailable
from kitten_deck.load_settings import (
    allowed_origins,
    log_level,
    redis_db,
    redis_host,
    redis_port,
    redis_socket_timeout,
    snapshot_interval_seconds,
)
from kitten_deck.manager import ConnectionManager
from kitten_deck.player_locks import PlayerLockManager
from kitten_deck.routers import game
from kitten_deck.services.deck_lifecycle import DeckLifecycleManager
from kitten_deck.services.draw_resolver import DrawResolver
from kitten_deck.services.session_query import SessionQuery
from kitten_deck.stores.deck_store import DeckStore
from kitten_deck.stores.status_store import StatusStore

logging.basicConfig(level=log_level)


def create_redis() -> Redis:
    return Redis(
        host=redis_host,
        port=redis_port,
        db=redis_db,
        decode_responses=True,
        socket_timeout=redis_socket_timeout,
        socket_connect_timeout=redis_socket_timeout,
        health_check_interval=30,
    )


async def broadcast_snapshot(app: FastAPI) -> None:
    """Push every player's status to the connected websockets.

    Runs on the scheduler, so it never shares a lock with draws; a failed
    snapshot is logged and skipped until the next run.
    """
    manager: ConnectionManager = app.state.connection_manager
    if not manager.active_connections:
        return
    try:
        users_data = await app.state.session_query.snapshot()
    except StoreUnavailable as e:
        logging.error(f"Error fetching users data from Redis: {e}")
        return
    await manager.broadcast(users_data)


def create_app(redis: Redis | None = None, rng: random.Random | None = None) -> FastAPI:
    """Build the application.

    Args:
        redis (Redis | None): Store client; created from settings when omitted
            and then closed on shutdown
        rng (random.Random | None): Random source shared by shuffles and draws

    Returns:
        FastAPI: Application with routes, CORS and the snapshot scheduler
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.info("Starting server...")
        client = redis if redis is not None else create_redis()
        random_source = rng if rng is not None else random.Random()

        locks = PlayerLockManager()
        deck_store = DeckStore(client)
        status_store = StatusStore(client)
        lifecycle = DeckLifecycleManager(deck_store, locks, random_source)
        app.state.lifecycle = lifecycle
        app.state.draw_resolver = DrawResolver(
            deck_store, status_store, lifecycle, locks, random_source
        )
        app.state.session_query = SessionQuery(status_store)
        app.state.connection_manager = ConnectionManager()

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            broadcast_snapshot,
            "interval",
            seconds=snapshot_interval_seconds,
            args=[app],
        )
        scheduler.start()
        try:
            yield
        finally:
            scheduler.shutdown(wait=False)
            if redis is None:
                await client.aclose()
            logging.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
    )
    app.include_router(game.game_router)
    return app


app = create_app()


# if __name__ == "__main__":
#     uvicorn.run(app, host="localhost", port=8080)
