import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from kitten_deck.errors import StoreUnavailable
from kitten_deck.stores.deck_store import deck_key
from kitten_deck.stores.status_store import status_key


async def delete_player_records(redis: Redis, player_id: str) -> None:
    """Delete the player's deck and status record together.

    A multi-key DEL is a single command, so readers see both keys or neither.

    Args:
        redis (Redis): Redis connection object
        player_id (str): Player to remove
    """
    try:
        await redis.delete(deck_key(player_id), status_key(player_id))
    except RedisError as e:
        logging.error(f"Error deleting deck and user data for user {player_id}: {e}")
        raise StoreUnavailable("delete_player_records", e) from e
