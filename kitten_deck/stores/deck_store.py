import logging
from typing import List

from redis.asyncio import Redis
from redis.exceptions import RedisError, WatchError

from kitten_deck.errors import StoreUnavailable

DECK_KEY_PREFIX = "deck:"


def deck_key(player_id: str) -> str:
    return f"{DECK_KEY_PREFIX}{player_id}"


class DeckStore:
    """Redis list per player holding the cards left in the deck."""

    def __init__(self, redis: Redis):
        self.redis: Redis = redis

    async def get_all(self, player_id: str) -> List[str]:
        """Read every card of the player's deck

        Args:
            player_id (str): To identify the deck

        Returns:
            List[str]: Card values, empty if the deck does not exist
        """
        try:
            return await self.redis.lrange(deck_key(player_id), 0, -1)
        except RedisError as e:
            logging.error(f"Error retrieving deck for user {player_id}: {e}")
            raise StoreUnavailable("get_all", e) from e

    async def push_many(self, player_id: str, cards: List[str]) -> None:
        """Append all cards to the deck with a single RPUSH

        Args:
            player_id (str): To identify the deck
            cards (List[str]): Card values to append
        """
        try:
            await self.redis.rpush(deck_key(player_id), *cards)
        except RedisError as e:
            logging.error(f"Error initializing deck for user {player_id}: {e}")
            raise StoreUnavailable("push_many", e) from e

    async def push_many_if_absent(self, player_id: str, cards: List[str]) -> bool:
        """Store the cards as a new deck only while the player has no deck

        LLEN runs under WATCH, so a deck pushed by another process between the
        check and EXEC aborts this push.

        Args:
            player_id (str): To identify the deck
            cards (List[str]): Card values of the new deck

        Returns:
            bool: True if the cards were stored, False if a deck already existed
        """
        key = deck_key(player_id)
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                if await pipe.llen(key) > 0:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.rpush(key, *cards)
                await pipe.execute()
            return True
        except WatchError:
            logging.info(f"Deck for user {player_id} was created concurrently")
            return False
        except RedisError as e:
            logging.error(f"Error initializing deck for user {player_id}: {e}")
            raise StoreUnavailable("push_many_if_absent", e) from e

    async def remove_one(self, player_id: str, card: str) -> int:
        """Remove one occurrence of the card value from the deck

        Args:
            player_id (str): To identify the deck
            card (str): Card value to remove

        Returns:
            int: 1 if an occurrence was removed, 0 if none was left
        """
        try:
            return await self.redis.lrem(deck_key(player_id), 1, card)
        except RedisError as e:
            logging.error(f"Error removing card from deck for user {player_id}: {e}")
            raise StoreUnavailable("remove_one", e) from e

    async def replace(self, player_id: str, cards: List[str]) -> None:
        """Swap the whole deck for new cards inside one MULTI/EXEC block

        Args:
            player_id (str): To identify the deck
            cards (List[str]): New card values
        """
        key = deck_key(player_id)
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.rpush(key, *cards)
                await pipe.execute()
        except RedisError as e:
            logging.error(f"Error replacing deck for user {player_id}: {e}")
            raise StoreUnavailable("replace", e) from e

    async def delete(self, player_id: str) -> None:
        try:
            await self.redis.delete(deck_key(player_id))
        except RedisError as e:
            logging.error(f"Error deleting deck for user {player_id}: {e}")
            raise StoreUnavailable("delete", e) from e
