import logging
from typing import Dict, List

from redis.asyncio import Redis
from redis.exceptions import RedisError

from kitten_deck.errors import StoreUnavailable

STATUS_KEY_PREFIX = "user:"
DEFUSE_FIELD = "defuse"


def status_key(player_id: str) -> str:
    return f"{STATUS_KEY_PREFIX}{player_id}"


def player_id_from_status_key(key: str) -> str:
    return key[len(STATUS_KEY_PREFIX):]


class StatusStore:
    """Redis hash per player holding status fields such as the defuse flag."""

    def __init__(self, redis: Redis):
        self.redis: Redis = redis

    async def get_field(self, player_id: str, field: str) -> str | None:
        """Read one status field

        Args:
            player_id (str): To identify the status record
            field (str): Field name, e.g. "defuse"

        Returns:
            str | None: Stored value, None if the field or record is absent
        """
        try:
            return await self.redis.hget(status_key(player_id), field)
        except RedisError as e:
            logging.error(f"Error retrieving {field} status for user {player_id}: {e}")
            raise StoreUnavailable("get_field", e) from e

    async def set_field(self, player_id: str, field: str, value: str | int) -> None:
        try:
            await self.redis.hset(status_key(player_id), field, value)
        except RedisError as e:
            logging.error(f"Error saving {field} status for user {player_id}: {e}")
            raise StoreUnavailable("set_field", e) from e

    async def delete(self, player_id: str) -> None:
        try:
            await self.redis.delete(status_key(player_id))
        except RedisError as e:
            logging.error(f"Error deleting user data for user {player_id}: {e}")
            raise StoreUnavailable("delete", e) from e

    async def get_all_fields(self, key: str) -> Dict[str, str]:
        """Read a whole status record by its raw key, as returned by scan_keys"""
        try:
            return await self.redis.hgetall(key)
        except RedisError as e:
            logging.error(f"Error fetching data for key {key}: {e}")
            raise StoreUnavailable("get_all_fields", e) from e

    async def scan_keys(self) -> List[str]:
        """List every status key with SCAN instead of blocking KEYS"""
        try:
            return [
                key async for key in self.redis.scan_iter(match=f"{STATUS_KEY_PREFIX}*")
            ]
        except RedisError as e:
            logging.error(f"Error fetching user keys: {e}")
            raise StoreUnavailable("scan_keys", e) from e
