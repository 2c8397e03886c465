import logging
from asyncio import Lock
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from kitten_deck.errors import DrawConflict


class PlayerLockManager:
    def __init__(self):
        self.locks: Dict[str, Lock] = {}  # one Lock per player_id
        self.user_counts: Dict[str, int] = {}  # holders and waiters per player_id
        self.lock = Lock()  # protects access to locks and user_counts

    async def get_lock(self, player_id: str) -> Lock:
        """Get the Lock of the specified player and register the caller as a user

        Every call must be paired with release_lock().

        Args:
            player_id (str): Player identity

        Returns:
            Lock: Lock serializing this player's deck mutations
        """
        async with self.lock:
            if player_id not in self.locks:
                self.locks[player_id] = Lock()
                self.user_counts[player_id] = 0
            self.user_counts[player_id] += 1
            return self.locks[player_id]

    async def release_lock(self, player_id: str):
        """Unregister a user, deleting the player's Lock once nobody holds or waits on it

        Args:
            player_id (str): Player identity
        """
        async with self.lock:
            self.user_counts[player_id] -= 1
            if self.user_counts[player_id] == 0:
                del self.user_counts[player_id]
                del self.locks[player_id]

    @asynccontextmanager
    async def hold(self, player_id: str) -> AsyncIterator[None]:
        """Hold the player's Lock, waiting for any current holder to finish"""
        player_lock = await self.get_lock(player_id)
        try:
            async with player_lock:
                yield
        finally:
            await self.release_lock(player_id)

    @asynccontextmanager
    async def hold_exclusive(self, player_id: str) -> AsyncIterator[None]:
        """Hold the player's Lock, failing instead of waiting if it is taken

        Args:
            player_id (str): Player identity

        Raises:
            DrawConflict: Another coroutine holds the player's Lock
        """
        player_lock = await self.get_lock(player_id)
        try:
            # No await between the check and acquire(), so nothing can slip in.
            if player_lock.locked():
                logging.info(f"Rejecting concurrent draw for user: {player_id}")
                raise DrawConflict(player_id)
            async with player_lock:
                yield
        finally:
            await self.release_lock(player_id)
