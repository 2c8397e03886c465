import logging
from typing import List

from kitten_deck.errors import StoreUnavailable
from kitten_deck.models.game_models import PlayerSnapshot
from kitten_deck.stores.status_store import StatusStore, player_id_from_status_key


class SessionQuery:
    """Read-only view over every player's status record, for the push channel."""

    def __init__(self, status_store: StatusStore):
        self.status_store: StatusStore = status_store

    async def snapshot(self) -> List[PlayerSnapshot]:
        """Collect all player status records

        A record that cannot be read, or that vanished after the key scan, is
        skipped. Failing to list the keys raises StoreUnavailable.

        Returns:
            List[PlayerSnapshot]: Status fields of each player plus its "username"
        """
        users_data: List[PlayerSnapshot] = []
        for key in await self.status_store.scan_keys():
            try:
                user_data = await self.status_store.get_all_fields(key)
            except StoreUnavailable as e:
                logging.warning(f"Skipping {key} in snapshot: {e}")
                continue
            if not user_data:
                continue
            users_data.append(
                {**user_data, "username": player_id_from_status_key(key)}
            )

        logging.debug(f"Fetched user data: {users_data}")
        return users_data
