import logging
import random
from typing import List

from kitten_deck.domain.card_rules import build_deck, validate_player_id
from kitten_deck.player_locks import PlayerLockManager
from kitten_deck.stores.deck_store import DeckStore


class DeckLifecycleManager:
    """Creates, resumes and resets a player's deck."""

    def __init__(
        self, deck_store: DeckStore, locks: PlayerLockManager, rng: random.Random
    ):
        self.deck_store: DeckStore = deck_store
        self.locks: PlayerLockManager = locks
        self.rng: random.Random = rng

    async def start_or_resume(self, player_id: str) -> tuple[List[str], bool]:
        """Return the player's current deck, creating a shuffled one if none exists

        Args:
            player_id (str): Player identity

        Returns:
            tuple[List[str], bool]: Deck contents and whether an existing game was resumed
        """
        validate_player_id(player_id)
        logging.info(f"Starting game for user: {player_id}")

        async with self.locks.hold(player_id):
            existing_deck = await self.deck_store.get_all(player_id)
            if existing_deck:
                logging.info(f"Resuming game for user: {player_id}")
                return existing_deck, True

            created = await self.initialize(player_id)
            new_deck = await self.deck_store.get_all(player_id)
        if not created:
            logging.info(f"Resuming game created concurrently for user: {player_id}")
            return new_deck, True
        logging.info(f"Game started for user: {player_id}")
        return new_deck, False

    async def initialize(self, player_id: str) -> bool:
        """Shuffle a default deck and store it unless the player already has one

        Args:
            player_id (str): Player identity

        Returns:
            bool: True if this call stored the deck, False if another one was already there
        """
        logging.info(f"Initializing deck for user: {player_id}")
        cards = build_deck(self.rng)
        created = await self.deck_store.push_many_if_absent(player_id, cards)
        if created:
            logging.info(f"Deck initialized for user: {player_id}")
        return created

    async def reset(self, player_id: str) -> List[str]:
        """Replace whatever is left of the deck with a fresh shuffled one

        Args:
            player_id (str): Player identity

        Returns:
            List[str]: The cards that were stored
        """
        validate_player_id(player_id)
        logging.info(f"Resetting game for user: {player_id}")
        cards = build_deck(self.rng)
        await self.deck_store.replace(player_id, cards)
        logging.info(f"Game reset for user: {player_id} with cards: {cards}")
        return cards
