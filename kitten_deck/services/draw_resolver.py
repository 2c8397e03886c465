import logging
import random

from kitten_deck.domain.card_rules import CardKind, lookup_card, validate_player_id
from kitten_deck.errors import DrawConflict, EmptyDeck
from kitten_deck.models.game_models import DrawOutcome
from kitten_deck.player_locks import PlayerLockManager
from kitten_deck.services.deck_lifecycle import DeckLifecycleManager
from kitten_deck.stores.deck_store import DeckStore
from kitten_deck.stores.player_records import delete_player_records
from kitten_deck.stores.status_store import DEFUSE_FIELD, StatusStore

CAT_MESSAGE = "You drew a Cat card! One Cat card has been removed from your deck."
DEFUSE_MESSAGE = "You drew a Defuse card! Keep this to defuse an Exploding Kitten."
SHUFFLE_MESSAGE = "You drew a Shuffle card! The deck is reshuffled."
DEFUSED_MESSAGE = "You defused the Exploding Kitten using your Defuse card!"
EXPLODED_MESSAGE = "You drew an Exploding Kitten! You lose!"


class DrawResolver:
    """Draws one card for a player and applies its effect.

    A draw holds the player's lock for its whole read-remove-apply sequence.
    A second draw arriving meanwhile fails with DrawConflict rather than
    queueing, and a removal that finds the card already gone (another process
    took it) fails the same way before any effect is applied. Re-creating an
    empty deck only stores cards while the deck is still absent, so two
    processes never stack two decks.
    """

    def __init__(
        self,
        deck_store: DeckStore,
        status_store: StatusStore,
        lifecycle: DeckLifecycleManager,
        locks: PlayerLockManager,
        rng: random.Random,
    ):
        self.deck_store: DeckStore = deck_store
        self.status_store: StatusStore = status_store
        self.lifecycle: DeckLifecycleManager = lifecycle
        self.locks: PlayerLockManager = locks
        self.rng: random.Random = rng

    async def draw(self, player_id: str) -> DrawOutcome:
        """Draw a random card from the player's deck and resolve it

        Args:
            player_id (str): Player identity

        Raises:
            EmptyDeck: The deck was empty; a fresh deck has been stored for the next draw
            DrawConflict: A concurrent draw for the same player won
            StoreUnavailable: A read or an effect write failed

        Returns:
            DrawOutcome: Drawn kind, symbol, message and whether the game ended
        """
        validate_player_id(player_id)
        logging.info(f"User {player_id} is drawing a card")

        async with self.locks.hold_exclusive(player_id):
            deck = await self.deck_store.get_all(player_id)
            if not deck:
                await self.lifecycle.initialize(player_id)
                logging.info(f"No cards left in the deck for user: {player_id}")
                raise EmptyDeck(player_id)

            drawn_card = self.rng.choice(deck)
            logging.info(f"User {player_id} drew card: {drawn_card}")

            removed = await self.deck_store.remove_one(player_id, drawn_card)
            if removed == 0:
                logging.warning(
                    f"Card {drawn_card} was already taken from the deck of user: {player_id}"
                )
                raise DrawConflict(player_id)

            return await self._apply_effect(player_id, drawn_card)

    async def _apply_effect(self, player_id: str, drawn_card: str) -> DrawOutcome:
        card = lookup_card(drawn_card)
        if card is None:
            logging.warning(f"Card {drawn_card} is not in the catalog, treating it as a Cat")
            return DrawOutcome(kind=drawn_card, symbol="", message=CAT_MESSAGE)

        logging.info(f"Handling card for user {player_id}: {card.kind.value} ({card.symbol})")
        kind, symbol = card.kind.value, card.symbol

        if card.kind == CardKind.BOMB:
            return await self._resolve_bomb(player_id, kind, symbol)

        if card.kind == CardKind.DEFUSE:
            logging.info(f"User {player_id} drew a Defuse card")
            # A flag, not a counter: holding two Defuse cards still saves only once.
            await self.status_store.set_field(player_id, DEFUSE_FIELD, 1)
            return DrawOutcome(kind=kind, symbol=symbol, message=DEFUSE_MESSAGE)

        if card.kind == CardKind.SHUFFLE:
            logging.info(f"User {player_id} drew a Shuffle card")
            await self.lifecycle.reset(player_id)
            return DrawOutcome(kind=kind, symbol=symbol, message=SHUFFLE_MESSAGE)

        logging.info(f"User {player_id} drew a Cat card")
        return DrawOutcome(kind=kind, symbol=symbol, message=CAT_MESSAGE)

    async def _resolve_bomb(self, player_id: str, kind: str, symbol: str) -> DrawOutcome:
        if await self.read_defuse_count(player_id) > 0:
            logging.info(
                f"User {player_id} used a Defuse card to defuse the Exploding Kitten!"
            )
            await self.status_store.set_field(player_id, DEFUSE_FIELD, 0)
            return DrawOutcome(kind=kind, symbol=symbol, message=DEFUSED_MESSAGE)

        logging.info(f"User {player_id} drew an Exploding Kitten without a Defuse card!")
        await delete_player_records(self.deck_store.redis, player_id)
        return DrawOutcome(kind=kind, symbol=symbol, message=EXPLODED_MESSAGE, ended=True)

    async def read_defuse_count(self, player_id: str) -> int:
        """Read the defuse flag, treating an absent or unparsable value as 0"""
        value = await self.status_store.get_field(player_id, DEFUSE_FIELD)
        if value is None:
            return 0
        try:
            return int(value)
        except ValueError:
            logging.warning(f"Ignoring malformed defuse value {value!r} for user {player_id}")
            return 0
