"""Card catalog and deck rules that are independent from HTTP and Redis.

Rule of thumb:
- OK: catalog lookups, deck construction, validation.
- Not OK: touching Redis, FastAPI, global random state.
"""

import random
import re
from enum import Enum
from typing import List, NamedTuple

from kitten_deck.errors import InvalidPlayer


class CardKind(str, Enum):
    CAT = "Cat"
    DEFUSE = "Defuse"
    SHUFFLE = "Shuffle"
    BOMB = "Exploding Kitten"


class Card(NamedTuple):
    kind: CardKind
    symbol: str


CATALOG: tuple[Card, ...] = (
    Card(CardKind.CAT, "😼"),
    Card(CardKind.DEFUSE, "🙅‍♂️"),
    Card(CardKind.SHUFFLE, "🔀"),
    Card(CardKind.BOMB, "💣"),
)

# Multiset every new or reset deck is built from.
DEFAULT_DECK: tuple[CardKind, ...] = (
    CardKind.CAT,
    CardKind.CAT,
    CardKind.DEFUSE,
    CardKind.SHUFFLE,
    CardKind.BOMB,
)
DECK_SIZE = len(DEFAULT_DECK)

PLAYER_ID_MAX_LENGTH = 64
_PLAYER_ID_PATTERN = re.compile(r"[^\s:*?\[\]]+")


def build_deck(rng: random.Random) -> List[str]:
    """Return the default deck as stored values, in a uniformly random order.

    Args:
        rng (random.Random): Random source owned by the caller

    Returns:
        List[str]: Card kind values, e.g. ["Shuffle", "Cat", ...]
    """
    deck = [kind.value for kind in DEFAULT_DECK]
    rng.shuffle(deck)
    return deck


def lookup_card(value: str) -> Card | None:
    """Find the catalog entry for a stored card value, or None if unknown."""
    for card in CATALOG:
        if card.kind.value == value:
            return card
    return None


def validate_player_id(player_id: str | None) -> str:
    """Check that a player identity can be used as a store key.

    Args:
        player_id (str | None): Identity as received from the caller

    Raises:
        InvalidPlayer: The identity is empty, too long, or contains whitespace,
            ':' or glob metacharacters

    Returns:
        str: The same identity
    """
    if not player_id:
        raise InvalidPlayer("player identity is empty")
    if len(player_id) > PLAYER_ID_MAX_LENGTH:
        raise InvalidPlayer(
            f"player identity is longer than {PLAYER_ID_MAX_LENGTH} characters"
        )
    if not _PLAYER_ID_PATTERN.fullmatch(player_id):
        raise InvalidPlayer(f"player identity {player_id!r} is malformed")
    return player_id
