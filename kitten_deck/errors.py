class GameError(Exception):
    """Base class for errors raised by the deck and draw services."""


class InvalidPlayer(GameError):
    pass


class EmptyDeck(GameError):
    """No cards were left to draw. A fresh deck has been stored meanwhile."""

    def __init__(self, player_id: str):
        super().__init__(f"No cards left in the deck for user: {player_id}")
        self.player_id = player_id


class DrawConflict(GameError):
    """Another draw for the same player won the race; no effect was applied."""

    def __init__(self, player_id: str):
        super().__init__(f"Another draw is in progress for user: {player_id}")
        self.player_id = player_id


class StoreUnavailable(GameError):
    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Store operation {operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
