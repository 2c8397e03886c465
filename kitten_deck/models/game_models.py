from typing import Dict, List

from pydantic import BaseModel


class UserModel(BaseModel):
    username: str


class DrawOutcome(BaseModel):
    kind: str
    symbol: str
    message: str
    ended: bool = False

    class Config:
        frozen = True


class StartGameModel(BaseModel):
    message: str
    username: str
    deck: List[str]


class DrawCardModel(BaseModel):
    message: str
    card: str  # display symbol, e.g. "💣"
    type: str
    ended: bool


class LeaderboardModel(BaseModel):
    leaderboard: str


PlayerSnapshot = Dict[str, str]
