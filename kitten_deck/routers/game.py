import logging

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect, status

from kitten_deck.errors import DrawConflict, EmptyDeck, GameError, InvalidPlayer, StoreUnavailable
from kitten_deck.manager import ConnectionManager
from kitten_deck.models.game_models import (
    DrawCardModel,
    DrawOutcome,
    LeaderboardModel,
    StartGameModel,
    UserModel,
)
from kitten_deck.services.deck_lifecycle import DeckLifecycleManager
from kitten_deck.services.draw_resolver import DrawResolver
from kitten_deck.services.session_query import SessionQuery

game_router = APIRouter()


def get_lifecycle(request: Request) -> DeckLifecycleManager:
    return request.app.state.lifecycle


def get_draw_resolver(request: Request) -> DrawResolver:
    return request.app.state.draw_resolver


def to_http_exception(error: GameError) -> HTTPException:
    """Map a service error to the HTTP status the client sees

    Args:
        error (GameError): Error raised by a game service

    Returns:
        HTTPException: Exception to raise from the route
    """
    if isinstance(error, InvalidPlayer):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, EmptyDeck):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No cards left in the deck"
        )
    if isinstance(error, DrawConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, StoreUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Store unavailable during {error.operation}",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


class GameServer:
    @staticmethod
    @game_router.post("/start-game", response_model=StartGameModel)
    async def start_game(
        user: UserModel,
        lifecycle: DeckLifecycleManager = Depends(get_lifecycle),
    ) -> StartGameModel:
        """Start a new game for the user or resume the one in progress

        Args:
            user (UserModel): username of the player

        Returns:
            StartGameModel: message, username and the deck contents
        """
        try:
            deck, resumed = await lifecycle.start_or_resume(user.username)
        except GameError as e:
            raise to_http_exception(e) from e
        return StartGameModel(
            message="Resuming game" if resumed else "Game started",
            username=user.username,
            deck=deck,
        )

    @staticmethod
    @game_router.post("/draw-card", response_model=DrawCardModel)
    async def draw_card(
        user: UserModel,
        draw_resolver: DrawResolver = Depends(get_draw_resolver),
    ) -> DrawCardModel:
        """Draw one card for the user

        Args:
            user (UserModel): username of the player

        Returns:
            DrawCardModel: message, card symbol, card type and the game-over flag
        """
        try:
            outcome: DrawOutcome = await draw_resolver.draw(user.username)
        except GameError as e:
            raise to_http_exception(e) from e
        return DrawCardModel(
            message=outcome.message,
            card=outcome.symbol,
            type=outcome.kind,
            ended=outcome.ended,
        )

    @staticmethod
    @game_router.get("/leaderboard", response_model=LeaderboardModel)
    async def get_leaderboard() -> LeaderboardModel:
        logging.info("Fetching leaderboard")
        return LeaderboardModel(leaderboard="Top players")


class PushServer:
    @staticmethod
    @game_router.websocket("/ws")
    async def serve_ws(websocket: WebSocket):
        """Send every player's status on connect, then keep the socket open

        Args:
            websocket (WebSocket): Client connection; also receives scheduled broadcasts
        """
        manager: ConnectionManager = websocket.app.state.connection_manager
        session_query: SessionQuery = websocket.app.state.session_query
        await manager.connect(websocket)
        logging.info("WebSocket connection established")
        try:
            try:
                users_data = await session_query.snapshot()
            except StoreUnavailable as e:
                logging.error(f"Error fetching users data from Redis: {e}")
                await websocket.close(code=1011)
                return
            await manager.send_personal_message(users_data, websocket)

            while True:
                await websocket.receive_text()
        except WebSocketDisconnect as e:
            logging.info(f"WebSocket connection closed: {e.code}")
        finally:
            manager.disconnect(websocket)
