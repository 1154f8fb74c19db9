from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, Field

from .error import register_error_handlers
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.color import Color
from ...engine.errors import PositionError
from ...engine.fen import STARTPOS_FEN
from ...engine.game import Game
from ...engine.perft import perft as perft_nodes
from ...engine.state import Draw, DrawReason, Win, WinReason
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)

MAX_PERFT_DEPTH = 5


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN string; start position if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4")


class ResignRequest(BaseModel):
    color: Literal["w", "b"] = Field(..., description="Side that resigns")


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN, description="FEN string (default: startpos)")
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class ResultPayload(BaseModel):
    status: Literal["playing", "win", "draw"]
    winner: Optional[str] = None
    reason: Optional[str] = None


class GameStatePayload(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    draw: bool
    fifty_move_rule: bool
    result: ResultPayload
    last_move: Optional[str]
    move_history: List[str]


class MovesPayload(BaseModel):
    game_id: str
    square: Optional[str]
    moves: List[str]


def create_app(max_sessions: int = 1024, log_level: int = logging.INFO) -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=log_level)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    register_error_handlers(app)

    # In-memory session store for games
    store = InMemorySessionStore(max_sessions=max_sessions)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        game = Game.new() if req is None or req.fen is None else _load(req.fen)
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.get("/api/games/{game_id}/state", response_model=GameStatePayload)
    async def get_state(game_id: str) -> GameStatePayload:
        return _state_payload(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/moves", response_model=MovesPayload)
    async def get_moves(game_id: str, square: Optional[str] = None) -> MovesPayload:
        game = _require_game(store, game_id)
        if square is None:
            turns = game.legal_moves()
        else:
            try:
                turns = game.legal_moves_from(square)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        return MovesPayload(game_id=game_id, square=square, moves=[t.to_uci() for t in turns])

    @app.post("/api/games/{game_id}/position", response_model=GameStatePayload)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameStatePayload:
        _require_game(store, game_id)
        store.set(game_id, _load(req.fen))
        return _state_payload(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/move", response_model=GameStatePayload)
    async def make_move(game_id: str, req: MoveRequest) -> GameStatePayload:
        game = _require_game(store, game_id)
        try:
            game.apply_move(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_payload(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameStatePayload)
    async def undo(game_id: str) -> GameStatePayload:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_payload(game_id, game)

    @app.post("/api/games/{game_id}/resign", response_model=GameStatePayload)
    async def resign(game_id: str, req: ResignRequest) -> GameStatePayload:
        game = _require_game(store, game_id)
        try:
            game.resign(Color.from_token(req.color))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_payload(game_id, game)

    @app.post("/api/games/{game_id}/draw", response_model=GameStatePayload)
    async def agree_draw(game_id: str) -> GameStatePayload:
        game = _require_game(store, game_id)
        try:
            game.agree_draw()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_payload(game_id, game)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except PositionError:
            raise
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"nodes": perft_nodes(game.board, req.depth), "depth": req.depth}

    return app


def _load(fen: str) -> Game:
    try:
        return Game.from_fen(fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state_payload(game_id: str, game: Game) -> GameStatePayload:
    state = game.state()
    history = game.move_history_uci()
    return GameStatePayload(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.board.side_to_move.value,
        legal_moves=[t.to_uci() for t in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=isinstance(state, Win) and state.reason is WinReason.CHECKMATE,
        stalemate=isinstance(state, Draw) and state.reason is DrawReason.STALEMATE,
        draw=isinstance(state, Draw),
        fifty_move_rule=game.board.is_fifty_move_rule(),
        result=ResultPayload(
            status=state.status,
            winner=state.winner.value if state.winner is not None else None,
            reason=state.reason.value if state.reason is not None else None,
        ),
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
