from __future__ import annotations

import logging
import time
from typing import Dict, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    chess_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.errors import ChessError
from ...engine.game import Game
from ...engine.notation import to_san
from ...engine.perft import divide as perft_divide
from ...engine.perft import perft as perft_nodes
from ...engine.position import Position, STARTPOS_FEN
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)

MAX_PERFT_DEPTH = 6


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Start FEN; standard start if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move text, e.g. e2e4 or Nf3")
    notation: Literal["uci", "san"] = Field(default="uci")


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN)
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)
    divide: bool = False


class PerftResponse(BaseModel):
    nodes: int
    depth: int
    time_ms: int
    divide: Optional[Dict[str, int]] = None


class GameState(BaseModel):
    game_id: str
    fen: str
    legal_moves: list[str]
    legal_moves_san: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    draw: bool
    last_move: Optional[str]
    move_history: list[str]
    move_history_san: list[str]


def create_app() -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, chess_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        game = Game.from_fen(req.fen) if req is not None and req.fen else Game.new()
        game_id = store.create(game)
        logger.info("created game", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        store.set(game_id, Game.from_fen(req.fen))
        return _state(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        if req.notation == "san":
            game.push_san(req.move)
        else:
            game.push_uci(req.move)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state(game_id, game)

    @app.post("/api/perft", response_model=PerftResponse)
    def perft(req: PerftRequest) -> PerftResponse:
        position = Position.from_fen(req.fen)
        start = time.perf_counter()
        counts: Optional[Dict[str, int]] = None
        if req.divide and req.depth >= 1:
            counts = perft_divide(position, req.depth)
            nodes = sum(counts.values())
        else:
            nodes = perft_nodes(position, req.depth)
        time_ms = int((time.perf_counter() - start) * 1000)
        logger.info("perft", extra={"depth": req.depth, "nodes": nodes, "time_ms": time_ms})
        return PerftResponse(nodes=nodes, depth=req.depth, time_ms=time_ms, divide=counts)

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state(game_id: str, game: Game) -> GameState:
    moves = game.legal_moves()
    history = game.move_history_uci()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        legal_moves=[m.to_uci() for m in moves],
        legal_moves_san=[to_san(game.position, m) for m in moves],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        draw=game.is_draw(),
        last_move=history[-1] if history else None,
        move_history=history,
        move_history_san=game.move_history_san(),
    )


# Default app for non-factory servers
app = create_app()
