"""FastAPI REST interface for playing against the engine."""

import logging
import threading

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Optional

from opponent.config import CONFIG
from opponent.main import Engine

logging.basicConfig(level=CONFIG.log_level)
_log = logging.getLogger(__name__)

_LEVELS = CONFIG.difficulty.levels

app = FastAPI(title=CONFIG.service.engine_name, version="1.0.0")

# Shared game session.
engine = Engine(
    human_color=chess.BLACK if CONFIG.service.human_color == "black" else chess.WHITE,
)
_board_lock = threading.Lock()


class FenRequest(BaseModel):
    fen: str


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"
    reply: bool = True


class EngineMoveRequest(BaseModel):
    difficulty: Optional[int] = Field(default=None, ge=_LEVELS.start, le=_LEVELS.stop - 1)


class DifficultyRequest(BaseModel):
    difficulty: int = Field(ge=_LEVELS.start, le=_LEVELS.stop - 1)


def _state() -> dict:
    b = engine.board
    return {
        "fen": b.get_fen(),
        "turn": b.turn_name(),
        "legal_moves": b.get_legal_moves(),
        "history": list(b.move_history),
        "difficulty": engine.difficulty,
        "status": b.status(),
        "is_game_over": b.is_game_over(),
        "result": b.result_message(),
    }


@app.get("/board")
def get_board():
    with _board_lock:
        return _state()


@app.post("/position")
def set_position(req: FenRequest):
    with _board_lock:
        try:
            engine.reset(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")
        return _state()


@app.post("/move")
def make_move(req: MoveRequest):
    with _board_lock:
        if engine.board.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        if not engine.make_move(req.move):
            raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
        reply = None
        if req.reply and not engine.board.is_game_over():
            reply = engine.get_best_move()
        state = _state()
        state.update(move=req.move, ai_move=reply)
        return state


@app.post("/ai-move")
def ai_move(req: EngineMoveRequest = EngineMoveRequest()):
    with _board_lock:
        if engine.board.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        if req.difficulty is not None:
            engine.set_difficulty(req.difficulty)
        move = engine.get_best_move()
        _log.info("engine move %s", move)
        state = _state()
        state["ai_move"] = move
        return state


@app.post("/undo")
def undo_move():
    with _board_lock:
        undone = engine.undo()
        state = _state()
        state["undone"] = undone
        return state


@app.post("/difficulty")
def set_difficulty(req: DifficultyRequest):
    with _board_lock:
        engine.set_difficulty(req.difficulty)
        return {"difficulty": engine.difficulty}


@app.post("/reset")
def reset_board():
    with _board_lock:
        engine.reset()
        return _state()
