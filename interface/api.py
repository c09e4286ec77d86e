"""FastAPI REST interface for the engine."""

import threading

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Optional

from chessbot.config import CONFIG
from chessbot.core.board import ChessPosition
from chessbot.core.evaluator import EvaluationError
from chessbot.main import Engine

app = FastAPI(title=CONFIG.ui.api_title, version="1.0.0")

engine = Engine(depth=CONFIG.search.depth)
board = engine.board.board
_board_lock = threading.Lock()


class FenRequest(BaseModel):
    fen: str


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=8)


@app.get("/board")
def get_board():
    with _board_lock:
        return {
            "fen": engine.board.get_fen(),
            "turn": "white" if board.turn == chess.WHITE else "black",
            "legal_moves": engine.board.get_legal_moves(),
            "is_game_over": board.is_game_over(),
            "result": board.result() if board.is_game_over() else None,
        }


@app.post("/position")
def set_position(req: FenRequest):
    with _board_lock:
        try:
            engine.board.set_fen(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")
        return {"fen": engine.board.get_fen()}


@app.post("/move")
def make_move(req: MoveRequest):
    with _board_lock:
        try:
            move = chess.Move.from_uci(req.move)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid UCI move: {req.move}")
        if move not in board.legal_moves:
            raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
        engine.make_move(req.move)
        return {"fen": engine.board.get_fen(), "move": req.move}


@app.post("/search")
def search_move(req: SearchRequest = SearchRequest()):
    with _board_lock:
        if board.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        search_board = board.copy()

    move, result = engine.find_best_move(search_board, depth=req.depth)
    return {
        "best_move": move.uci() if move else None,
        "reason": None if move else result.choice.reason,
        "score": result.value if move else None,
        "depth": result.depth,
        "nodes": result.nodes,
        "fen": search_board.fen(),
    }


@app.post("/evaluate")
def evaluate_position(req: Optional[FenRequest] = None):
    with _board_lock:
        target = board.copy()
    if req is not None:
        try:
            target = chess.Board(req.fen)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid FEN: {e}")
    try:
        score = engine.search.evaluator.evaluate(ChessPosition(target))
    except EvaluationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"fen": target.fen(), "score": score}


@app.post("/reset")
def reset_board():
    with _board_lock:
        engine.board.reset()
        return {"fen": engine.board.get_fen()}
