"""python-chess adapters: a game board with move history and the searchable position."""

from typing import Iterator, List, Optional

import chess

from chessbot.core.budget import SearchBudget
from chessbot.core.position import PieceKind, PieceObservation, Side


class ChessPosition:
    """Implements the search `Position` contract on top of a `chess.Board`."""

    __slots__ = ("board", "move", "budget")

    def __init__(self, board: chess.Board, move: Optional[chess.Move] = None,
                 budget: Optional[SearchBudget] = None):
        self.board = board
        self.move = move  # move that led here, None at the root
        self.budget = budget

    @property
    def player(self) -> Side:
        return Side.from_color(self.board.turn)

    def next(self) -> Iterator["ChessPosition"]:
        """Yield successors lazily in python-chess legal move order."""
        for move in self.board.legal_moves:
            child = self.board.copy(stack=False)
            child.push(move)
            if self.budget is not None:
                self.budget.count()
            yield ChessPosition(child, move, self.budget)

    def search_limit_reached(self) -> bool:
        return self.budget is not None and self.budget.exhausted()

    def pieces(self) -> Iterator[PieceObservation]:
        for square, piece in self.board.piece_map().items():
            yield PieceObservation(
                side=Side.from_color(piece.color),
                rank=chess.square_rank(square),
                file=chess.square_file(square),
                kind=PieceKind.from_piece_type(piece.piece_type),
            )

    def __repr__(self) -> str:
        move = self.move.uci() if self.move else "-"
        return f"ChessPosition(move={move}, fen={self.board.fen()!r})"


class ChessBoard:
    def __init__(self, fen: Optional[str] = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self.move_history: List[str] = []

    def reset(self):
        self.board.reset()
        self.move_history.clear()

    def set_fen(self, fen: str):
        """Set board state from a FEN string. Raises ValueError on bad FEN."""
        self.board.set_fen(fen)
        self.move_history.clear()

    def get_fen(self) -> str:
        return self.board.fen()

    def make_move(self, move_str: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            return False
        if move not in self.board.legal_moves:
            return False
        self.board.push(move)
        self.move_history.append(move_str)
        return True

    def undo_move(self):
        if self.move_history:
            self.board.pop()
            self.move_history.pop()

    def get_legal_moves(self) -> List[str]:
        return [m.uci() for m in self.board.legal_moves]

    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    def print_board(self):
        print(self.board)
