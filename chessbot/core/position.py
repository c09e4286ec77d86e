"""Game-representation contract consumed by the search engine.

The search only needs a handful of things from a position: whose turn it is,
an ordered lazy sequence of successors, a budget flag to poll, and a view of
the pieces for static evaluation. Anything providing those can be searched;
`chessbot.core.board.ChessPosition` is the python-chess implementation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol

import chess


class Side(Enum):
    WHITE = "white"
    BLACK = "black"

    def other(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE

    @staticmethod
    def from_color(color: chess.Color) -> "Side":
        return Side.WHITE if color == chess.WHITE else Side.BLACK


class PieceKind(Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"

    @staticmethod
    def from_piece_type(piece_type: chess.PieceType) -> "PieceKind":
        return _KIND_BY_PIECE_TYPE[piece_type]


_KIND_BY_PIECE_TYPE = {
    chess.PAWN: PieceKind.PAWN,
    chess.KNIGHT: PieceKind.KNIGHT,
    chess.BISHOP: PieceKind.BISHOP,
    chess.ROOK: PieceKind.ROOK,
    chess.QUEEN: PieceKind.QUEEN,
    chess.KING: PieceKind.KING,
}


@dataclass(frozen=True)
class PieceObservation:
    side: Side
    rank: int
    file: int
    kind: PieceKind


class Position(Protocol):
    """A read-only snapshot of a two-player game."""

    @property
    def player(self) -> Side:
        """Side to move."""
        ...

    def next(self) -> Iterable["Position"]:
        """Successor positions in a fixed order. Each call starts a fresh sequence."""
        ...

    def search_limit_reached(self) -> bool:
        """True once the externally managed search budget is spent."""
        ...

    def pieces(self) -> Iterable[PieceObservation]:
        ...
