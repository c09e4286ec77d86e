"""
Static evaluator: material plus piece-square tables.

Scores are positive in White's favour. White pieces read the tables at
(rank, file); Black pieces read them mirrored along the file axis at
(rank, 7 - file). The king carries neither material nor a table.
"""

import math
from typing import Dict, Optional, Tuple

from chessbot.config import CONFIG
from chessbot.core.position import PieceKind, PieceObservation, Position, Side

Table = Tuple[Tuple[float, ...], ...]

PAWN_TABLE: Table = (
    (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    (5.0, 5.0, 5.0, 5.0, 5.0, 5.0, 5.0, 5.0),
    (1.0, 1.0, 2.0, 3.0, 3.0, 2.0, 1.0, 1.0),
    (0.5, 0.5, 1.0, 2.5, 2.5, 1.0, 0.5, 0.5),
    (0.0, 0.0, 0.0, 2.0, 2.0, 0.0, 0.0, 0.0),
    (0.5, -0.5, -1.0, 0.0, 0.0, -1.0, -0.5, 0.5),
    (0.5, 1.0, 1.0, -2.0, -2.0, 1.0, 1.0, 0.5),
    (1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0),
)

ROOK_TABLE: Table = (
    (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
    (0.5, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 0.5),
    (-0.5, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -0.5),
    (-0.5, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -0.5),
    (-0.5, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -0.5),
    (-0.5, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -0.5),
    (-0.5, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -0.5),
    (0.0, 0.0, 0.0, 0.5, 0.5, 0.0, 0.0, 0.0),
)

BISHOP_TABLE: Table = (
    (-2.0, -1.0, -1.0, -1.0, -1.0, -1.0, -1.0, -2.0),
    (-1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0),
    (-1.0, 0.0, 0.5, 1.0, 1.0, 0.5, 0.0, -1.0),
    (-1.0, 0.5, 0.5, 1.0, 1.0, 0.5, 0.5, -1.0),
    (-1.0, 0.0, 1.0, 1.0, 1.0, 1.0, 0.0, -1.0),
    (-1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0, -1.0),
    (-1.0, 0.5, 0.0, 0.0, 0.0, 0.0, 0.5, -1.0),
    (-2.0, -1.0, -1.0, -1.0, -1.0, -1.0, -1.0, -2.0),
)

KNIGHT_TABLE: Table = (
    (-5.0, -4.0, -3.0, -3.0, -3.0, -3.0, -4.0, -5.0),
    (-4.0, -2.0, 0.0, 0.0, 0.0, 0.0, -2.0, -4.0),
    (-3.0, 0.0, 1.0, 1.5, 1.5, 1.0, 0.0, -3.0),
    (-3.0, 0.5, 1.5, 2.0, 2.0, 1.5, 0.5, -3.0),
    (-3.0, 0.0, 1.5, 2.0, 2.0, 1.5, 0.0, -3.0),
    (-3.0, 0.5, 1.0, 1.5, 1.5, 1.0, 0.5, -3.0),
    (-4.0, -2.0, 0.0, 0.5, 0.5, 0.0, -2.0, -4.0),
    (-5.0, -4.0, -3.0, -3.0, -3.0, -3.0, -4.0, -5.0),
)

# Row 5 ends in -0.1, not -0.5; the table is asymmetric there.
QUEEN_TABLE: Table = (
    (-2.0, -1.0, -1.0, -0.5, -0.5, -1.0, -1.0, -2.0),
    (-1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, -1.0),
    (-1.0, 0.0, 0.5, 0.5, 0.5, 0.5, 0.0, -1.0),
    (-0.5, 0.0, 0.5, 0.5, 0.5, 0.5, 0.0, -0.5),
    (0.0, 0.0, 0.5, 0.5, 0.5, 0.5, 0.0, -0.5),
    (-1.0, 0.5, 0.5, 0.5, 0.5, 0.5, 0.0, -0.1),
    (-1.0, 0.0, 0.5, 0.0, 0.0, 0.0, 0.0, -1.0),
    (-2.0, -1.0, -1.0, -0.5, -0.5, -1.0, -1.0, -2.0),
)

PIECE_SQUARE_TABLES: Dict[PieceKind, Table] = {
    PieceKind.PAWN: PAWN_TABLE,
    PieceKind.KNIGHT: KNIGHT_TABLE,
    PieceKind.BISHOP: BISHOP_TABLE,
    PieceKind.ROOK: ROOK_TABLE,
    PieceKind.QUEEN: QUEEN_TABLE,
}


class EvaluationError(ValueError):
    """Raised for positions the evaluator cannot score meaningfully."""


class Evaluator:
    def __init__(self, piece_values: Optional[Dict[str, float]] = None,
                 use_positional: Optional[bool] = None):
        self.cfg = CONFIG.eval
        values = piece_values if piece_values is not None else self.cfg.piece_values
        self.material: Dict[PieceKind, float] = {
            kind: float(values.get(kind.name, 0.0)) for kind in PieceKind
        }
        # King is never scored regardless of configuration.
        self.material[PieceKind.KING] = 0.0
        self.use_positional = self.cfg.use_positional if use_positional is None else use_positional

    def evaluate(self, position: Position) -> float:
        """Return the static score of `position`, positive favours White."""
        white_score = 0.0
        black_score = 0.0
        for piece in position.pieces():
            if piece.side is Side.WHITE:
                white_score = white_score + self.material[self._kind(piece)] + self._bonus(piece)
            else:
                black_score = black_score + self.material[self._kind(piece)] + self._bonus(piece)
        total = white_score - black_score
        if math.isnan(total):
            raise EvaluationError("evaluation produced NaN")
        return total

    def _kind(self, piece: PieceObservation) -> PieceKind:
        if not isinstance(piece.kind, PieceKind):
            raise EvaluationError(f"unknown piece kind: {piece.kind!r}")
        return piece.kind

    def _bonus(self, piece: PieceObservation) -> float:
        table = PIECE_SQUARE_TABLES.get(piece.kind)
        if table is None or not self.use_positional:
            return 0.0
        if not (0 <= piece.rank <= 7 and 0 <= piece.file <= 7):
            raise EvaluationError(f"square out of range: rank={piece.rank} file={piece.file}")
        file = piece.file if piece.side is Side.WHITE else 7 - piece.file
        return table[piece.rank][file]
