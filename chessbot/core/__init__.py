"""Core engine components: position contract, board adapter, evaluator, and search."""

from .board import ChessBoard, ChessPosition
from .budget import SearchBudget
from .evaluator import EvaluationError, Evaluator
from .position import PieceKind, PieceObservation, Position, Side
from .search import NoMove, SearchEngine, SearchResult
