import logging
import threading
from typing import Callable, Optional, Tuple

import chess

from chessbot.config import CONFIG
from chessbot.core.board import ChessBoard, ChessPosition
from chessbot.core.budget import SearchBudget
from chessbot.core.evaluator import Evaluator
from chessbot.core.search import SearchEngine, SearchResult

logger = logging.getLogger(__name__)


class Engine:
    """Chess-facing wrapper: owns a game board and runs searches on python-chess boards."""

    def __init__(self, depth: Optional[int] = None, evaluator: Optional[Evaluator] = None):
        self.board = ChessBoard()
        self.search = SearchEngine(evaluator or Evaluator(), depth=depth if depth is not None else CONFIG.search.depth)
        self._budget: Optional[SearchBudget] = None
        self._thread: Optional[threading.Thread] = None

    def find_best_move(self, board: chess.Board, depth: Optional[int] = None,
                       budget: Optional[SearchBudget] = None) -> Tuple[Optional[chess.Move], SearchResult]:
        if budget is None:
            budget = SearchBudget(CONFIG.search.time_limit_ms, CONFIG.search.node_limit)
        root = ChessPosition(board.copy(), budget=budget)
        result = self.search.search(root, depth=depth)
        if not result.found:
            logger.info("no move for %s: %s", board.fen(), result.choice.reason)
            return None, result
        return result.choice.move, result

    def get_best_move(self) -> Tuple[Optional[str], float]:
        move, result = self.find_best_move(self.board.board)
        return (move.uci() if move else None), result.value

    def make_move(self, move_uci: str) -> bool:
        return self.board.make_move(move_uci)

    def print_board(self):
        self.board.print_board()

    def start_search(self, board: chess.Board, depth: Optional[int] = None,
                     time_limit_ms: Optional[int] = None, node_limit: Optional[int] = None,
                     callback: Optional[Callable[[Optional[chess.Move], SearchResult], None]] = None):
        """Search `board` on a daemon thread; `callback(move, result)` fires when done.

        A search still running is stopped and joined first, so its callback fires
        before the new search starts.
        """
        if self._thread and self._thread.is_alive():
            logger.info("stopping running search before starting a new one")
            self._budget.stop()
            self._thread.join()
        budget = SearchBudget(time_limit_ms, node_limit)
        self._budget = budget
        search_board = board.copy()

        def worker():
            move, result = self.find_best_move(search_board, depth=depth, budget=budget)
            if callback:
                callback(move, result)

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def stop(self):
        if self._budget is not None:
            self._budget.stop()
        if self._thread:
            self._thread.join(timeout=0.2)

    def wait(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout=timeout)
