"""
Depth-bounded minimax search with alpha-beta pruning.

`SearchEngine.select_move` is the entry point. Each call builds its own
`SearchContext`, so one engine instance can serve concurrent or nested
searches. The root ply records every child it scores; once the root value is
known the first recorded child whose score equals it exactly is returned.

Matching uses exact float equality. If drift in the evaluator's summation ever
leaves no recorded child equal to the root value, the result is a `NoMove`
with reason `NO_MATCH` rather than a near-miss pick.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Union

from chessbot.core.evaluator import EvaluationError, Evaluator
from chessbot.core.position import Position, Side

logger = logging.getLogger(__name__)

LIMIT = 4
INF = math.inf

NO_SUCCESSORS = "no-successors"
BUDGET_EXHAUSTED = "budget-exhausted"
NO_MATCH = "no-matching-score"

_EXHAUSTED = object()


class ScoredSuccessor(NamedTuple):
    position: Position
    score: float


@dataclass(frozen=True)
class NoMove:
    """Why a search produced no successor. Always falsy."""

    reason: str

    def __bool__(self) -> bool:
        return False


@dataclass
class SearchContext:
    """State owned by a single top-level search."""

    limit: int
    root_children: List[ScoredSuccessor] = field(default_factory=list)
    nodes: int = 0
    evaluations: int = 0
    cutoffs: int = 0


@dataclass
class SearchResult:
    choice: Union[Position, NoMove]
    value: float
    maximizing: bool
    depth: int
    nodes: int
    evaluations: int
    cutoffs: int
    elapsed: float  # seconds

    @property
    def found(self) -> bool:
        return not isinstance(self.choice, NoMove)


class SearchEngine:
    def __init__(self, evaluator: Optional[Evaluator] = None, depth: int = LIMIT):
        if depth < 1:
            raise ValueError(f"search depth must be at least 1, got {depth}")
        self.evaluator = evaluator or Evaluator()
        self.max_depth = depth

    def select_move(self, root: Position) -> Union[Position, NoMove]:
        """Return the chosen successor of `root`, or a `NoMove`."""
        return self.search(root).choice

    def search(self, root: Position, depth: Optional[int] = None) -> SearchResult:
        limit = self.max_depth if depth is None else depth
        if limit < 1:
            raise ValueError(f"search depth must be at least 1, got {limit}")

        ctx = SearchContext(limit=limit)
        start = time.time()

        # Orientation follows the side that moved into the root.
        maximizing = root.player.other() is Side.BLACK
        if maximizing:
            value = self._maximize(ctx, root, -INF, INF, 0)
        else:
            value = self._minimize(ctx, root, -INF, INF, 0)

        choice = self._pick(ctx, root, value)
        ctx.root_children.clear()

        elapsed = time.time() - start
        logger.debug(
            "search depth=%d value=%s nodes=%d evals=%d cutoffs=%d time=%.3fs",
            limit, value, ctx.nodes, ctx.evaluations, ctx.cutoffs, elapsed,
        )
        return SearchResult(
            choice=choice,
            value=value,
            maximizing=maximizing,
            depth=limit,
            nodes=ctx.nodes,
            evaluations=ctx.evaluations,
            cutoffs=ctx.cutoffs,
            elapsed=elapsed,
        )

    def _pick(self, ctx: SearchContext, root: Position, value: float) -> Union[Position, NoMove]:
        for child in ctx.root_children:
            if child.score == value:
                return child.position
        if not ctx.root_children:
            if root.search_limit_reached():
                return NoMove(BUDGET_EXHAUSTED)
            return NoMove(NO_SUCCESSORS)
        logger.warning("no root child scored exactly %r among %d candidates", value, len(ctx.root_children))
        return NoMove(NO_MATCH)

    def _evaluate(self, ctx: SearchContext, state: Position) -> float:
        ctx.evaluations += 1
        score = self.evaluator.evaluate(state)
        if math.isnan(score):
            raise EvaluationError(f"NaN score for {state!r}")
        return score

    def _maximize(self, ctx: SearchContext, state: Position, alpha: float, beta: float, depth: int) -> float:
        if depth == ctx.limit:
            return self._evaluate(ctx, state)
        ctx.nodes += 1
        best = -INF
        successors = iter(state.next())
        while depth < ctx.limit and not state.search_limit_reached():
            child = next(successors, _EXHAUSTED)
            if child is _EXHAUSTED:
                break
            value = self._minimize(ctx, child, alpha, beta, depth + 1)
            if depth == 0:
                ctx.root_children.append(ScoredSuccessor(child, value))
            best = max(best, value)
            if best >= beta:
                ctx.cutoffs += 1
                return best
            alpha = max(alpha, best)
        return best

    def _minimize(self, ctx: SearchContext, state: Position, alpha: float, beta: float, depth: int) -> float:
        if depth == ctx.limit:
            return self._evaluate(ctx, state)
        ctx.nodes += 1
        best = INF
        successors = iter(state.next())
        while depth < ctx.limit and not state.search_limit_reached():
            child = next(successors, _EXHAUSTED)
            if child is _EXHAUSTED:
                break
            value = self._maximize(ctx, child, alpha, beta, depth + 1)
            if depth == 0:
                ctx.root_children.append(ScoredSuccessor(child, value))
            best = min(best, value)
            if best <= alpha:
                ctx.cutoffs += 1
                return best
            beta = min(beta, best)
        return best
