"""Minimax search with alpha-beta pruning and iterative deepening.

The search works on bare boards (``legal_moves_on_board`` and
``apply_move_to_board``) and never touches the caller's ``GameState``.
A caller-supplied ``threading.Event`` and an optional time limit are
checked at every node.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from wizardchess.engine.evaluate import PIECE_VALUES, Evaluator
from wizardchess.game.errors import WizardChessError
from wizardchess.game.rules import (
    apply_move_to_board, generate_legal_moves, has_legal_move, is_king_in_check,
    legal_moves_on_board,
)
from wizardchess.game.state import Board, Color, GameState, Move, position_key

logger = logging.getLogger("wizardchess.search")

MATE_SCORE = 1_000_000
DEFAULT_DEPTH = 4
MAX_DEPTH = 10

# Transposition table bound flags
EXACT = 0
LOWER_BOUND = 1
UPPER_BOUND = 2

# Scores beyond this are mates; they are stored relative to the node
_MATE_THRESHOLD = MATE_SCORE - 1000

EvalFn = Callable[[Board, Color], float]


class SearchError(WizardChessError):
    """Base class for search failures."""


class SearchCancelled(SearchError):
    """The cancel token was set before the search finished."""

    def __init__(self, nodes: int = 0):
        self.nodes = nodes
        super().__init__(f"Search cancelled after {nodes} nodes")


class SearchTimeout(SearchError):
    """The time budget ran out before a single depth was completed."""

    def __init__(self, time_limit: float, nodes: int = 0):
        self.time_limit = time_limit
        self.nodes = nodes
        super().__init__(f"Search exceeded {time_limit:.2f}s after {nodes} nodes")


@dataclass
class SearchResult:
    move: Move
    score: float
    depth: int
    nodes: int
    timed_out: bool = False


def _order_key(move: Move) -> tuple[int, int]:
    if move.is_capture:
        # MVV-LVA; a wizard attack risks nothing, so it counts as a free attacker
        attacker = 0 if move.is_wizard_attack else PIECE_VALUES[move.piece.kind]
        return (0, attacker - 10 * PIECE_VALUES[move.captured.kind])
    if move.promotion is not None:
        return (1, -PIECE_VALUES[move.promotion])
    return (2, 0)


def _score_to_table(score: float, ply: int) -> float:
    if score > _MATE_THRESHOLD:
        return score + ply
    if score < -_MATE_THRESHOLD:
        return score - ply
    return score


def _score_from_table(score: float, ply: int) -> float:
    if score > _MATE_THRESHOLD:
        return score - ply
    if score < -_MATE_THRESHOLD:
        return score + ply
    return score


def order_moves(moves: list[Move]) -> list[Move]:
    """Captures first (MVV-LVA), then promotions, then quiet moves.

    The sort is stable, so moves with equal keys keep generation order.
    """
    return sorted(moves, key=_order_key)


class _Search:
    """Per-call search context: root color, limits, node count and the
    transposition table.

    Table entries are keyed by position and remaining depth and hold a bound
    flag with the score, so a hit only cuts when it is sound for the current
    alpha-beta window. The table lives for one ``best_move`` call and is
    shared across its iterative deepening passes.
    """

    def __init__(self, color: Color, evaluator: EvalFn,
                 cancel_token: Optional[threading.Event],
                 time_limit: Optional[float],
                 use_table: bool = True):
        self.color = color
        self.evaluator = evaluator
        self.cancel_token = cancel_token
        self.time_limit = time_limit
        self.deadline = (time.monotonic() + time_limit) if time_limit is not None else None
        self.nodes = 0
        self.table: Optional[dict] = {} if use_table else None
        self.table_hits = 0

    def _tick(self):
        self.nodes += 1
        if self.cancel_token is not None and self.cancel_token.is_set():
            raise SearchCancelled(self.nodes)
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise SearchTimeout(self.time_limit, self.nodes)

    def _terminal_score(self, board: Board, to_move: Color, ply: int) -> float:
        """Score of a position where ``to_move`` has no legal move."""
        if not is_king_in_check(board, to_move):
            return 0.0
        # Faster mates score higher
        if to_move == self.color:
            return -(MATE_SCORE - ply)
        return MATE_SCORE - ply

    def minimax(self, board: Board, to_move: Color, depth: int, ply: int,
                alpha: float, beta: float) -> float:
        self._tick()

        if depth == 0:
            if not has_legal_move(board, to_move):
                return self._terminal_score(board, to_move, ply)
            return self.evaluator(board, self.color)

        key = None
        if self.table is not None:
            key = (position_key(board, to_move), depth)
            entry = self.table.get(key)
            if entry is not None:
                flag, stored = entry
                score = _score_from_table(stored, ply)
                if flag == EXACT:
                    self.table_hits += 1
                    return score
                if flag == LOWER_BOUND:
                    alpha = max(alpha, score)
                else:
                    beta = min(beta, score)
                if alpha >= beta:
                    self.table_hits += 1
                    return score

        value = self._expand(board, to_move, depth, ply, alpha, beta)

        if key is not None:
            if value <= alpha:
                flag = UPPER_BOUND
            elif value >= beta:
                flag = LOWER_BOUND
            else:
                flag = EXACT
            self.table[key] = (flag, _score_to_table(value, ply))
        return value

    def _expand(self, board: Board, to_move: Color, depth: int, ply: int,
                alpha: float, beta: float) -> float:
        moves = legal_moves_on_board(board, to_move)
        if not moves:
            return self._terminal_score(board, to_move, ply)

        nxt = to_move.opponent
        if to_move == self.color:
            value = -math.inf
            for move in order_moves(moves):
                score = self.minimax(apply_move_to_board(board, move), nxt,
                                     depth - 1, ply + 1, alpha, beta)
                if score > value:
                    value = score
                alpha = max(alpha, value)
                if alpha >= beta:
                    break
            return value

        value = math.inf
        for move in order_moves(moves):
            score = self.minimax(apply_move_to_board(board, move), nxt,
                                 depth - 1, ply + 1, alpha, beta)
            if score < value:
                value = score
            beta = min(beta, value)
            if alpha >= beta:
                break
        return value

    def search_root(self, board: Board, moves: list[Move], depth: int,
                    first: Optional[Move] = None) -> tuple[Move, float]:
        """Search every root move to ``depth`` plies.

        ``first`` (the previous iteration's best move) is searched ahead of
        the rest. Ties keep the earliest move.
        """
        ordered = order_moves(moves)
        if first is not None and first in ordered:
            ordered.remove(first)
            ordered.insert(0, first)

        best: Optional[Move] = None
        best_score = -math.inf
        alpha = -math.inf
        for move in ordered:
            self._tick()
            score = self.minimax(apply_move_to_board(board, move), self.color.opponent,
                                 depth - 1, 1, alpha, math.inf)
            if best is None or score > best_score:
                best, best_score = move, score
            alpha = max(alpha, best_score)
        return best, best_score


def best_move(state: GameState, depth: int = DEFAULT_DEPTH,
              color: Optional[Color] = None,
              cancel_token: Optional[threading.Event] = None,
              time_limit: Optional[float] = None,
              evaluator: Optional[EvalFn] = None,
              use_table: bool = True) -> SearchResult:
    """Find the best move for ``color`` (default: the side to move).

    Iterative deepening from 1 to ``depth`` plies; each completed depth
    replaces the previous result.

    Args:
        state: Position to search. Never modified.
        depth: Maximum search depth in plies (1..MAX_DEPTH).
        color: Side to search for; must be the side to move.
        cancel_token: Event that aborts the search when set.
        time_limit: Seconds allowed. When it runs out after at least one
            completed depth, that depth's result is returned with
            ``timed_out=True``.
        evaluator: ``(board, color) -> float`` scoring function, higher is
            better for ``color``. Defaults to :class:`Evaluator`.
        use_table: Reuse results for positions reached again through
            different move orders. Turning it off does not change the
            chosen move or its score.

    Raises:
        ValueError: Bad depth, wrong color, or no legal moves.
        SearchCancelled: ``cancel_token`` was set.
        SearchTimeout: ``time_limit`` ran out before depth 1 finished.
    """
    if color is None:
        color = state.current_player
    color = Color(color)
    if color != state.current_player:
        raise ValueError(f"Cannot search for {color.name}: "
                         f"{state.current_player.name} is to move")
    if not 1 <= depth <= MAX_DEPTH:
        raise ValueError(f"Search depth must be between 1 and {MAX_DEPTH}, got {depth}")

    moves = generate_legal_moves(state)
    if not moves:
        raise ValueError("No legal moves in this position")

    search = _Search(color, evaluator or Evaluator(), cancel_token, time_limit,
                     use_table=use_table)
    start = time.monotonic()
    result: Optional[SearchResult] = None

    for d in range(1, depth + 1):
        try:
            move, score = search.search_root(state.board, moves, d,
                                             result.move if result else None)
        except SearchTimeout:
            if result is None:
                raise
            logger.warning("Time limit %.2fs hit during depth %d, using depth %d result",
                           time_limit, d, result.depth)
            result.timed_out = True
            result.nodes = search.nodes
            return result
        result = SearchResult(move, score, d, search.nodes)
        logger.debug("Depth %d: %s score=%.1f nodes=%d table_hits=%d",
                     d, move, score, search.nodes, search.table_hits)

    elapsed = time.monotonic() - start
    logger.info("Best move for %s: %s (score=%.1f, depth=%d, %d nodes, %.2fs)",
                color.name, result.move, result.score, result.depth, result.nodes, elapsed)
    return result
