"""Static position evaluation for the search engine.

Scores are in centipawns from the point of view of the given color. Every
term a piece contributes is non-negative and depends only on that piece's
square (and the square of its own king), so taking an enemy piece off the
board can never lower the score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wizardchess.game.board import (
    BOARD_SIZE, CENTER_SQUARES, EXTENDED_CENTER, HOME_ROWS, chebyshev,
)
from wizardchess.game.state import Board, Color, GameState, PieceKind

PIECE_VALUES = {
    PieceKind.PAWN: 100,
    PieceKind.KNIGHT: 300,
    PieceKind.BISHOP: 320,
    PieceKind.WIZARD: 400,
    PieceKind.ROOK: 500,
    PieceKind.QUEEN: 900,
    PieceKind.KING: 0,
}

CENTER_BONUS = 20
EXTENDED_CENTER_BONUS = 10
PAWN_CENTER_BONUS = 10
PAWN_EXTENDED_CENTER_BONUS = 5
PAWN_ADVANCE_BONUS = 5

KING_DEFENDER_BONUS = 15
KING_ATTACKER_PENALTY = 20
KING_SHELTER_BONUS = 10
KING_DANGER_RADIUS = 2


@dataclass
class EvalWeights:
    """Multipliers for each evaluation term. Must be non-negative."""
    material: float = 1.0
    center: float = 1.0
    advancement: float = 1.0
    king_safety: float = 1.0

    def __post_init__(self):
        for name in ("material", "center", "advancement", "king_safety"):
            if getattr(self, name) < 0:
                raise ValueError(f"Evaluation weight {name!r} must be >= 0, "
                                 f"got {getattr(self, name)}")

    @classmethod
    def from_config(cls, config: Optional[dict]) -> EvalWeights:
        """Read weights from the ``evaluation`` section of a config dict."""
        section = (config or {}).get("evaluation", {}) or {}
        return cls(
            material=float(section.get("material", 1.0)),
            center=float(section.get("center", 1.0)),
            advancement=float(section.get("advancement", 1.0)),
            king_safety=float(section.get("king_safety", 1.0)),
        )


@dataclass
class PositionEval:
    """Evaluation of a position, broken down by term."""
    score: float  # Centipawns, from the evaluated color's perspective
    material: float
    center: float
    advancement: float
    king_safety: float


def _center_bonus(kind: PieceKind, row: int, col: int) -> int:
    if (row, col) in CENTER_SQUARES:
        return PAWN_CENTER_BONUS if kind == PieceKind.PAWN else CENTER_BONUS
    if (row, col) in EXTENDED_CENTER:
        return PAWN_EXTENDED_CENTER_BONUS if kind == PieceKind.PAWN else EXTENDED_CENTER_BONUS
    return 0


def _advancement(color: Color, row: int) -> int:
    """Rows a pawn has travelled from its starting row."""
    start = HOME_ROWS[color] - 1 if color == Color.WHITE else HOME_ROWS[color] + 1
    return abs(row - start)


class Evaluator:
    """Material plus positional evaluation.

    Instances are callables ``(board, color) -> float`` so they can be
    swapped for any other scoring function (a learned model, for example)
    in :func:`wizardchess.engine.search.best_move`.
    Such a model would read its input from
    :func:`wizardchess.engine.encoding.board_to_planes`.
    """

    def __init__(self, weights: Optional[EvalWeights] = None):
        self.weights = weights or EvalWeights()

    @classmethod
    def from_config(cls, config: Optional[dict]) -> Evaluator:
        return cls(EvalWeights.from_config(config))

    def __call__(self, board: Board, color: Color) -> float:
        return self.evaluate_board(board, color).score

    def evaluate_position(self, state: GameState,
                          color: Optional[Color] = None) -> PositionEval:
        """Evaluate a game state, by default for the side to move."""
        if color is None:
            color = state.current_player
        return self.evaluate_board(state.board, color)

    def evaluate_board(self, board: Board, color: Color) -> PositionEval:
        # Per-color term totals, indexed by Color
        material = [0.0, 0.0]
        center = [0.0, 0.0]
        advancement = [0.0, 0.0]
        kings: list[Optional[tuple[int, int]]] = [None, None]
        pieces = []

        for r in range(BOARD_SIZE):
            for c in range(BOARD_SIZE):
                piece = board[r][c]
                if piece is None:
                    continue
                side = piece.color
                pieces.append((r, c, piece))
                material[side] += PIECE_VALUES[piece.kind]
                center[side] += _center_bonus(piece.kind, r, c)
                if piece.kind == PieceKind.PAWN:
                    advancement[side] += PAWN_ADVANCE_BONUS * _advancement(side, r)
                elif piece.kind == PieceKind.KING:
                    kings[side] = (r, c)

        safety = [0.0, 0.0]
        for side in Color:
            king = kings[side]
            if king is None:
                continue
            if king[0] == HOME_ROWS[side]:
                safety[side] += KING_SHELTER_BONUS
            for r, c, piece in pieces:
                if piece.kind == PieceKind.KING:
                    continue
                dist = chebyshev(king, (r, c))
                if piece.color == side and dist == 1:
                    safety[side] += KING_DEFENDER_BONUS
                elif piece.color != side and dist <= KING_DANGER_RADIUS:
                    safety[side] -= KING_ATTACKER_PENALTY

        me, them = color, color.opponent
        w = self.weights
        mat = w.material * (material[me] - material[them])
        cen = w.center * (center[me] - center[them])
        adv = w.advancement * (advancement[me] - advancement[them])
        ks = w.king_safety * (safety[me] - safety[them])
        return PositionEval(mat + cen + adv + ks, mat, cen, adv, ks)


_default_evaluator = Evaluator()


def evaluate(board: Board, color: Color) -> float:
    """Score ``board`` for ``color`` with the default weights."""
    return _default_evaluator(board, color)
