"""Move suggestions with a short plain-English explanation."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from wizardchess.engine.search import EvalFn, best_move
from wizardchess.game.board import CENTER_SQUARES, EXTENDED_CENTER, HOME_ROWS, rc_to_notation
from wizardchess.game.rules import apply_move_to_board, generate_legal_moves, is_king_in_check
from wizardchess.game.state import Color, GameState, Move, PieceKind

logger = logging.getLogger("wizardchess.hint")

HINT_DEPTH = 2

# Category tags, in the order they are reported
CAPTURE = "capture"
WIZARD_ATTACK = "wizard_attack"
WIZARD_TELEPORT = "wizard_teleport"
PROMOTION = "promotion"
CASTLING = "castling"
KING_SAFETY = "king_safety"
DEVELOPMENT = "development"
CENTER_CONTROL = "center_control"
CHECK = "check"


@dataclass
class HintInfo:
    move: Move
    score: float
    categories: list[str] = field(default_factory=list)
    description: str = ""
    rationale: str = ""


def classify_move(state: GameState, move: Move) -> list[str]:
    """Tag a move with the categories that describe it."""
    tags: list[str] = []
    piece = move.piece
    if move.is_wizard_attack:
        tags.append(WIZARD_ATTACK)
    elif move.is_capture:
        tags.append(CAPTURE)
    if move.is_wizard_teleport:
        tags.append(WIZARD_TELEPORT)
    if move.promotion is not None:
        tags.append(PROMOTION)
    if move.is_castling:
        tags.extend([CASTLING, KING_SAFETY])
    if (piece.kind not in (PieceKind.PAWN, PieceKind.KING)
            and not piece.has_moved
            and move.from_pos.row == HOME_ROWS[piece.color]
            and not move.is_wizard_attack):
        tags.append(DEVELOPMENT)
    if not move.is_wizard_attack and (
            move.to_pos in CENTER_SQUARES or move.to_pos in EXTENDED_CENTER):
        tags.append(CENTER_CONTROL)
    after = apply_move_to_board(state.board, move)
    if is_king_in_check(after, piece.color.opponent):
        tags.append(CHECK)
    return tags


def _explain(move: Move, tags: list[str]) -> str:
    target = rc_to_notation(*move.to_pos)
    origin = rc_to_notation(*move.from_pos)
    name = move.piece.name

    if WIZARD_ATTACK in tags:
        text = (f"Your wizard on {origin} can strike the {move.captured.name} "
                f"on {target} from a distance without moving")
    elif CAPTURE in tags:
        text = f"Capture the {move.captured.name} on {target} with your {name}"
    elif PROMOTION in tags:
        text = f"Promote your pawn on {target} to a {_promotion_name(move)}"
    elif CASTLING in tags:
        text = "Castle to tuck your king away behind the rook"
    elif WIZARD_TELEPORT in tags:
        text = f"Teleport your wizard from {origin} to {target}"
    elif DEVELOPMENT in tags:
        text = f"Develop your {name} from {origin} to {target}"
    elif CENTER_CONTROL in tags:
        text = f"Move your {name} to {target} to control the center"
    else:
        text = f"Move your {name} from {origin} to {target}"

    if CHECK in tags:
        text += ", giving check"
    if CENTER_CONTROL in tags and (CAPTURE in tags or DEVELOPMENT in tags):
        text += " and gaining central space"
    return text + "."


def _promotion_name(move: Move) -> str:
    return {
        PieceKind.QUEEN: "queen",
        PieceKind.WIZARD: "wizard",
        PieceKind.ROOK: "rook",
        PieceKind.BISHOP: "bishop",
        PieceKind.KNIGHT: "knight",
    }[move.promotion]


def hint(state: GameState, color: Optional[Color] = None,
         depth: int = HINT_DEPTH,
         cancel_token: Optional[threading.Event] = None,
         evaluator: Optional[EvalFn] = None) -> Optional[HintInfo]:
    """Suggest a move for ``color`` (default: the side to move).

    Runs a shallow search and describes the chosen move. Returns None when
    the side has no legal move. The state is never modified.
    """
    if color is None:
        color = state.current_player
    if not generate_legal_moves(state):
        return None

    result = best_move(state, depth, color, cancel_token=cancel_token, evaluator=evaluator)
    tags = classify_move(state, result.move)
    logger.debug("Hint for %s: %s %s", color.name, result.move, tags)
    return HintInfo(
        move=result.move,
        score=result.score,
        categories=tags,
        description=str(result.move),
        rationale=_explain(result.move, tags),
    )
