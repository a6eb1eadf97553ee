"""Wizard Chess Notation (WCN) parser and emitter.

Move formats:
  Pb2-b4      Move pawn from b2 to b4
  Nc1xd3      Capture: knight at c1 captures piece at d3
  Wa1~c3      Wizard ranged attack from a1 on c3 (wizard stays on a1)
  Wa1-a3      Wizard teleport (a plain move for a wizard)
  Pc9-c10>Q   Pawn move with promotion (Q, W, R, B or N)
  Kf1-c1      Castling, written as the king's move

Game format (similar to PGN):
  [White "Human"]
  [Black "Search depth 4"]
  [Result "1-0"]

  1. Pe2-e4 Pe9-e7
  2. Wa1-b2 Wj10~h8
  ...
"""

from __future__ import annotations

import re
from typing import Optional

from wizardchess.game.board import notation_to_rc, rc_to_notation
from wizardchess.game.errors import IllegalMoveError
from wizardchess.game.state import PIECE_CHARS, PIECE_NAMES, GameState, Move

RESULTS = ("1-0", "0-1", "1/2-1/2", "*")

_SQ = r"[a-j](?:10|[1-9])"
_MOVE_RE = re.compile(
    rf"^([PRNBQKW])({_SQ})([-x~])({_SQ})(?:>([QWRBN]))?$"
)


def move_to_wcn(move: Move) -> str:
    """Convert a move to a WCN string."""
    from_sq = rc_to_notation(*move.from_pos)
    to_sq = rc_to_notation(*move.to_pos)
    if move.is_wizard_attack:
        sep = "~"
    elif move.is_capture:
        sep = "x"
    else:
        sep = "-"
    text = f"{move.piece.char}{from_sq}{sep}{to_sq}"
    if move.promotion is not None:
        text += f">{PIECE_NAMES[move.promotion]}"
    return text


def parse_wcn(wcn: str) -> dict:
    """Split a WCN string into its parts without looking at a position.

    Raises:
        ValueError: If the notation is invalid.
    """
    m = _MOVE_RE.match(wcn.strip())
    if not m:
        raise ValueError(f"Invalid WCN notation: {wcn!r}")
    piece_char, from_sq, sep, to_sq, promo = m.groups()
    return {
        "kind": PIECE_CHARS[piece_char],
        "from": notation_to_rc(from_sq),
        "to": notation_to_rc(to_sq),
        "is_capture": sep != "-",
        "is_wizard_attack": sep == "~",
        "promotion": PIECE_CHARS[promo] if promo else None,
    }


def wcn_to_move(state: GameState, wcn: str) -> Move:
    """Resolve a WCN string against the legal moves of ``state``.

    Raises:
        ValueError: If the notation is invalid.
        IllegalMoveError: If no legal move matches.
    """
    from wizardchess.game.rules import legal_moves

    parts = parse_wcn(wcn)
    for move in legal_moves(state, parts["from"]):
        if (move.to_pos == parts["to"]
                and move.piece.kind == parts["kind"]
                and move.is_wizard_attack == parts["is_wizard_attack"]
                and move.is_capture == parts["is_capture"]
                and move.promotion == parts["promotion"]):
            return move
    raise IllegalMoveError(wcn)


def game_to_wcn(moves: list[Move],
                headers: Optional[dict[str, str]] = None,
                result: Optional[str] = None) -> str:
    """Convert a move list (e.g. ``state.move_history``) to a WCN game record.

    Args:
        moves: Moves in the order they were played.
        headers: Optional dict of header key-value pairs.
        result: Game result string ("1-0", "0-1", "1/2-1/2").
    """
    lines = []

    if headers:
        for key, value in headers.items():
            lines.append(f'[{key} "{value}"]')
    if result:
        lines.append(f'[Result "{result}"]')
    if headers or result:
        lines.append("")

    move_strs = [move_to_wcn(m) for m in moves]

    # Format as numbered move pairs
    for i in range(0, len(move_strs), 2):
        pair = " ".join(move_strs[i:i + 2])
        lines.append(f"{i // 2 + 1}. {pair}")

    if result:
        lines.append(result)

    return "\n".join(lines)


def wcn_to_game(wcn_text: str) -> tuple[dict[str, str], list[str], Optional[str]]:
    """Parse a WCN game record.

    Move tokens are checked for syntax only; replay them with
    :func:`replay_game` to resolve them against positions.

    Returns:
        (headers, move_tokens, result)
    """
    headers: dict[str, str] = {}
    tokens: list[str] = []
    result: Optional[str] = None

    for line in wcn_text.strip().split("\n"):
        line = line.strip()
        if not line:
            continue

        # Header: [Key "Value"]
        if line.startswith("[") and line.endswith("]"):
            m = re.match(r'(\w+)\s+"([^"]*)"', line[1:-1])
            if m:
                headers[m.group(1)] = m.group(2)
            continue

        # Strip move number prefix
        line = re.sub(r"^\d+\.\s*", "", line)
        for token in line.split():
            if token in RESULTS:
                result = token
                continue
            parse_wcn(token)
            tokens.append(token)

    return headers, tokens, result


def replay_game(tokens: list[str], state: Optional[GameState] = None) -> GameState:
    """Play WCN tokens from ``state`` (default: the initial position)."""
    from wizardchess.game.rules import create_initial_state, make_move

    if state is None:
        state = create_initial_state()
    for token in tokens:
        state = make_move(state, wcn_to_move(state, token))
    return state
