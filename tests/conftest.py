"""Shared fixtures and position builders for the Wizard Chess tests."""

import pytest

from wizardchess.game.board import notation_to_rc
from wizardchess.game.state import PIECE_CHARS, Color, GameState, Piece


def build_state(pieces: dict[str, str], to_move: Color = Color.WHITE,
                moved: tuple[str, ...] = ()) -> GameState:
    """Build a position from ``{"f1": "wK", "a10": "bR", ...}``.

    Pieces start unmoved unless their square is listed in ``moved``.
    """
    placed = {}
    for square, code in pieces.items():
        color = Color.WHITE if code[0] == "w" else Color.BLACK
        kind = PIECE_CHARS[code[1]]
        placed[notation_to_rc(square)] = Piece(kind, color, identity=f"{code}-{square}",
                                               has_moved=square in moved)
    return GameState.from_pieces(placed, to_move)


@pytest.fixture
def initial_state():
    return GameState()


@pytest.fixture
def back_rank_state():
    """White to move; Ra5-a10 is the only mate."""
    return build_state({
        "f1": "wK", "a5": "wR",
        "f10": "bK", "e9": "bP", "f9": "bP", "g9": "bP",
    })


@pytest.fixture
def stalemate_state():
    """Black to move, not in check, no legal move."""
    return build_state({"j1": "wK", "b8": "wQ", "a10": "bK"}, to_move=Color.BLACK)


@pytest.fixture
def wizard_state():
    """White wizard on e6 (4,4) with a black pawn on g6 (4,6)."""
    return build_state({"a1": "wK", "e6": "wW", "g6": "bP", "j10": "bK"})


@pytest.fixture
def castling_state():
    """White king and queen-side rook unmoved with an empty path between."""
    return build_state({
        "f1": "wK", "b1": "wR", "i1": "wR", "a1": "wW",
        "f10": "bK",
    })
