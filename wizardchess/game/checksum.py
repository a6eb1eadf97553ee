"""Deterministic state digest for desync detection between two copies of a game."""

from __future__ import annotations

import hashlib

from wizardchess.game.board import BOARD_SIZE
from wizardchess.game.state import GameState

CHECKSUM_LENGTH = 16


def checksum_payload(state: GameState) -> str:
    """Canonical text form of board, side to move, and move count.

    Squares are written row-major, each as ``<color><kind><moved>`` or ``.``.
    Piece identities are left out: two states with the same pieces on the
    same squares digest the same no matter how they were built.
    """
    cells = []
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = state.board[row][col]
            if piece is None:
                cells.append(".")
            else:
                color = "w" if piece.color == 0 else "b"
                cells.append(f"{color}{piece.char}{int(piece.has_moved)}")
    return "/".join([
        ",".join(cells),
        "w" if state.current_player == 0 else "b",
        str(len(state.move_history)),
    ])


def checksum(state: GameState) -> str:
    """Hex digest of :func:`checksum_payload`, truncated to 16 characters."""
    digest = hashlib.sha256(checksum_payload(state).encode("ascii")).hexdigest()
    return digest[:CHECKSUM_LENGTH]
