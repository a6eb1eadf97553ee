"""Board encoding for learned evaluation models.

Input planes (17 x 10 x 10), from the side to move's perspective:
  0-6:   side to move's pieces (one plane per PieceKind)
  7-13:  opponent's pieces
  14:    side to move (1.0 = White)
  15:    pieces that have not moved yet (either color)
  16:    side to move is in check
"""

from __future__ import annotations

import numpy as np

from wizardchess.game.board import BOARD_SIZE
from wizardchess.game.state import Board, Color, GameState, PieceKind

NUM_PIECE_KINDS = len(PieceKind)
NUM_INPUT_PLANES = 2 * NUM_PIECE_KINDS + 3

SIDE_PLANE = 2 * NUM_PIECE_KINDS
UNMOVED_PLANE = SIDE_PLANE + 1
CHECK_PLANE = SIDE_PLANE + 2


def board_to_planes(board: Board, perspective: Color, in_check: bool = False) -> np.ndarray:
    """Encode a bare board as seen by ``perspective``."""
    planes = np.zeros((NUM_INPUT_PLANES, BOARD_SIZE, BOARD_SIZE), dtype=np.float32)

    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is None:
                continue
            kind = int(piece.kind)
            if piece.color == perspective:
                planes[kind, row, col] = 1.0
            else:
                planes[NUM_PIECE_KINDS + kind, row, col] = 1.0
            if not piece.has_moved:
                planes[UNMOVED_PLANE, row, col] = 1.0

    planes[SIDE_PLANE, :, :] = 1.0 if perspective == Color.WHITE else 0.0
    planes[CHECK_PLANE, :, :] = 1.0 if in_check else 0.0
    return planes


def state_to_planes(state: GameState) -> np.ndarray:
    """Convert game state to 17x10x10 input planes for the side to move."""
    return board_to_planes(state.board, state.current_player, state.in_check)


def states_to_batch(states: list[GameState]) -> np.ndarray:
    """Stack several states into an (N, 17, 10, 10) batch."""
    if not states:
        return np.zeros((0, NUM_INPUT_PLANES, BOARD_SIZE, BOARD_SIZE), dtype=np.float32)
    return np.stack([state_to_planes(s) for s in states])
