"""Pseudo-legal move generation, one generator per piece kind.

Moves produced here respect each piece's movement pattern and board
occupancy but may leave the mover's own king in check. Castling is not
generated here; the legality filter in ``rules`` adds it.
"""

from __future__ import annotations

from typing import Callable

from wizardchess.game.board import (
    BOARD_SIZE, PAWN_DIRECTIONS, PROMOTION_ROWS, Position, in_bounds,
)
from wizardchess.game.state import (
    PROMOTION_KINDS, Board, Move, Piece, PieceKind,
)

ORTHOGONAL = [(-1, 0), (1, 0), (0, -1), (0, 1)]
DIAGONAL = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
# All 8 directions
ALL_DIRS = ORTHOGONAL + DIAGONAL
KNIGHT_JUMPS = [
    (-2, -1), (-2, 1), (-1, -2), (-1, 2),
    (1, -2), (1, 2), (2, -1), (2, 1),
]

WIZARD_RANGE = 2
# Every square within Chebyshev distance 2, row-major
WIZARD_ATTACK_OFFSETS = [
    (dr, dc)
    for dr in range(-WIZARD_RANGE, WIZARD_RANGE + 1)
    for dc in range(-WIZARD_RANGE, WIZARD_RANGE + 1)
    if (dr, dc) != (0, 0)
]

MoveGenerator = Callable[[Board, int, int, Piece, list], None]


def _slide(board: Board, row: int, col: int, piece: Piece,
           directions: list[tuple[int, int]], moves: list[Move]):
    """Ray-cast until blocked. Own pieces stop the ray, enemy pieces are captured."""
    origin = Position(row, col)
    for dr, dc in directions:
        r2, c2 = row + dr, col + dc
        while in_bounds(r2, c2):
            target = board[r2][c2]
            if target is None:
                moves.append(Move(origin, Position(r2, c2), piece))
            else:
                if target.color != piece.color:
                    moves.append(Move(origin, Position(r2, c2), piece, captured=target))
                break
            r2 += dr
            c2 += dc


def _step(board: Board, row: int, col: int, piece: Piece,
          offsets: list[tuple[int, int]], moves: list[Move]):
    """Single jumps to empty or enemy-occupied squares."""
    origin = Position(row, col)
    for dr, dc in offsets:
        r2, c2 = row + dr, col + dc
        if not in_bounds(r2, c2):
            continue
        target = board[r2][c2]
        if target is None:
            moves.append(Move(origin, Position(r2, c2), piece))
        elif target.color != piece.color:
            moves.append(Move(origin, Position(r2, c2), piece, captured=target))


def _gen_rook_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    _slide(board, row, col, piece, ORTHOGONAL, moves)


def _gen_bishop_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    _slide(board, row, col, piece, DIAGONAL, moves)


def _gen_queen_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    _slide(board, row, col, piece, ALL_DIRS, moves)


def _gen_knight_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    _step(board, row, col, piece, KNIGHT_JUMPS, moves)


def _gen_king_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    """King: 1 square, any direction. Castling is added by the legality filter."""
    _step(board, row, col, piece, ALL_DIRS, moves)


def _add_pawn_move(origin: Position, dest: Position, piece: Piece,
                   captured, moves: list[Move]):
    if dest.row == PROMOTION_ROWS[piece.color]:
        for kind in PROMOTION_KINDS:
            moves.append(Move(origin, dest, piece, captured=captured, promotion=kind))
    else:
        moves.append(Move(origin, dest, piece, captured=captured))


def _gen_pawn_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    """Pawn: one forward, two from an unmoved pawn, diagonal-forward captures.

    Forward is toward row 0 for White and toward row 9 for Black.
    """
    origin = Position(row, col)
    forward = PAWN_DIRECTIONS[piece.color]

    r1 = row + forward
    if in_bounds(r1, col) and board[r1][col] is None:
        _add_pawn_move(origin, Position(r1, col), piece, None, moves)
        r2 = row + 2 * forward
        if not piece.has_moved and in_bounds(r2, col) and board[r2][col] is None:
            _add_pawn_move(origin, Position(r2, col), piece, None, moves)

    for dc in (-1, 1):
        c2 = col + dc
        if not in_bounds(r1, c2):
            continue
        target = board[r1][c2]
        if target is not None and target.color != piece.color:
            _add_pawn_move(origin, Position(r1, c2), piece, target, moves)


def _gen_wizard_moves(board: Board, row: int, col: int, piece: Piece, moves: list[Move]):
    """Wizard: teleport or ranged attack, never both in one move.

    Teleport: up to 2 squares along any of the 8 directions onto an empty
    square. Pieces in between do not block.
    Ranged attack: any enemy piece within Chebyshev distance 2. The wizard
    stays where it is and the target is removed.
    """
    origin = Position(row, col)
    for dr, dc in ALL_DIRS:
        for dist in range(1, WIZARD_RANGE + 1):
            r2, c2 = row + dr * dist, col + dc * dist
            if not in_bounds(r2, c2):
                break
            if board[r2][c2] is None:
                moves.append(Move(origin, Position(r2, c2), piece, is_wizard_teleport=True))

    for dr, dc in WIZARD_ATTACK_OFFSETS:
        r2, c2 = row + dr, col + dc
        if not in_bounds(r2, c2):
            continue
        target = board[r2][c2]
        if target is not None and target.color != piece.color:
            moves.append(Move(origin, Position(r2, c2), piece,
                              captured=target, is_wizard_attack=True))


# One generator per kind
MOVE_GENERATORS: dict[PieceKind, MoveGenerator] = {
    PieceKind.PAWN: _gen_pawn_moves,
    PieceKind.ROOK: _gen_rook_moves,
    PieceKind.KNIGHT: _gen_knight_moves,
    PieceKind.BISHOP: _gen_bishop_moves,
    PieceKind.QUEEN: _gen_queen_moves,
    PieceKind.KING: _gen_king_moves,
    PieceKind.WIZARD: _gen_wizard_moves,
}


def generate_piece_moves(board: Board, position: tuple[int, int],
                         piece: Piece) -> list[Move]:
    """Pseudo-legal moves for ``piece`` standing on ``position``.

    Output and order are identical across calls for the same board.
    """
    row, col = position
    moves: list[Move] = []
    MOVE_GENERATORS[piece.kind](board, row, col, piece, moves)
    return moves


def destinations(board: Board, position: tuple[int, int], piece: Piece) -> list[Position]:
    """Distinct destination squares of the pseudo-legal moves, in generation order."""
    seen: set[Position] = set()
    result: list[Position] = []
    for move in generate_piece_moves(board, position, piece):
        if move.to_pos not in seen:
            seen.add(move.to_pos)
            result.append(move.to_pos)
    return result


def generate_pseudo_legal_moves(board: Board, color) -> list[Move]:
    """All pseudo-legal moves for ``color``, scanning squares row-major."""
    moves: list[Move] = []
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is None or piece.color != color:
                continue
            MOVE_GENERATORS[piece.kind](board, row, col, piece, moves)
    return moves
