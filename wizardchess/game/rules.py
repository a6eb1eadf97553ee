"""Check detection, legal move filtering, castling, and move execution.

Wizard Chess rules on a 10x10 board:
- Standard chess pieces, no en passant.
- Pawns promote on the far rank (Queen, Wizard, Rook, Bishop or Knight).
- Wizard either teleports up to 2 squares in a straight line onto an empty
  square, or removes an enemy piece within 2 squares (Chebyshev) while
  staying put.
- Castling: king moves three squares toward an unmoved rook, the rook lands
  next to the king on the inner side.
"""

from __future__ import annotations

import logging
from typing import Optional

from wizardchess.game.board import (
    BOARD_SIZE, HOME_ROWS, PAWN_DIRECTIONS, Position, in_bounds,
)
from wizardchess.game.errors import IllegalMoveError, NoKingFoundError
from wizardchess.game.movegen import (
    DIAGONAL, KNIGHT_JUMPS, MOVE_GENERATORS, ORTHOGONAL, WIZARD_ATTACK_OFFSETS,
    generate_piece_moves,
)
from wizardchess.game.state import (
    Board, Color, GamePhase, GameState, Move, Piece, PieceKind, copy_board,
)

logger = logging.getLogger("wizardchess.rules")

CASTLING_KING_STEPS = 3

_ORTHO_SLIDERS = (PieceKind.ROOK, PieceKind.QUEEN)
_DIAG_SLIDERS = (PieceKind.BISHOP, PieceKind.QUEEN)


def create_initial_state() -> GameState:
    """A fresh game: standard layout, White to move."""
    return GameState()


def find_king(board: Board, color: Color) -> Position:
    """Locate the king of ``color``. A missing king is a corrupted state."""
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            p = board[row][col]
            if p is not None and p.kind == PieceKind.KING and p.color == color:
                return Position(row, col)
    raise NoKingFoundError(color, 0)


def is_square_attacked(board: Board, square: tuple[int, int], by_color: Color) -> bool:
    """Check if a piece of the other side standing on ``square`` could be
    captured by ``by_color``.

    Checks outward from the target square along each attack pattern.
    Wizard ranged attacks count; wizard teleports do not, and pawns attack
    diagonally forward only.
    """
    tr, tc = square

    # Pawns: a pawn one row "behind" the square, one column over
    pr = tr - PAWN_DIRECTIONS[by_color]
    for dc in (-1, 1):
        pc = tc + dc
        if in_bounds(pr, pc):
            p = board[pr][pc]
            if p is not None and p.color == by_color and p.kind == PieceKind.PAWN:
                return True

    for dr, dc in KNIGHT_JUMPS:
        r, c = tr + dr, tc + dc
        if in_bounds(r, c):
            p = board[r][c]
            if p is not None and p.color == by_color and p.kind == PieceKind.KNIGHT:
                return True

    # Wizards reach the whole 5x5 box, kings the inner ring
    for dr, dc in WIZARD_ATTACK_OFFSETS:
        r, c = tr + dr, tc + dc
        if not in_bounds(r, c):
            continue
        p = board[r][c]
        if p is None or p.color != by_color:
            continue
        if p.kind == PieceKind.WIZARD:
            return True
        if p.kind == PieceKind.KING and abs(dr) <= 1 and abs(dc) <= 1:
            return True

    for directions, sliders in ((ORTHOGONAL, _ORTHO_SLIDERS), (DIAGONAL, _DIAG_SLIDERS)):
        for dr, dc in directions:
            r, c = tr + dr, tc + dc
            while in_bounds(r, c):
                p = board[r][c]
                if p is not None:
                    if p.color == by_color and p.kind in sliders:
                        return True
                    break
                r += dr
                c += dc

    return False


def is_king_in_check(board: Board, color: Color) -> bool:
    """Check if the king of ``color`` is under attack."""
    king_pos = find_king(board, color)
    return is_square_attacked(board, king_pos, color.opponent)


def _is_safe_after(scratch: Board, move: Move, color: Color,
                   king_pos: tuple[int, int]) -> bool:
    """Make/unmake ``move`` on a scratch board and test the mover's king.

    ``king_pos`` is where the mover's king stands before the move.
    """
    fr, fc = move.from_pos
    tr, tc = move.to_pos
    moving = scratch[fr][fc]
    captured = scratch[tr][tc]

    if move.is_wizard_attack:
        # Target removed, wizard stays
        scratch[tr][tc] = None
    else:
        scratch[fr][fc] = None
        scratch[tr][tc] = moving

    rook = None
    if move.is_castling:
        (rfr, rfc), (rtr, rtc) = move.rook_move
        rook = scratch[rfr][rfc]
        scratch[rfr][rfc] = None
        scratch[rtr][rtc] = rook

    if moving is not None and moving.kind == PieceKind.KING:
        king_pos = move.to_pos
    safe = not is_square_attacked(scratch, king_pos, color.opponent)

    # Unmake
    if rook is not None:
        scratch[rtr][rtc] = None
        scratch[rfr][rfc] = rook
    scratch[fr][fc] = moving
    scratch[tr][tc] = captured
    return safe


def castling_moves(board: Board, position: tuple[int, int], king: Piece) -> list[Move]:
    """Castling candidates for an unmoved king, queen side (toward column 0) first.

    The partner rook is the first piece met along the home row, must be
    unmoved, and must stand at least four squares from the king. The king's
    origin, both squares it crosses, and its landing square must be safe.
    """
    if king.kind != PieceKind.KING or king.has_moved:
        return []
    row, col = position
    if row != HOME_ROWS[king.color]:
        return []
    opponent = king.color.opponent
    if is_square_attacked(board, position, opponent):
        return []

    moves: list[Move] = []
    for step in (-1, 1):
        c = col + step
        while in_bounds(row, c) and board[row][c] is None:
            c += step
        if not in_bounds(row, c):
            continue
        rook = board[row][c]
        if rook.kind != PieceKind.ROOK or rook.color != king.color or rook.has_moved:
            continue
        if abs(c - col) <= CASTLING_KING_STEPS:
            continue
        path = [(row, col + i * step) for i in range(1, CASTLING_KING_STEPS + 1)]
        if any(is_square_attacked(board, sq, opponent) for sq in path):
            continue
        king_to = Position(row, col + CASTLING_KING_STEPS * step)
        rook_to = Position(row, king_to.col - step)
        moves.append(Move(
            Position(row, col), king_to, king,
            is_castling=True,
            rook_move=(Position(row, c), rook_to),
        ))
    return moves


def _legal_piece_moves(board: Board, scratch: Board, position: tuple[int, int],
                       piece: Piece, king_pos: tuple[int, int]) -> list[Move]:
    pseudo = generate_piece_moves(board, position, piece)
    if piece.kind == PieceKind.KING:
        pseudo.extend(castling_moves(board, position, piece))
    return [m for m in pseudo if _is_safe_after(scratch, m, piece.color, king_pos)]


def legal_moves(state: GameState, position: tuple[int, int]) -> list[Move]:
    """Legal moves of the piece on ``position``.

    Empty squares, pieces of the side not on move, and finished games yield
    no moves. The state itself is never written to.
    """
    if state.done:
        return []
    row, col = position
    if not in_bounds(row, col):
        return []
    piece = state.board[row][col]
    if piece is None or piece.color != state.current_player:
        return []
    king_pos = find_king(state.board, piece.color)
    scratch = copy_board(state.board)
    return _legal_piece_moves(state.board, scratch, Position(row, col), piece, king_pos)


def legal_moves_for(state: GameState, position: tuple[int, int]) -> list[Position]:
    """Destination squares the piece on ``position`` may legally reach.

    Used by collaborators to highlight squares. Duplicates (the five
    promotion choices share one square) are folded, order is preserved.
    """
    seen: set[Position] = set()
    result: list[Position] = []
    for move in legal_moves(state, position):
        if move.to_pos not in seen:
            seen.add(move.to_pos)
            result.append(move.to_pos)
    return result


def legal_moves_on_board(board: Board, color: Color) -> list[Move]:
    """All legal moves for ``color``, pieces scanned row-major."""
    king_pos = find_king(board, color)
    scratch = copy_board(board)
    moves: list[Move] = []
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is None or piece.color != color:
                continue
            moves.extend(_legal_piece_moves(board, scratch, Position(row, col),
                                            piece, king_pos))
    return moves


def generate_legal_moves(state: GameState) -> list[Move]:
    """Generate all legal moves for the side to move."""
    if state.done:
        return []
    return legal_moves_on_board(state.board, state.current_player)


def has_legal_move(board: Board, color: Color) -> bool:
    """True as soon as one legal move for ``color`` is found.

    Castling is skipped: whenever castling is legal, the king's single step
    toward the rook is legal too.
    """
    king_pos = find_king(board, color)
    scratch = copy_board(board)
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is None or piece.color != color:
                continue
            moves: list[Move] = []
            MOVE_GENERATORS[piece.kind](board, row, col, piece, moves)
            for move in moves:
                if _is_safe_after(scratch, move, color, king_pos):
                    return True
    return False


def apply_move_to_board(board: Board, move: Move) -> Board:
    """Return a new board with ``move`` played. No legality checks."""
    new = copy_board(board)
    fr, fc = move.from_pos
    tr, tc = move.to_pos

    if move.is_wizard_attack:
        # Ranged capture: target is simply removed, wizard stays untouched
        new[tr][tc] = None
        return new

    piece = new[fr][fc]
    new[fr][fc] = None
    if move.promotion is not None:
        new[tr][tc] = piece.promoted(move.promotion, tr, tc)
    else:
        new[tr][tc] = piece.moved()

    if move.is_castling:
        (rfr, rfc), (rtr, rtc) = move.rook_move
        rook = new[rfr][rfc]
        new[rfr][rfc] = None
        new[rtr][rtc] = rook.moved()

    return new


def compute_status(state: GameState) -> GameState:
    """Set check, checkmate, stalemate, phase and winner for the side to move."""
    player = state.current_player
    state.in_check = is_king_in_check(state.board, player)
    can_move = has_legal_move(state.board, player)
    state.checkmate = state.in_check and not can_move
    state.stalemate = not state.in_check and not can_move
    state.winner = player.opponent if state.checkmate else None
    state.phase = GamePhase.PLAYING if can_move else GamePhase.ENDED
    return state


def make_move(state: GameState, move: Move) -> GameState:
    """Apply a legal move and return the new state.

    The move must be one of ``legal_moves(state, move.from_pos)``; anything
    else raises ``IllegalMoveError`` and leaves ``state`` untouched. The
    generated move (with its authoritative capture and castling data) is
    what gets recorded in the history.
    """
    if state.done:
        raise IllegalMoveError(move, "the game is over")

    candidates = legal_moves(state, move.from_pos)
    try:
        move = candidates[candidates.index(move)]
    except ValueError:
        raise IllegalMoveError(move) from None

    board = apply_move_to_board(state.board, move)
    new_state = GameState(board, state.current_player.opponent,
                          state.move_history + [move])
    compute_status(new_state)

    logger.debug("%s played %s", state.current_player.name, move)
    if new_state.checkmate:
        logger.info("Checkmate: %s wins after %d plies",
                    new_state.winner.name, len(new_state.move_history))
    elif new_state.stalemate:
        logger.info("Stalemate after %d plies", len(new_state.move_history))

    return new_state


def check_winner(state: GameState) -> tuple[bool, Optional[Color]]:
    """Check if the game is over.

    Returns (is_done, winner) where winner is None for a draw.
    """
    return state.done, state.winner
