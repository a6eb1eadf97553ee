"""Board constants, starting layout, square names, and text-based rendering."""

from __future__ import annotations

from typing import NamedTuple

BOARD_SIZE = 10


class Position(NamedTuple):
    """A board square. Row 0 is Black's back rank, row 9 is White's."""
    row: int
    col: int


# Back rank, column 0 -> 9. Wizards sit in the corners.
BACK_RANK = "WRNBQKBNRW"

# Starting positions: dict mapping (row, col) -> (piece_char, color)
# White (color 0) on rows 8-9 (bottom), Black (color 1) on rows 0-1 (top).
STARTING_POSITIONS: dict[tuple[int, int], tuple[str, int]] = {
    **{(9, col): (char, 0) for col, char in enumerate(BACK_RANK)},
    **{(8, col): ("P", 0) for col in range(BOARD_SIZE)},
    **{(0, col): (char, 1) for col, char in enumerate(BACK_RANK)},
    **{(1, col): ("P", 1) for col in range(BOARD_SIZE)},
}

# Home row per color index and the row a pawn promotes on
HOME_ROWS = (BOARD_SIZE - 1, 0)
PROMOTION_ROWS = (0, BOARD_SIZE - 1)
PAWN_DIRECTIONS = (-1, 1)

# Central 2x2 and the ring around it
CENTER_SQUARES: frozenset[tuple[int, int]] = frozenset(
    {(4, 4), (4, 5), (5, 4), (5, 5)}
)
EXTENDED_CENTER: frozenset[tuple[int, int]] = frozenset(
    (r, c) for r in range(3, 7) for c in range(3, 7)
) - CENTER_SQUARES

# Column labels for notation
COL_LABELS = "abcdefghij"


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def chebyshev(a: tuple[int, int], b: tuple[int, int]) -> int:
    """King-move distance between two squares."""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def rc_to_notation(row: int, col: int) -> str:
    """Convert (row, col) to a square name like 'a1' (row 9) or 'j10' (row 0)."""
    return f"{COL_LABELS[col]}{BOARD_SIZE - row}"


def notation_to_rc(sq: str) -> Position:
    """Convert a square name like 'e4' or 'b10' to (row, col)."""
    sq = sq.strip().lower()
    if len(sq) < 2 or sq[0] not in COL_LABELS or not sq[1:].isdigit():
        raise ValueError(f"Invalid square: {sq!r}")
    rank = int(sq[1:])
    if not 1 <= rank <= BOARD_SIZE:
        raise ValueError(f"Invalid square: {sq!r}")
    return Position(BOARD_SIZE - rank, COL_LABELS.index(sq[0]))


def render_board(board, turn: int | None = None,
                 current_player: int | None = None,
                 highlights: set[tuple[int, int]] | None = None) -> str:
    """Render the board as a text string.

    Args:
        board: 10x10 list of lists. Each cell is None or (piece_char, color).
        turn: Optional full-move number.
        current_player: Optional side to move (0=White, 1=Black).
        highlights: Optional squares to mark with '*' (e.g. legal destinations).
    """
    lines = []

    if turn is not None:
        player_name = "White" if current_player == 0 else "Black"
        lines.append(f"Move {turn} - {player_name} to move")
        lines.append("")

    highlights = highlights or set()
    files = "   ".join(COL_LABELS)
    border = "   +" + "---+" * BOARD_SIZE

    lines.append(f"     {files}")
    lines.append(border)

    for row in range(BOARD_SIZE):
        rank = BOARD_SIZE - row
        row_str = f"{rank:>2} |"
        for col in range(BOARD_SIZE):
            cell = board[row][col]
            mark = "*" if (row, col) in highlights else " "
            if cell is not None:
                piece_char, color = cell
                # Lowercase for black, uppercase for white
                display = piece_char if color == 0 else piece_char.lower()
                row_str += f"{mark}{display} |"
            else:
                row_str += f" {mark} |"
        row_str += f" {rank}"
        lines.append(row_str)
        lines.append(border)

    lines.append(f"     {files}")

    return "\n".join(lines)
