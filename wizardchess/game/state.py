"""Game state representation for Wizard Chess."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Optional

from wizardchess.game.board import BOARD_SIZE, STARTING_POSITIONS, Position
from wizardchess.game.errors import NoKingFoundError


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> Color:
        return Color(1 - self)


class PieceKind(IntEnum):
    PAWN = 0
    ROOK = 1
    KNIGHT = 2
    BISHOP = 3
    QUEEN = 4
    KING = 5
    WIZARD = 6


class GamePhase(str, Enum):
    PLAYING = "playing"
    ENDED = "ended"


# Map character codes to PieceKind
PIECE_CHARS = {
    "P": PieceKind.PAWN,
    "R": PieceKind.ROOK,
    "N": PieceKind.KNIGHT,
    "B": PieceKind.BISHOP,
    "Q": PieceKind.QUEEN,
    "K": PieceKind.KING,
    "W": PieceKind.WIZARD,
}
PIECE_NAMES = {v: k for k, v in PIECE_CHARS.items()}

# Pawn promotion choices, default first
PROMOTION_KINDS = (
    PieceKind.QUEEN,
    PieceKind.WIZARD,
    PieceKind.ROOK,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
)

_ID_NAMES = {
    PieceKind.PAWN: "pawn",
    PieceKind.ROOK: "rook",
    PieceKind.KNIGHT: "knight",
    PieceKind.BISHOP: "bishop",
    PieceKind.QUEEN: "queen",
    PieceKind.KING: "king",
    PieceKind.WIZARD: "wizard",
}


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    ``identity`` survives moves so collaborators can track a piece across
    turns. It takes no part in rules, equality, or checksums.
    """
    kind: PieceKind
    color: Color
    identity: str = field(default="", compare=False)
    has_moved: bool = False

    @property
    def char(self) -> str:
        return PIECE_NAMES[self.kind]

    @property
    def name(self) -> str:
        return _ID_NAMES[self.kind]

    def moved(self) -> Piece:
        return self if self.has_moved else replace(self, has_moved=True)

    def promoted(self, kind: PieceKind, row: int, col: int) -> Piece:
        color_name = self.color.name.lower()
        return Piece(kind, self.color,
                     identity=f"{color_name}-{_ID_NAMES[kind]}-promoted-{row}-{col}",
                     has_moved=True)


def make_identity(kind: PieceKind, color: Color, col: int) -> str:
    """Starting identity such as ``w-rook-1`` or ``b-pawn-3``."""
    prefix = "w" if color == Color.WHITE else "b"
    return f"{prefix}-{_ID_NAMES[kind]}-{col}"


@dataclass(frozen=True, eq=False)
class Move:
    """A single move in Wizard Chess.

    Equality looks at the geometry only (squares, wizard-attack flag,
    promotion kind, castling flag), so a move parsed from notation matches
    the generated one regardless of piece identity.
    """
    from_pos: Position
    to_pos: Position
    piece: Piece
    captured: Optional[Piece] = None
    is_wizard_teleport: bool = False
    is_wizard_attack: bool = False
    promotion: Optional[PieceKind] = None
    is_castling: bool = False
    rook_move: Optional[tuple[Position, Position]] = None

    def __post_init__(self):
        object.__setattr__(self, "from_pos", Position(*self.from_pos))
        object.__setattr__(self, "to_pos", Position(*self.to_pos))
        if self.rook_move is not None:
            rf, rt = self.rook_move
            object.__setattr__(self, "rook_move", (Position(*rf), Position(*rt)))
        if self.is_wizard_teleport and self.is_wizard_attack:
            raise ValueError("A wizard move cannot both teleport and attack")
        if (self.is_wizard_teleport or self.is_wizard_attack) \
                and self.piece.kind != PieceKind.WIZARD:
            raise ValueError("Only a wizard can teleport or make a ranged attack")
        if self.is_wizard_attack and self.captured is None:
            raise ValueError("A wizard attack must capture a piece")

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def key(self) -> tuple:
        return (tuple(self.from_pos), tuple(self.to_pos),
                self.is_wizard_attack, self.promotion, self.is_castling)

    def __eq__(self, other):
        if not isinstance(other, Move):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(("move",) + self.key())

    def __str__(self):
        from wizardchess.game.notation import move_to_wcn
        return move_to_wcn(self)


# ---------------------------------------------------------------------------
# Wire form: plain dicts with string tags
# ---------------------------------------------------------------------------

def piece_to_dict(piece: Piece) -> dict:
    return {
        "kind": piece.name,
        "color": piece.color.name.lower(),
        "id": piece.identity,
        "has_moved": piece.has_moved,
    }


def piece_from_dict(d: dict) -> Piece:
    return Piece(
        PieceKind[d["kind"].upper()],
        Color[d["color"].upper()],
        identity=d.get("id", ""),
        has_moved=bool(d.get("has_moved", False)),
    )


def move_to_dict(move: Move) -> dict:
    return {
        "from": list(move.from_pos),
        "to": list(move.to_pos),
        "piece": piece_to_dict(move.piece),
        "captured": piece_to_dict(move.captured) if move.captured else None,
        "is_wizard_teleport": move.is_wizard_teleport,
        "is_wizard_attack": move.is_wizard_attack,
        "promotion": _ID_NAMES[move.promotion] if move.promotion is not None else None,
        "is_castling": move.is_castling,
        "rook_move": ({"from": list(move.rook_move[0]), "to": list(move.rook_move[1])}
                      if move.rook_move else None),
    }


def move_from_dict(d: dict) -> Move:
    rook_move = None
    if d.get("rook_move"):
        rook_move = (tuple(d["rook_move"]["from"]), tuple(d["rook_move"]["to"]))
    promotion = d.get("promotion")
    return Move(
        from_pos=tuple(d["from"]),
        to_pos=tuple(d["to"]),
        piece=piece_from_dict(d["piece"]),
        captured=piece_from_dict(d["captured"]) if d.get("captured") else None,
        is_wizard_teleport=bool(d.get("is_wizard_teleport", False)),
        is_wizard_attack=bool(d.get("is_wizard_attack", False)),
        promotion=PieceKind[promotion.upper()] if promotion else None,
        is_castling=bool(d.get("is_castling", False)),
        rook_move=rook_move,
    )


Board = list[list[Optional[Piece]]]


def empty_board() -> Board:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def copy_board(board: Board) -> Board:
    """Copy the grid. Pieces are immutable, so copying rows is enough."""
    return [row[:] for row in board]


def position_key(board: Board, to_move: Color) -> tuple:
    """Hashable key for a board and side to move.

    Pieces hash without their identity, so the key covers kind, color and
    has_moved on every square.
    """
    return (tuple(tuple(row) for row in board), to_move)


def count_kings(board: Board, color: Color) -> int:
    count = 0
    for row in board:
        for cell in row:
            if cell is not None and cell.kind == PieceKind.KING and cell.color == color:
                count += 1
    return count


class GameState:
    """Complete game state for Wizard Chess.

    Instances are treated as immutable once handed out: the rules engine
    builds a new state for every move and never writes to an existing board.
    """

    def __init__(self, board: Optional[Board] = None,
                 current_player: Color = Color.WHITE,
                 move_history: Optional[list[Move]] = None):
        if board is None:
            board = self._starting_board()
        self.board: Board = board
        self.current_player: Color = Color(current_player)
        self.move_history: list[Move] = list(move_history or [])
        self.in_check: bool = False
        self.checkmate: bool = False
        self.stalemate: bool = False
        self.phase: GamePhase = GamePhase.PLAYING
        self.winner: Optional[Color] = None
        self.validate()

    @staticmethod
    def _starting_board() -> Board:
        """Place pieces in their starting positions."""
        board = empty_board()
        for (row, col), (char, color) in STARTING_POSITIONS.items():
            kind = PIECE_CHARS[char]
            board[row][col] = Piece(kind, Color(color), make_identity(kind, Color(color), col))
        return board

    @classmethod
    def from_pieces(cls, pieces: dict[tuple[int, int], Piece],
                    current_player: Color = Color.WHITE) -> GameState:
        """Build a constructed position and compute its check/terminal flags."""
        board = empty_board()
        for (row, col), piece in pieces.items():
            board[row][col] = piece
        state = cls(board, current_player)
        state.refresh_status()
        return state

    def refresh_status(self) -> GameState:
        """Recompute in_check, checkmate, stalemate, phase and winner.

        Raises ValueError if the side that just moved is left in check: its
        king could be captured, which no legal game reaches.
        """
        from wizardchess.game.rules import compute_status, is_king_in_check
        if is_king_in_check(self.board, self.current_player.opponent):
            raise ValueError(
                f"{self.current_player.opponent.name.lower()} king is in check "
                f"with {self.current_player.name.lower()} to move"
            )
        compute_status(self)
        return self

    def validate(self) -> None:
        """Enforce exactly one king per color."""
        for color in Color:
            n = count_kings(self.board, color)
            if n != 1:
                raise NoKingFoundError(color, n)

    @property
    def done(self) -> bool:
        return self.phase == GamePhase.ENDED

    @property
    def turn(self) -> int:
        """Full-move number, starting at 1."""
        return len(self.move_history) // 2 + 1

    def clone(self) -> GameState:
        """Return an independent copy of this state."""
        new = GameState.__new__(GameState)
        new.board = copy_board(self.board)
        new.current_player = self.current_player
        new.move_history = list(self.move_history)
        new.in_check = self.in_check
        new.checkmate = self.checkmate
        new.stalemate = self.stalemate
        new.phase = self.phase
        new.winner = self.winner
        return new

    def get_piece_at(self, row: int, col: int) -> Optional[Piece]:
        """Get piece at position, or None."""
        if 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE:
            return self.board[row][col]
        return None

    def to_dict(self) -> dict:
        board_data = []
        for row in range(BOARD_SIZE):
            board_data.append([
                piece_to_dict(cell) if cell is not None else None
                for cell in self.board[row]
            ])
        return {
            "board": board_data,
            "current_player": self.current_player.name.lower(),
            "move_history": [move_to_dict(m) for m in self.move_history],
            "in_check": self.in_check,
            "checkmate": self.checkmate,
            "stalemate": self.stalemate,
            "phase": self.phase.value,
            "winner": self.winner.name.lower() if self.winner is not None else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> GameState:
        board = empty_board()
        rows = d["board"]
        if len(rows) != BOARD_SIZE or any(len(r) != BOARD_SIZE for r in rows):
            raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}")
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                cell = rows[row][col]
                if cell is not None:
                    board[row][col] = piece_from_dict(cell)
        state = cls(
            board,
            Color[d["current_player"].upper()],
            [move_from_dict(m) for m in d.get("move_history", [])],
        )
        # Flags are derived from the board, never trusted from the payload
        state.refresh_status()
        return state

    def serialize(self) -> str:
        """Serialize game state to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, data: str) -> GameState:
        """Deserialize game state from JSON string."""
        return cls.from_dict(json.loads(data))

    def to_display_board(self) -> list[list]:
        """Convert to the format expected by render_board."""
        display = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                cell = self.board[row][col]
                if cell is not None:
                    display[row][col] = (cell.char, int(cell.color))
        return display
