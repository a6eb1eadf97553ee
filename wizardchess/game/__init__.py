"""Wizard Chess game engine: board, state, move generation, rules, notation."""

from wizardchess.game.board import BOARD_SIZE, STARTING_POSITIONS, Position, render_board
from wizardchess.game.state import (
    Color, PieceKind, GamePhase, Piece, Move, GameState,
    move_to_dict, move_from_dict,
)
from wizardchess.game.errors import WizardChessError, IllegalMoveError, NoKingFoundError
from wizardchess.game.rules import (
    create_initial_state, legal_moves, legal_moves_for, generate_legal_moves,
    make_move, is_square_attacked, is_king_in_check, check_winner,
)
from wizardchess.game.checksum import checksum
from wizardchess.game.notation import move_to_wcn, wcn_to_move, game_to_wcn, wcn_to_game

__all__ = [
    "BOARD_SIZE", "STARTING_POSITIONS", "Position", "render_board",
    "Color", "PieceKind", "GamePhase", "Piece", "Move", "GameState",
    "move_to_dict", "move_from_dict",
    "WizardChessError", "IllegalMoveError", "NoKingFoundError",
    "create_initial_state", "legal_moves", "legal_moves_for", "generate_legal_moves",
    "make_move", "is_square_attacked", "is_king_in_check", "check_winner",
    "checksum",
    "move_to_wcn", "wcn_to_move", "game_to_wcn", "wcn_to_game",
]
