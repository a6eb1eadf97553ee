"""Unit tests for the Wizard Chess rules engine."""

import pytest

from wizardchess.game.board import (
    BOARD_SIZE, STARTING_POSITIONS, Position, notation_to_rc, rc_to_notation, render_board,
)
from wizardchess.game.errors import IllegalMoveError, NoKingFoundError
from wizardchess.game.movegen import MOVE_GENERATORS, destinations, generate_piece_moves
from wizardchess.game.rules import (
    apply_move_to_board, castling_moves, check_winner, create_initial_state,
    find_king, generate_legal_moves, is_king_in_check, is_square_attacked,
    legal_moves, legal_moves_for, make_move,
)
from wizardchess.game.state import (
    PROMOTION_KINDS, Color, GamePhase, GameState, Move, Piece, PieceKind,
    empty_board, move_from_dict, move_to_dict, position_key,
)
from wizardchess.game.checksum import checksum
from wizardchess.game.notation import wcn_to_move

from conftest import build_state


def _play(state, *wcn_moves):
    for text in wcn_moves:
        state = make_move(state, wcn_to_move(state, text))
    return state


class TestBoard:
    def test_board_size(self):
        assert BOARD_SIZE == 10

    def test_starting_positions(self):
        white = [k for k, (_, color) in STARTING_POSITIONS.items() if color == 0]
        black = [k for k, (_, color) in STARTING_POSITIONS.items() if color == 1]
        assert len(white) == 20
        assert len(black) == 20
        assert STARTING_POSITIONS[(9, 5)] == ("K", 0)
        assert STARTING_POSITIONS[(0, 0)] == ("W", 1)
        assert STARTING_POSITIONS[(9, 9)] == ("W", 0)

    def test_notation_conversion(self):
        assert rc_to_notation(9, 0) == "a1"
        assert rc_to_notation(0, 9) == "j10"
        assert rc_to_notation(4, 4) == "e6"
        assert notation_to_rc("f1") == (9, 5)

    def test_notation_roundtrip(self):
        for r in range(BOARD_SIZE):
            for c in range(BOARD_SIZE):
                assert notation_to_rc(rc_to_notation(r, c)) == (r, c)

    @pytest.mark.parametrize("square", ["k1", "a0", "a11", "", "e", "ee"])
    def test_invalid_square(self, square):
        with pytest.raises(ValueError):
            notation_to_rc(square)

    def test_render_board(self):
        state = GameState()
        text = render_board(state.to_display_board(), turn=1, current_player=0)
        assert "White to move" in text
        assert "k" in text and "K" in text
        assert "10 |" in text

    def test_render_highlights(self):
        board = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        text = render_board(board, highlights={(0, 0)})
        assert "*" in text


class TestGameState:
    def test_initial_state(self, initial_state):
        assert initial_state.current_player == Color.WHITE
        assert initial_state.turn == 1
        assert not initial_state.done
        assert initial_state.phase == GamePhase.PLAYING
        assert initial_state.winner is None
        assert not initial_state.in_check
        assert initial_state.move_history == []

    def test_starting_pieces(self, initial_state):
        king = initial_state.get_piece_at(9, 5)
        assert king.kind == PieceKind.KING
        assert king.color == Color.WHITE
        assert king.identity == "w-king-5"
        wizard = initial_state.get_piece_at(0, 9)
        assert wizard.kind == PieceKind.WIZARD
        assert wizard.color == Color.BLACK
        assert initial_state.get_piece_at(5, 5) is None
        assert initial_state.get_piece_at(10, 0) is None

    def test_missing_king_rejected(self):
        board = empty_board()
        board[9][5] = Piece(PieceKind.KING, Color.WHITE)
        with pytest.raises(NoKingFoundError) as exc:
            GameState(board)
        assert exc.value.color == Color.BLACK
        assert exc.value.count == 0

    def test_two_kings_rejected(self):
        with pytest.raises(NoKingFoundError):
            build_state({"a1": "wK", "b1": "wK", "j10": "bK"})

    def test_side_not_to_move_in_check_rejected(self):
        # Black is in check from the rook but it is White's turn
        with pytest.raises(ValueError):
            build_state({"a1": "wK", "f5": "wR", "f10": "bK"}, to_move=Color.WHITE)

    def test_from_dict_rejects_capturable_king(self):
        board = empty_board()
        board[9][0] = Piece(PieceKind.KING, Color.WHITE)
        board[5][5] = Piece(PieceKind.ROOK, Color.WHITE)
        board[0][5] = Piece(PieceKind.KING, Color.BLACK)
        data = GameState(board, Color.WHITE).to_dict()
        with pytest.raises(ValueError):
            GameState.from_dict(data)
        # Same position with Black to move is an ordinary check
        data["current_player"] = "black"
        assert GameState.from_dict(data).in_check

    def test_position_key_ignores_identity(self):
        a = build_state({"f1": "wK", "b1": "wR", "f10": "bK"})
        b = a.clone()
        b.board[9][1] = Piece(PieceKind.ROOK, Color.WHITE, identity="renamed")
        assert position_key(a.board, a.current_player) == position_key(b.board, b.current_player)
        moved = build_state({"f1": "wK", "b1": "wR", "f10": "bK"}, moved=("b1",))
        assert position_key(a.board, a.current_player) != position_key(moved.board, moved.current_player)
        black = build_state({"f1": "wK", "b1": "wR", "f10": "bK"}, to_move=Color.BLACK)
        assert position_key(a.board, a.current_player) != position_key(black.board, black.current_player)

    def test_find_king(self, initial_state):
        assert find_king(initial_state.board, Color.BLACK) == (0, 5)

    def test_clone_independent(self, initial_state):
        clone = initial_state.clone()
        clone.board[5][5] = Piece(PieceKind.QUEEN, Color.WHITE)
        assert initial_state.board[5][5] is None

    def test_serialize_roundtrip(self, initial_state):
        state = _play(initial_state, "Pe2-e4", "Pf9-f7", "Wa1-a3")
        restored = GameState.deserialize(state.serialize())
        assert checksum(restored) == checksum(state)
        assert restored.move_history == state.move_history
        assert restored.current_player == Color.BLACK
        assert restored.get_piece_at(7, 0).identity == "w-wizard-0"

    def test_from_dict_recomputes_flags(self, back_rank_state):
        state = make_move(back_rank_state, wcn_to_move(back_rank_state, "Ra5-a10"))
        data = state.to_dict()
        data["checkmate"] = False
        data["phase"] = "playing"
        restored = GameState.from_dict(data)
        assert restored.checkmate
        assert restored.done

    def test_move_dict_roundtrip(self, castling_state):
        move = castling_moves(castling_state.board, (9, 5), castling_state.board[9][5])[0]
        restored = move_from_dict(move_to_dict(move))
        assert restored == move
        assert restored.rook_move == move.rook_move


class TestMove:
    def test_equality_ignores_identity(self):
        a = Move((8, 4), (7, 4), Piece(PieceKind.PAWN, Color.WHITE, identity="x"))
        b = Move((8, 4), (7, 4), Piece(PieceKind.PAWN, Color.WHITE, identity="y"))
        assert a == b
        assert hash(a) == hash(b)

    def test_promotion_distinguishes(self):
        pawn = Piece(PieceKind.PAWN, Color.WHITE)
        assert Move((1, 0), (0, 0), pawn, promotion=PieceKind.QUEEN) != \
            Move((1, 0), (0, 0), pawn, promotion=PieceKind.KNIGHT)

    def test_positions_normalized(self):
        move = Move((8, 4), (7, 4), Piece(PieceKind.PAWN, Color.WHITE))
        assert isinstance(move.to_pos, Position)
        assert move.to_pos.row == 7

    def test_non_wizard_cannot_teleport(self):
        with pytest.raises(ValueError):
            Move((8, 4), (6, 4), Piece(PieceKind.PAWN, Color.WHITE), is_wizard_teleport=True)

    def test_wizard_attack_needs_target(self):
        with pytest.raises(ValueError):
            Move((4, 4), (4, 6), Piece(PieceKind.WIZARD, Color.WHITE), is_wizard_attack=True)

    def test_both_wizard_flags_rejected(self):
        wizard = Piece(PieceKind.WIZARD, Color.WHITE)
        with pytest.raises(ValueError):
            Move((4, 4), (4, 6), wizard, captured=Piece(PieceKind.PAWN, Color.BLACK),
                 is_wizard_teleport=True, is_wizard_attack=True)


class TestMoveGeneration:
    def test_initial_move_count(self, initial_state):
        # 20 pawn moves, 4 knight moves, 4 wizard teleports
        assert len(generate_legal_moves(initial_state)) == 28

    def test_every_kind_has_a_generator(self):
        assert set(MOVE_GENERATORS) == set(PieceKind)

    def test_generation_is_deterministic(self, initial_state):
        first = [m.key() for m in generate_legal_moves(initial_state)]
        second = [m.key() for m in generate_legal_moves(initial_state)]
        assert first == second

    def test_pawn_single_and_double(self, initial_state):
        assert legal_moves_for(initial_state, (8, 4)) == [(7, 4), (6, 4)]

    def test_pawn_no_double_after_moving(self, initial_state):
        state = _play(initial_state, "Pe2-e3", "Pe9-e8")
        assert legal_moves_for(state, (7, 4)) == [(6, 4)]

    def test_pawn_blocked(self):
        state = build_state({"a1": "wK", "e2": "wP", "e3": "bN", "j10": "bK"})
        assert legal_moves_for(state, (8, 4)) == []

    def test_pawn_diagonal_capture(self):
        state = build_state({"a1": "wK", "e2": "wP", "d3": "bN", "f3": "wN", "j10": "bK"})
        moves = legal_moves(state, (8, 4))
        captures = [m for m in moves if m.is_capture]
        assert [m.to_pos for m in captures] == [(7, 3)]
        assert captures[0].captured.kind == PieceKind.KNIGHT

    def test_black_pawn_moves_down(self, initial_state):
        state = _play(initial_state, "Pe2-e3")
        assert legal_moves_for(state, (1, 4)) == [(2, 4), (3, 4)]

    def test_knight_jumps(self, initial_state):
        assert sorted(legal_moves_for(initial_state, (9, 2))) == [(7, 1), (7, 3)]

    def test_rook_ray_stops_at_pieces(self):
        state = build_state({"a1": "wK", "e5": "wR", "e8": "bP", "c5": "wP", "j10": "bK"})
        dests = set(legal_moves_for(state, notation_to_rc("e5")))
        assert notation_to_rc("e8") in dests       # capture
        assert notation_to_rc("e9") not in dests   # behind the capture
        assert notation_to_rc("c5") not in dests   # own piece
        assert notation_to_rc("d5") in dests

    def test_queen_combines_rook_and_bishop(self):
        board = empty_board()
        queen = Piece(PieceKind.QUEEN, Color.WHITE)
        rook = Piece(PieceKind.ROOK, Color.WHITE)
        bishop = Piece(PieceKind.BISHOP, Color.WHITE)
        combined = set(destinations(board, (4, 4), rook)) | set(destinations(board, (4, 4), bishop))
        assert set(destinations(board, (4, 4), queen)) == combined

    def test_king_never_generates_castling(self, castling_state):
        moves = generate_piece_moves(castling_state.board, (9, 5), castling_state.board[9][5])
        assert not any(m.is_castling for m in moves)

    def test_other_side_and_empty_squares_have_no_moves(self, initial_state):
        assert legal_moves_for(initial_state, (1, 4)) == []
        assert legal_moves_for(initial_state, (5, 5)) == []
        assert legal_moves_for(initial_state, (42, 0)) == []


class TestWizard:
    def test_teleport_jumps_over_pieces(self, initial_state):
        moves = legal_moves(initial_state, (9, 0))
        assert {m.to_pos for m in moves} == {(7, 0), (7, 2)}
        assert all(m.is_wizard_teleport for m in moves)

    def test_teleport_lands_on_empty_squares_only(self):
        state = build_state({"a1": "wK", "e6": "wW", "e8": "wN", "g6": "bP", "j10": "bK"})
        for move in legal_moves(state, (4, 4)):
            if move.is_wizard_teleport:
                assert state.board[move.to_pos.row][move.to_pos.col] is None
        teleports = {m.to_pos for m in legal_moves(state, (4, 4)) if m.is_wizard_teleport}
        assert (2, 4) not in teleports   # own knight
        assert (4, 6) not in teleports   # enemy pawn: only attackable
        assert (2, 2) in teleports

    def test_teleport_range_is_two(self):
        state = build_state({"a1": "wK", "e6": "wW", "j10": "bK"})
        teleports = {m.to_pos for m in legal_moves(state, (4, 4))}
        assert (1, 4) not in teleports
        assert (4, 7) not in teleports
        # 8 directions x 2 distances, all on the board and empty
        assert len(teleports) == 16

    def test_ranged_capture(self, wizard_state):
        wizard = wizard_state.board[4][4]
        moves = legal_moves(wizard_state, (4, 4))
        attack = [m for m in moves if m.is_wizard_attack]
        assert len(attack) == 1
        assert attack[0].to_pos == (4, 6)

        state = make_move(wizard_state, attack[0])
        assert state.board[4][4] is wizard
        assert not state.board[4][4].has_moved
        assert state.board[4][6] is None
        assert state.current_player == Color.BLACK
        assert state.move_history[-1].captured.kind == PieceKind.PAWN

    def test_attack_covers_full_box(self):
        # Knight-shaped offset (2, 1) is inside Chebyshev distance 2
        state = build_state({"a1": "wK", "e6": "wW", "f8": "bN", "j10": "bK"})
        attacks = [m.to_pos for m in legal_moves(state, (4, 4)) if m.is_wizard_attack]
        assert attacks == [notation_to_rc("f8")]

    def test_attack_does_not_reach_three(self):
        state = build_state({"a1": "wK", "e6": "wW", "e9": "bN", "j10": "bK"})
        assert not any(m.is_wizard_attack for m in legal_moves(state, (4, 4)))

    def test_wizard_gives_check_at_range(self):
        state = build_state({"a1": "wK", "h8": "wW", "f10": "bK"}, to_move=Color.BLACK)
        assert state.in_check
        assert is_square_attacked(state.board, (0, 5), Color.WHITE)


class TestLegality:
    def test_pinned_rook_stays_on_file(self):
        state = build_state({"f1": "wK", "f3": "wR", "f8": "bR", "a10": "bK"})
        moves = legal_moves(state, notation_to_rc("f3"))
        assert moves
        assert all(m.to_pos.col == 5 for m in moves)

    def test_king_cannot_step_into_attack(self):
        state = build_state({"f1": "wK", "e10": "bR", "a10": "bK"})
        assert (9, 4) not in legal_moves_for(state, (9, 5))
        assert (8, 4) not in legal_moves_for(state, (9, 5))
        assert (9, 6) in legal_moves_for(state, (9, 5))

    def test_king_cannot_hide_along_check_ray(self):
        state = build_state({"f1": "wK", "a1": "bR", "a10": "bK"})
        assert state.in_check
        assert (9, 6) not in legal_moves_for(state, (9, 5))

    def test_no_legal_move_leaves_king_attacked(self, initial_state):
        state = _play(initial_state, "Pe2-e4", "Pf9-f7", "Wa1-a3", "Wj10-h8")
        for move in generate_legal_moves(state):
            after = apply_move_to_board(state.board, move)
            assert not is_king_in_check(after, state.current_player)

    def test_must_answer_check(self):
        state = build_state({"f1": "wK", "b5": "wR", "f6": "bR", "a10": "bK"})
        assert state.in_check
        for move in generate_legal_moves(state):
            after = apply_move_to_board(state.board, move)
            assert not is_king_in_check(after, Color.WHITE)
        # Rook can block on f5
        assert any(m.to_pos == notation_to_rc("f5") for m in generate_legal_moves(state))

    def test_in_check_consistent_after_moves(self, initial_state):
        state = initial_state
        for text in ["Pe2-e4", "Pf9-f7", "Wa1-a3", "Wj10-h8", "Wa3-c5"]:
            state = make_move(state, wcn_to_move(state, text))
            assert state.in_check == is_king_in_check(state.board, state.current_player)

    def test_pawn_attacks_diagonally_only(self):
        state = build_state({"a1": "wK", "e5": "wP", "j10": "bK"})
        board = state.board
        assert is_square_attacked(board, notation_to_rc("d6"), Color.WHITE)
        assert is_square_attacked(board, notation_to_rc("f6"), Color.WHITE)
        assert not is_square_attacked(board, notation_to_rc("e6"), Color.WHITE)
        assert not is_square_attacked(board, notation_to_rc("d4"), Color.WHITE)


class TestCastling:
    def test_queen_side_castling_available(self, castling_state):
        castles = [m for m in legal_moves(castling_state, (9, 5)) if m.is_castling]
        assert len(castles) == 1
        move = castles[0]
        assert move.to_pos == (9, 2)
        assert move.rook_move == ((9, 1), (9, 3))
        assert str(move) == "Kf1-c1"

    def test_castling_moves_rook(self, castling_state):
        move = wcn_to_move(castling_state, "Kf1-c1")
        state = make_move(castling_state, move)
        king = state.board[9][2]
        rook = state.board[9][3]
        assert king.kind == PieceKind.KING and king.has_moved
        assert rook.kind == PieceKind.ROOK and rook.has_moved
        assert state.board[9][1] is None
        assert state.board[9][5] is None
        # The other rook is untouched
        assert not state.board[9][8].has_moved

    def test_short_side_rook_too_close(self, castling_state):
        castles = [m for m in legal_moves(castling_state, (9, 5)) if m.is_castling]
        assert all(m.to_pos.col < 5 for m in castles)

    def test_not_after_king_moved(self):
        state = build_state({"f1": "wK", "b1": "wR", "f10": "bK"}, moved=("f1",))
        assert not any(m.is_castling for m in legal_moves(state, (9, 5)))

    def test_not_after_rook_moved(self):
        state = build_state({"f1": "wK", "b1": "wR", "f10": "bK"}, moved=("b1",))
        assert not any(m.is_castling for m in legal_moves(state, (9, 5)))

    def test_not_through_attacked_square(self):
        state = build_state({"f1": "wK", "b1": "wR", "d5": "bR", "f10": "bK"})
        assert not any(m.is_castling for m in legal_moves(state, (9, 5)))

    def test_not_out_of_check(self):
        state = build_state({"f1": "wK", "b1": "wR", "f5": "bR", "a10": "bK"})
        assert state.in_check
        assert not any(m.is_castling for m in legal_moves(state, (9, 5)))

    def test_not_with_piece_between(self):
        state = build_state({"f1": "wK", "b1": "wR", "d1": "wB", "f10": "bK"})
        assert not any(m.is_castling for m in legal_moves(state, (9, 5)))

    def test_black_castles_on_its_home_row(self):
        state = build_state({"f1": "wK", "f10": "bK", "b10": "bR"}, to_move=Color.BLACK)
        castles = [m for m in legal_moves(state, (0, 5)) if m.is_castling]
        assert [m.to_pos for m in castles] == [(0, 2)]
        assert castles[0].rook_move == ((0, 1), (0, 3))

    def test_not_from_initial_position(self, initial_state):
        assert not any(m.is_castling for m in generate_legal_moves(initial_state))


class TestPromotion:
    def _state(self):
        return build_state({"f1": "wK", "d9": "wP", "j6": "bK"}, moved=("d9",))

    def test_promotion_choices(self):
        moves = legal_moves(self._state(), notation_to_rc("d9"))
        assert [m.promotion for m in moves] == list(PROMOTION_KINDS)
        assert all(m.to_pos == (0, 3) for m in moves)
        assert legal_moves_for(self._state(), notation_to_rc("d9")) == [(0, 3)]

    def test_promote_to_wizard(self):
        state = self._state()
        move = next(m for m in legal_moves(state, (1, 3)) if m.promotion == PieceKind.WIZARD)
        new_state = make_move(state, move)
        piece = new_state.board[0][3]
        assert piece.kind == PieceKind.WIZARD
        assert piece.color == Color.WHITE
        assert piece.has_moved
        assert piece.identity == "white-wizard-promoted-0-3"
        assert new_state.board[1][3] is None

    def test_black_promotes_on_last_row(self):
        state = build_state({"f1": "wK", "c2": "bP", "j6": "bK"}, to_move=Color.BLACK,
                            moved=("c2",))
        moves = legal_moves(state, notation_to_rc("c2"))
        assert {m.to_pos for m in moves} == {(9, 2)}
        assert len(moves) == len(PROMOTION_KINDS)


class TestTransitions:
    def test_make_move_returns_new_state(self, initial_state):
        before = checksum(initial_state)
        state = make_move(initial_state, wcn_to_move(initial_state, "Pe2-e4"))
        assert checksum(initial_state) == before
        assert initial_state.board[8][4] is not None
        assert state.board[8][4] is None
        assert state.board[6][4].has_moved
        assert state.current_player == Color.BLACK
        assert len(state.move_history) == 1

    def test_illegal_move_rejected(self, initial_state):
        pawn = initial_state.board[8][4]
        with pytest.raises(IllegalMoveError) as exc:
            make_move(initial_state, Move((8, 4), (5, 4), pawn))
        assert exc.value.move.to_pos == (5, 4)
        assert initial_state.move_history == []

    def test_wrong_side_rejected(self, initial_state):
        pawn = initial_state.board[1][4]
        with pytest.raises(IllegalMoveError):
            make_move(initial_state, Move((1, 4), (2, 4), pawn))

    def test_canonical_move_recorded(self, wizard_state):
        # A bare move without captured piece data still records the capture
        wizard = wizard_state.board[4][4]
        bare = Move((4, 4), (4, 6), wizard,
                    captured=Piece(PieceKind.QUEEN, Color.BLACK), is_wizard_attack=True)
        state = make_move(wizard_state, bare)
        assert state.move_history[-1].captured.kind == PieceKind.PAWN

    def test_back_rank_mate(self, back_rank_state):
        assert not back_rank_state.in_check
        state = make_move(back_rank_state, wcn_to_move(back_rank_state, "Ra5-a10"))
        assert state.in_check
        assert state.checkmate
        assert not state.stalemate
        assert state.winner == Color.WHITE
        assert state.phase == GamePhase.ENDED
        assert check_winner(state) == (True, Color.WHITE)
        assert generate_legal_moves(state) == []

    def test_no_moves_after_game_end(self, back_rank_state):
        state = make_move(back_rank_state, wcn_to_move(back_rank_state, "Ra5-a10"))
        king = state.board[0][5]
        with pytest.raises(IllegalMoveError):
            make_move(state, Move((0, 5), (0, 4), king))

    def test_stalemate_position(self, stalemate_state):
        assert stalemate_state.stalemate
        assert not stalemate_state.checkmate
        assert not stalemate_state.in_check
        assert stalemate_state.winner is None
        assert stalemate_state.done
        assert check_winner(stalemate_state) == (True, None)

    def test_stalemate_by_move(self):
        state = build_state({"j1": "wK", "b7": "wQ", "a10": "bK"})
        state = make_move(state, wcn_to_move(state, "Qb7-b8"))
        assert state.stalemate
        assert state.phase == GamePhase.ENDED
        assert state.winner is None

    def test_initial_state_factory(self):
        state = create_initial_state()
        assert checksum(state) == checksum(GameState())
