#!/usr/bin/env python3
"""Interactive CLI for playing Wizard Chess.

Usage:
    python scripts/play.py                          # Human vs Human
    python scripts/play.py --vs-ai hard             # Human (White) vs AI
    python scripts/play.py --vs-ai level7 --black   # Human plays Black
    python scripts/play.py --ai-vs-ai easy master   # Watch AI vs AI

During a human turn, enter a move number, a WCN move (e.g. Pe3-e5),
'h' for a hint, 'm <square>' to show one piece's moves, or 'q' to quit.
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wizardchess.config import get_difficulty, load_config
from wizardchess.engine.hint import hint
from wizardchess.engine.player import SearchAgent
from wizardchess.game.board import notation_to_rc, render_board
from wizardchess.game.notation import game_to_wcn, wcn_to_move
from wizardchess.game.rules import (
    check_winner, create_initial_state, generate_legal_moves, legal_moves_for, make_move,
)
from wizardchess.game.state import Color, GameState
from wizardchess.game.errors import IllegalMoveError


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def display_state(state: GameState, highlights=None):
    """Print the current board state."""
    board = state.to_display_board()
    print(render_board(board,
                       turn=state.turn,
                       current_player=int(state.current_player),
                       highlights=highlights))
    if state.in_check and not state.done:
        print("Check!")
    print()


def list_moves(moves: list) -> list[str]:
    """Display numbered legal moves and return WCN strings."""
    wcn_list = []
    for i, move in enumerate(moves):
        wcn = str(move)
        wcn_list.append(wcn)
        print(f"  {i+1:3d}. {wcn}")
    return wcn_list


def show_hint(state: GameState, depth: int):
    info = hint(state, depth=depth)
    if info is None:
        print("No hint available.")
        return
    print(f"Hint: {info.description}  ({', '.join(info.categories) or 'quiet move'})")
    print(f"      {info.rationale}")


def human_turn(state: GameState, hint_depth: int) -> int | None:
    """Get a human player's move. Returns move index or None to quit."""
    moves = generate_legal_moves(state)
    if not moves:
        print("No legal moves!")
        return None

    player_name = "White" if state.current_player == Color.WHITE else "Black"
    print(f"\n{player_name}'s turn. Legal moves:")
    list_moves(moves)
    print(f"\nEnter move number (1-{len(moves)}), WCN notation, "
          f"'h' for a hint, 'm <square>' to highlight, or 'q' to quit:")

    while True:
        inp = input("> ").strip()
        if inp.lower() == "q":
            return None
        if inp.lower() == "h":
            show_hint(state, hint_depth)
            continue
        if inp.lower().startswith("m "):
            try:
                square = notation_to_rc(inp[2:].strip())
            except ValueError as e:
                print(e)
                continue
            display_state(state, highlights=set(legal_moves_for(state, square)))
            continue

        # Try as number
        try:
            idx = int(inp) - 1
            if 0 <= idx < len(moves):
                return idx
            print(f"Invalid number. Enter 1-{len(moves)}.")
            continue
        except ValueError:
            pass

        # Try as WCN notation
        try:
            parsed = wcn_to_move(state, inp)
            return moves.index(parsed)
        except IllegalMoveError:
            print("That move is not legal in this position.")
        except ValueError:
            print("Invalid input. Enter a move number or WCN notation.")


def play_game(white: SearchAgent | None, black: SearchAgent | None,
              hint_depth: int = 2, max_moves: int = 400):
    """Play a full game. ``None`` means a human plays that side."""
    state = create_initial_state()

    print("=" * 60)
    print("  Wizard Chess")
    print("=" * 60)
    print(f"  White: {white.name if white else 'human'}")
    print(f"  Black: {black.name if black else 'human'}")
    print("=" * 60)

    while not state.done and len(state.move_history) < max_moves:
        display_state(state)

        current = state.current_player
        agent = white if current == Color.WHITE else black
        moves = generate_legal_moves(state)

        if agent is None:
            idx = human_turn(state, hint_depth)
            if idx is None:
                print("Game aborted.")
                return
            move = moves[idx]
        else:
            move = agent.get_move(state)
            player_name = "White" if current == Color.WHITE else "Black"
            print(f"{player_name} ({agent.name}) plays: {move}")

        state = make_move(state, move)

    # Game over
    display_state(state)
    done, winner = check_winner(state)
    if winner == Color.WHITE:
        print("Checkmate. White wins!")
        result = "1-0"
    elif winner == Color.BLACK:
        print("Checkmate. Black wins!")
        result = "0-1"
    elif done:
        print("Stalemate. Draw!")
        result = "1/2-1/2"
    else:
        print(f"Stopped after {max_moves} plies.")
        result = "*"
    print(f"Game ended on move {state.turn} ({len(state.move_history)} plies)")
    print()
    print(game_to_wcn(state.move_history, headers={
        "White": white.name if white else "Human",
        "Black": black.name if black else "Human",
    }, result=result))


def main():
    parser = argparse.ArgumentParser(description="Play Wizard Chess")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML config (defaults to built-in settings)")
    parser.add_argument("--vs-ai", type=str, metavar="LEVEL",
                        help="Play against the AI at a difficulty (easy, hard, level7, ...)")
    parser.add_argument("--black", action="store_true",
                        help="With --vs-ai, play as Black")
    parser.add_argument("--ai-vs-ai", type=str, nargs=2, metavar=("WHITE", "BLACK"),
                        help="Watch two AI difficulty levels play each other")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    config = load_config(args.config)
    hint_depth = config.get("search", {}).get("hint_depth", 2)
    max_moves = config.get("game", {}).get("max_moves", 400)

    if args.ai_vs_ai:
        white = SearchAgent.from_difficulty(args.ai_vs_ai[0], config)
        black = SearchAgent.from_difficulty(args.ai_vs_ai[1], config)
        play_game(white, black, hint_depth, max_moves)
    elif args.vs_ai:
        level = get_difficulty(config, args.vs_ai)
        ai = SearchAgent.from_difficulty(level["name"], config)
        if args.black:
            play_game(ai, None, hint_depth, max_moves)
        else:
            play_game(None, ai, hint_depth, max_moves)
    else:
        play_game(None, None, hint_depth, max_moves)


if __name__ == "__main__":
    main()
