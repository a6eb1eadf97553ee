"""Agents and a synchronous game loop for AI-vs-AI play."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Optional

from wizardchess.config import get_difficulty
from wizardchess.engine.evaluate import Evaluator
from wizardchess.engine.search import (
    DEFAULT_DEPTH, EvalFn, SearchCancelled, SearchTimeout, best_move,
)
from wizardchess.game.rules import create_initial_state, generate_legal_moves, make_move
from wizardchess.game.state import Color, GameState, Move

logger = logging.getLogger("wizardchess.player")


class Agent:
    """Base agent interface."""

    name = "agent"

    def get_move(self, state: GameState,
                 cancel_token: Optional[threading.Event] = None) -> Move:
        raise NotImplementedError


class RandomAgent(Agent):
    """Plays random legal moves."""

    name = "random"

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def get_move(self, state: GameState,
                 cancel_token: Optional[threading.Event] = None) -> Move:
        moves = generate_legal_moves(state)
        if not moves:
            raise ValueError("No legal moves")
        return self.rng.choice(moves)


class SearchAgent(Agent):
    """Plays the alpha-beta search's best move."""

    def __init__(self, depth: int = DEFAULT_DEPTH, time_limit: Optional[float] = None,
                 evaluator: Optional[EvalFn] = None, name: Optional[str] = None):
        self.depth = depth
        self.time_limit = time_limit
        self.evaluator = evaluator or Evaluator()
        self.name = name or f"search-d{depth}"

    @classmethod
    def from_difficulty(cls, name: str, config: Optional[dict] = None) -> SearchAgent:
        """Build an agent from a named difficulty level (``easy``, ``level7``, ...)."""
        level = get_difficulty(config, name)
        return cls(
            depth=level.get("search_depth", DEFAULT_DEPTH),
            time_limit=level.get("time_limit"),
            evaluator=Evaluator.from_config(config),
            name=level["name"],
        )

    def get_move(self, state: GameState,
                 cancel_token: Optional[threading.Event] = None) -> Move:
        result = best_move(state, self.depth, state.current_player,
                           cancel_token=cancel_token, time_limit=self.time_limit,
                           evaluator=self.evaluator)
        return result.move


@dataclass
class GameRecord:
    """Outcome of a finished (or stopped) game."""
    moves: list[Move] = field(default_factory=list)
    winner: Optional[Color] = None
    final_state: Optional[GameState] = None
    reason: str = ""


def play_game(white_agent: Agent, black_agent: Agent,
              max_moves: int = 400,
              state: Optional[GameState] = None,
              cancel_token: Optional[threading.Event] = None) -> GameRecord:
    """Play a game between two agents until it ends, hits ``max_moves``
    plies, or ``cancel_token`` is set.

    A search that times out before finishing depth 1 falls back to a random
    legal move. Cancellation stops the loop and returns the game so far.
    """
    if state is None:
        state = create_initial_state()
    record = GameRecord(final_state=state)
    fallback = RandomAgent()

    while not state.done and len(record.moves) < max_moves:
        if cancel_token is not None and cancel_token.is_set():
            record.reason = "cancelled"
            break

        agent = white_agent if state.current_player == Color.WHITE else black_agent
        try:
            move = agent.get_move(state, cancel_token)
        except SearchCancelled:
            record.reason = "cancelled"
            break
        except SearchTimeout:
            logger.warning("%s ran out of time, playing a random move", agent.name)
            move = fallback.get_move(state)

        state = make_move(state, move)
        record.moves.append(move)

    record.final_state = state
    record.winner = state.winner
    if not record.reason:
        if state.checkmate:
            record.reason = "checkmate"
        elif state.stalemate:
            record.reason = "stalemate"
        else:
            record.reason = "move limit"

    logger.info("Game over after %d plies: %s (winner: %s)", len(record.moves),
                record.reason, state.winner.name if state.winner is not None else "none")
    return record
