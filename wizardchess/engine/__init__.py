"""Wizard Chess AI: evaluation, alpha-beta search, hints, agents."""

from wizardchess.engine.evaluate import Evaluator, EvalWeights, PositionEval, PIECE_VALUES
from wizardchess.engine.search import (
    SearchError, SearchCancelled, SearchTimeout, SearchResult, best_move,
    MATE_SCORE, DEFAULT_DEPTH,
)
from wizardchess.engine.hint import HintInfo, hint, HINT_DEPTH
from wizardchess.engine.player import Agent, RandomAgent, SearchAgent, play_game

__all__ = [
    "Evaluator", "EvalWeights", "PositionEval", "PIECE_VALUES",
    "SearchError", "SearchCancelled", "SearchTimeout", "SearchResult", "best_move",
    "MATE_SCORE", "DEFAULT_DEPTH",
    "HintInfo", "hint", "HINT_DEPTH",
    "Agent", "RandomAgent", "SearchAgent", "play_game",
]
