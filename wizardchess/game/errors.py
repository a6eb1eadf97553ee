"""Exceptions raised by the rules engine."""

from __future__ import annotations


class WizardChessError(Exception):
    """Base class for all engine errors."""


class IllegalMoveError(WizardChessError):
    """Raised when a move is not in the legal set. The state is left unchanged."""

    def __init__(self, move, reason: str = "not a legal move"):
        self.move = move
        self.reason = reason
        super().__init__(f"Illegal move {move}: {reason}")


class NoKingFoundError(WizardChessError):
    """Raised when a side has no king (or more than one).

    This is a corrupted state. Callers must stop playing on it rather than
    guess a repair.
    """

    def __init__(self, color, count: int = 0):
        self.color = color
        self.count = count
        super().__init__(f"Expected exactly one {color.name.lower()} king, found {count}")
