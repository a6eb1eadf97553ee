"""Pydantic models for the engine API request/response schemas."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class StateRequest(BaseModel):
    """Any request that carries a game state (``GameState.to_dict`` form)."""
    game_state: dict[str, Any] = Field(..., description="Serialized game state")


class LegalMovesRequest(StateRequest):
    """Legal moves of one piece, or of the whole side to move."""
    square: Optional[str] = Field(None, description="Square such as 'e2'; all moves if omitted")


class PlayMoveRequest(StateRequest):
    """Play a move in WCN."""
    move_wcn: str = Field(..., min_length=1, description="Move in Wizard Chess Notation")


class BestMoveRequest(StateRequest):
    """Ask the search engine for a move."""
    depth: Optional[int] = Field(None, ge=1, le=10, description="Search depth in plies")
    difficulty: Optional[str] = Field(None, description="Named difficulty, e.g. 'hard' or 'level7'")
    time_limit: Optional[float] = Field(None, gt=0, description="Seconds allowed for the search")


class HintRequest(StateRequest):
    depth: Optional[int] = Field(None, ge=1, le=4, description="Hint search depth in plies")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class GameStateResponse(BaseModel):
    """A game state plus the derived status fields."""
    game_state: dict[str, Any]
    checksum: str
    current_player: str
    in_check: bool
    checkmate: bool
    stalemate: bool
    phase: str
    winner: Optional[str] = None


class LegalMovesResponse(BaseModel):
    square: Optional[str] = None
    moves: list[str]
    destinations: list[str]


class PlayMoveResponse(GameStateResponse):
    move: str


class BestMoveResponse(BaseModel):
    move: str
    move_detail: dict[str, Any]
    score: float
    depth: int
    nodes: int
    timed_out: bool = False


class HintResponse(BaseModel):
    move: Optional[str] = None
    score: Optional[float] = None
    categories: list[str] = Field(default_factory=list)
    description: str = ""
    rationale: str = ""


class ChecksumResponse(BaseModel):
    checksum: str
    move_count: int
