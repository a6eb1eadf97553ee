"""FastAPI server for the Wizard Chess engine.

Stateless: every request carries the full serialized game state, so any
number of workers can serve the same game.
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request

from wizardchess.api.dependencies import get_evaluator, hint_depth, search_settings
from wizardchess.api.models import (
    BestMoveRequest,
    BestMoveResponse,
    ChecksumResponse,
    GameStateResponse,
    HintRequest,
    HintResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    PlayMoveRequest,
    PlayMoveResponse,
    StateRequest,
)
from wizardchess.engine.hint import hint
from wizardchess.engine.search import SearchError, best_move
from wizardchess.game.board import notation_to_rc, rc_to_notation
from wizardchess.game.checksum import checksum
from wizardchess.game.errors import IllegalMoveError, NoKingFoundError
from wizardchess.game.notation import wcn_to_move
from wizardchess.game.rules import (
    create_initial_state, generate_legal_moves, legal_moves, make_move,
)
from wizardchess.game.state import GameState, move_to_dict

app = FastAPI(
    title="Wizard Chess Engine API",
    description="Rules, search and hints for 10x10 Wizard Chess",
    version="0.1.0",
)


def _load_state(data: dict) -> GameState:
    """Rebuild a GameState from its dict form or raise 400/422."""
    try:
        return GameState.from_dict(data)
    except NoKingFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid game state: {e}")


def _state_fields(state: GameState) -> dict:
    return {
        "game_state": state.to_dict(),
        "checksum": checksum(state),
        "current_player": state.current_player.name.lower(),
        "in_check": state.in_check,
        "checkmate": state.checkmate,
        "stalemate": state.stalemate,
        "phase": state.phase.value,
        "winner": state.winner.name.lower() if state.winner is not None else None,
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.post("/games", response_model=GameStateResponse, status_code=201)
def create_game():
    """Start a new game from the initial position."""
    return GameStateResponse(**_state_fields(create_initial_state()))


@app.post("/games/legal-moves", response_model=LegalMovesResponse)
def get_legal_moves(body: LegalMovesRequest):
    """Legal moves of the piece on ``square`` (or of the whole side to move)."""
    state = _load_state(body.game_state)
    if body.square is not None:
        try:
            position = notation_to_rc(body.square)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        moves = legal_moves(state, position)
    else:
        moves = generate_legal_moves(state)

    destinations = []
    for move in moves:
        sq = rc_to_notation(*move.to_pos)
        if sq not in destinations:
            destinations.append(sq)

    return LegalMovesResponse(
        square=body.square,
        moves=[str(m) for m in moves],
        destinations=destinations,
    )


@app.post("/games/move", response_model=PlayMoveResponse)
def play_move(body: PlayMoveRequest):
    """Play a move and return the new state."""
    state = _load_state(body.game_state)
    try:
        move = wcn_to_move(state, body.move_wcn)
        new_state = make_move(state, move)
    except NoKingFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (IllegalMoveError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PlayMoveResponse(move=str(move), **_state_fields(new_state))


@app.post("/games/best-move", response_model=BestMoveResponse)
def get_best_move(body: BestMoveRequest, request: Request):
    """Run the search engine for the side to move."""
    state = _load_state(body.game_state)
    depth, time_limit = search_settings(request.app, body.depth, body.difficulty,
                                        body.time_limit)
    try:
        result = best_move(state, depth, state.current_player,
                           time_limit=time_limit,
                           evaluator=get_evaluator(request.app))
    except NoKingFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SearchError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return BestMoveResponse(
        move=str(result.move),
        move_detail=move_to_dict(result.move),
        score=result.score,
        depth=result.depth,
        nodes=result.nodes,
        timed_out=result.timed_out,
    )


@app.post("/games/hint", response_model=HintResponse)
def get_hint(body: HintRequest, request: Request):
    """Suggest a move for the side to move, with a short explanation."""
    state = _load_state(body.game_state)
    depth = body.depth if body.depth is not None else hint_depth(request.app)
    try:
        info = hint(state, depth=depth, evaluator=get_evaluator(request.app))
    except NoKingFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SearchError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if info is None:
        return HintResponse()
    return HintResponse(
        move=str(info.move),
        score=info.score,
        categories=info.categories,
        description=info.description,
        rationale=info.rationale,
    )


@app.post("/games/checksum", response_model=ChecksumResponse)
def get_checksum(body: StateRequest):
    """Checksum of a state, for detecting desync between two copies."""
    state = _load_state(body.game_state)
    return ChecksumResponse(checksum=checksum(state), move_count=len(state.move_history))
