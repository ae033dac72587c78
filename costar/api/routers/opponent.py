"""
AI opponent API endpoints.

Provides:
- The AI's move (``move: null`` means the human wins)
- Up to three co-star suggestions for the human player
- A random notable starting actor
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from costar.api.deps import get_game_service
from costar.api.errors import handle_endpoint_error
from costar.models.api import (
    OpponentHintsResponse,
    OpponentMoveResponse,
    StartActorResponse,
)
from costar.models.requests import OpponentRequest
from costar.services import GameService

router = APIRouter(prefix="/opponent", tags=["opponent"])


@router.post("/move", response_model=OpponentMoveResponse)
async def opponent_move(
    request: OpponentRequest,
    game: GameService = Depends(get_game_service),
) -> OpponentMoveResponse:
    """
    Let the AI answer ``last``.

    An oracle failure is a 503 rather than ``move: null``, so an outage is
    never reported as a human win.
    """
    try:
        move = await game.ai_respond(request.last, request.excluded)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, f"opponent_move last={request.last.id}")
    return OpponentMoveResponse(move=move, human_wins=move is None)


@router.post("/hints", response_model=OpponentHintsResponse)
async def opponent_hints(
    request: OpponentRequest,
    game: GameService = Depends(get_game_service),
) -> OpponentHintsResponse:
    try:
        suggestions = await game.get_hints(request.last, request.excluded)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, f"opponent_hints last={request.last.id}")
    return OpponentHintsResponse(suggestions=suggestions)


@router.get("/start", response_model=StartActorResponse)
async def random_start(
    game: GameService = Depends(get_game_service),
) -> StartActorResponse:
    try:
        actor = await game.random_start()
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "random_start")
    return StartActorResponse(actor=actor)
