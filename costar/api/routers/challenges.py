"""
Challenge API endpoints.

Provides:
- Challenge generation (random walk, or a caller-chosen actor pair)
- Path recomputation from an arbitrary position
- Progressive hints (film first, then actor)
- Guess judging against the caller-owned path
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from costar.api.deps import get_game_service
from costar.api.errors import handle_endpoint_error
from costar.core.config import Settings, get_settings
from costar.graph.models import Challenge, HintResult, MoveVerdict
from costar.models.api import PathResponse
from costar.models.requests import (
    ChallengeRequest,
    GuessRequest,
    HintRequest,
    PathRequest,
)
from costar.services import GameService

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.post("", response_model=Challenge)
async def create_challenge(
    request: ChallengeRequest,
    game: GameService = Depends(get_game_service),
    settings: Settings = Depends(get_settings),
) -> Challenge:
    """
    Generate a challenge.

    GENERATION_EXHAUSTED (503) means every walk attempt failed; the caller
    should offer to generate again.
    """
    min_length = request.min_length or settings.challenge_min_length
    max_length = request.max_length or max(settings.challenge_max_length, min_length)
    try:
        return await game.generate_challenge(
            min_length,
            max_length,
            start_name=request.start_name,
            end_name=request.end_name,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "create_challenge")


@router.post("/path", response_model=PathResponse)
async def compute_path(
    request: PathRequest,
    game: GameService = Depends(get_game_service),
) -> PathResponse:
    """Find some path between two actors within ``max_length`` steps."""
    try:
        path = await game.path_from_position(
            request.from_entity, request.to_entity, request.max_length
        )
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "compute_path")
    return PathResponse(found=path is not None, path=path or [])


@router.post("/hint", response_model=HintResult)
async def next_hint(
    request: HintRequest,
    game: GameService = Depends(get_game_service),
) -> HintResult:
    """
    Next hint for the player's current position.

    When ``recomputed`` is true the response's ``solution`` replaces the
    caller's stale one.
    """
    try:
        return await game.hint(
            request.solution, request.path[-1], request.target, request.hints_used
        )
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "next_hint")


@router.post("/guess", response_model=MoveVerdict)
async def submit_guess(
    request: GuessRequest,
    game: GameService = Depends(get_game_service),
) -> MoveVerdict:
    """Judge a guessed actor; mistakes come back as verdicts, not errors."""
    try:
        return await game.submit_guess(request.path, request.target, request.guess_name)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "submit_guess")
