"""
Actor API endpoints.

Provides:
- Free-text actor resolution with assisted spelling recovery
- Shared-film lookup between two resolved actors
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from costar.api.deps import get_game_service
from costar.api.errors import handle_endpoint_error
from costar.graph.outcomes import Found, NotFound
from costar.models.api import LinkResponse, ResolveResponse
from costar.models.requests import LinkRequest, ResolveRequest
from costar.services import GameService

router = APIRouter(tags=["actors"])


@router.post("/actors/resolve", response_model=ResolveResponse)
async def resolve_actor(
    request: ResolveRequest,
    game: GameService = Depends(get_game_service),
) -> ResolveResponse:
    """
    Resolve a typed name to an actor.

    An unknown name or an unreachable oracle is reported through
    ``status`` with HTTP 200; both are normal gameplay branches.
    """
    try:
        outcome = await game.resolve(request.name)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, f"resolve name={request.name[:40]}")

    if isinstance(outcome, Found):
        return ResolveResponse(status="found", entity=outcome.entity)
    if isinstance(outcome, NotFound):
        return ResolveResponse(status="not_found", corrected_name=outcome.corrected)
    return ResolveResponse(status="oracle_error", reason=outcome.reason)


@router.post("/links", response_model=LinkResponse)
async def find_link(
    request: LinkRequest,
    game: GameService = Depends(get_game_service),
) -> LinkResponse:
    """
    First film shared by two actors.

    Returns ``linked: false`` when they share none. An oracle failure is a
    503, never a false negative.
    """
    try:
        link = await game.find_link(request.actor_a, request.actor_b)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(
            e, f"links {request.actor_a.id}-{request.actor_b.id}"
        )
    return LinkResponse(linked=link is not None, link=link)
