"""
Dependency injection providers for API endpoints.

Provides FastAPI dependencies that inject service instances into route
handlers; tests replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import HTTPException

from costar.core.validators import is_valid_entity_id
from costar.graph.cache import ResolutionCache
from costar.services import GameService, GraphService, ScoreService, get_services


def get_game_service() -> GameService:
    """Dependency provider for GameService."""
    return get_services().game


def get_graph_service() -> GraphService:
    """Dependency provider for GraphService."""
    return get_services().graph


def get_score_service() -> ScoreService:
    """Dependency provider for ScoreService."""
    return get_services().scores


def get_cache() -> ResolutionCache:
    """Dependency provider for the shared ResolutionCache."""
    return get_services().cache


def validate_entity_id(value: str, field_name: str = "actor ID") -> str:
    """
    Validate that a string is a bare Wikidata item identifier.

    Raises:
        HTTPException: If the value is not of the form Q<digits>
    """
    if not is_valid_entity_id(value):
        raise HTTPException(
            status_code=400, detail=f"Invalid {field_name} format (expected Q<digits>)"
        )
    return value


class ValidatedActorId:
    """
    Dependency class for validated actor ID path parameters.

    Usage:
        @router.get("/ego/{actor_id}")
        async def endpoint(actor_id: str = Depends(ValidatedActorId())):
            ...
    """

    def __call__(self, actor_id: str) -> str:
        """Validate and return the actor ID."""
        return validate_entity_id(actor_id)
