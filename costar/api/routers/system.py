"""
Health check and resolution cache endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from costar.api.deps import get_cache, get_graph_service
from costar.api.errors import handle_endpoint_error
from costar.graph.cache import CacheStats, ResolutionCache
from costar.models.api import CacheClearedResponse, HealthResponse
from costar.services import GraphService

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(
    graph_service: GraphService = Depends(get_graph_service),
) -> HealthResponse:
    """Liveness probe; also reports whether a local graph is loaded."""
    return HealthResponse(graph_loaded=graph_service.current is not None)


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats(cache: ResolutionCache = Depends(get_cache)) -> CacheStats:
    try:
        return await cache.stats()
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "cache_stats")


@router.delete("/cache", response_model=CacheClearedResponse)
async def clear_cache(cache: ResolutionCache = Depends(get_cache)) -> CacheClearedResponse:
    """Remove every resolution cache entry."""
    try:
        removed = await cache.clear()
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "clear_cache")
    return CacheClearedResponse(removed=removed)
