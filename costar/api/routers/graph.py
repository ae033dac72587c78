"""
Local graph API endpoints.

Provides endpoints for the downloaded co-star snapshot:
- Bulk download from the oracle
- Summary, import (PUT) and deletion
- JSON / GraphML export
- Hub and bridge analysis
- Shortest path and ego subgraph queries
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from costar.api.deps import ValidatedActorId, get_graph_service
from costar.api.errors import handle_endpoint_error
from costar.core.config import Settings, get_settings
from costar.graph.models import ActorGraph, GraphAnalysis
from costar.models.api import (
    DeletedResponse,
    GraphSummaryResponse,
    ShortestPathResponse,
)
from costar.models.requests import DownloadRequest
from costar.services import GraphService

router = APIRouter(prefix="/graph", tags=["graph"])


def _summary(graph: ActorGraph) -> GraphSummaryResponse:
    return GraphSummaryResponse(
        actor_count=graph.metadata.actor_count,
        connection_count=graph.metadata.connection_count,
        download_date=graph.metadata.download_date,
        distribution=graph.metadata.distribution,
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SNAPSHOT LIFECYCLE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@router.post("/download", response_model=GraphSummaryResponse)
async def download_graph(
    request: DownloadRequest,
    graph_service: GraphService = Depends(get_graph_service),
    settings: Settings = Depends(get_settings),
) -> GraphSummaryResponse:
    """
    Download a fresh snapshot and replace the current one.

    This issues one large uncached oracle query and can take minutes.

    Args:
        request: Optional hub count and actor cap (settings defaults)
        graph_service: Injected graph service
        settings: Application settings

    Returns:
        GraphSummaryResponse for the new snapshot
    """
    hub_count = request.hub_count or settings.graph_hub_count
    max_total = request.max_total or settings.graph_max_total
    try:
        graph = await graph_service.download(hub_count, max_total)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "download_graph")
    return _summary(graph)


@router.get("", response_model=GraphSummaryResponse)
async def graph_summary(
    graph_service: GraphService = Depends(get_graph_service),
) -> GraphSummaryResponse:
    try:
        return _summary(graph_service.require())
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "graph_summary")


@router.put("", response_model=GraphSummaryResponse)
async def import_graph(
    document: dict[str, Any] = Body(...),
    graph_service: GraphService = Depends(get_graph_service),
) -> GraphSummaryResponse:
    """
    Replace the snapshot with an uploaded ``actorGraph.json`` document.

    Adjacency, degrees and counts are recomputed from the connections.
    """
    try:
        graph = await graph_service.import_document(document)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "import_graph")
    return _summary(graph)


@router.delete("", response_model=DeletedResponse)
async def delete_graph(
    graph_service: GraphService = Depends(get_graph_service),
) -> DeletedResponse:
    try:
        deleted = await graph_service.clear()
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "delete_graph")
    return DeletedResponse(deleted=deleted)


@router.get("/export")
def export_graph(
    format: Literal["json", "graphml"] = Query("json"),
    graph_service: GraphService = Depends(get_graph_service),
) -> Response:
    """Download the snapshot as JSON (re-importable) or GraphML."""
    try:
        content, media_type, filename = graph_service.export(format)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, f"export_graph format={format}")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# QUERIES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@router.get("/analysis", response_model=GraphAnalysis)
def analyze_graph(
    top: int = Query(20, ge=1, le=500),
    graph_service: GraphService = Depends(get_graph_service),
) -> GraphAnalysis:
    """Top hubs by degree, top bridges by open-triad count, and global stats."""
    try:
        return graph_service.analyze(top)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "analyze_graph")


@router.get("/path", response_model=ShortestPathResponse)
def shortest_path(
    source: str = Query(..., min_length=1, max_length=200),
    target: str = Query(..., min_length=1, max_length=200),
    graph_service: GraphService = Depends(get_graph_service),
) -> ShortestPathResponse:
    """
    Fewest-hop chain between two actors in the snapshot.

    Either end may be an id or a (fuzzy) name.
    """
    try:
        path = graph_service.shortest_path(source, target)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "shortest_path")
    if path is None:
        return ShortestPathResponse(connected=False)
    return ShortestPathResponse(connected=True, steps=len(path) - 1, path=path)


@router.get("/ego/{actor_id}", response_model=ActorGraph)
def ego_graph(
    actor_id: str = Depends(ValidatedActorId()),
    depth: int = Query(1, ge=0, le=3),
    graph_service: GraphService = Depends(get_graph_service),
) -> ActorGraph:
    """Snapshot restricted to actors within ``depth`` hops of ``actor_id``."""
    try:
        return graph_service.ego(actor_id, depth)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, f"ego_graph actor_id={actor_id}")
