"""
Graph Service: owns the local co-star snapshot.

Manages:
- Bulk download through the materializer
- JSON import (validated, invariants recomputed) and JSON/GraphML export
- Mirroring the snapshot to ``<data_path>/graph/actorGraph.json``
- Analysis, shortest path and ego-subgraph queries over the snapshot

The snapshot is replaced wholesale; analyses never mutate it.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Literal

from costar.graph import analysis, persistence
from costar.graph.errors import GraphNotLoadedError, InvalidGraphError, UnknownActorError
from costar.graph.materializer import GraphMaterializer
from costar.graph.models import ActorGraph, ActorRecord, GraphAnalysis

logger = logging.getLogger(__name__)

ExportFormat = Literal["json", "graphml"]


class GraphService:
    """
    Holds one in-memory snapshot plus its on-disk mirror.

    Args:
        materializer: Downloads and builds snapshots
        data_path: Data root; the snapshot lives under ``data_path/graph``
    """

    def __init__(self, materializer: GraphMaterializer, data_path: Path) -> None:
        self.materializer = materializer
        self.graph_dir = Path(data_path) / "graph"
        self._graph: ActorGraph | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> ActorGraph | None:
        return self._graph

    def require(self) -> ActorGraph:
        """
        The loaded snapshot.

        Raises:
            GraphNotLoadedError: If nothing has been downloaded or imported
        """
        if self._graph is None:
            raise GraphNotLoadedError("No local graph loaded; download or import one first")
        return self._graph

    async def restore(self) -> bool:
        """Load the mirrored snapshot from disk, if any. Returns whether one was loaded."""
        try:
            graph = await asyncio.to_thread(persistence.load_graph, self.graph_dir)
        except InvalidGraphError as e:
            logger.warning(f"Ignoring corrupt graph snapshot: {e}")
            return False
        if graph is None:
            return False
        self._graph = graph
        logger.info(f"Restored graph snapshot with {len(graph.actors)} actors")
        return True

    async def _replace(self, graph: ActorGraph) -> ActorGraph:
        async with self._lock:
            await asyncio.to_thread(persistence.save_graph, graph, self.graph_dir)
            self._graph = graph
        return graph

    async def download(self, hub_count: int, max_total: int) -> ActorGraph:
        """Download a fresh snapshot and make it current."""
        graph = await self.materializer.download(hub_count, max_total)
        return await self._replace(graph)

    async def import_document(self, document: bytes | str | dict[str, Any]) -> ActorGraph:
        """
        Replace the snapshot with an imported JSON document.

        Raises:
            InvalidGraphError: If the document is not a valid snapshot
        """
        if isinstance(document, dict):
            graph = persistence.graph_from_data(document)
        else:
            graph = persistence.graph_from_json(document)
        logger.info(f"Imported graph with {len(graph.actors)} actors")
        return await self._replace(graph)

    async def clear(self) -> bool:
        """Drop the snapshot and its mirror. Returns whether anything was loaded."""
        async with self._lock:
            had_graph = self._graph is not None
            self._graph = None
            removed = await asyncio.to_thread(persistence.delete_graph, self.graph_dir)
        return had_graph or removed

    def export(self, fmt: ExportFormat = "json") -> tuple[str, str, str]:
        """
        Render the snapshot for download.

        Returns:
            (content, media type, filename)
        """
        graph = self.require()
        if fmt == "graphml":
            return (
                persistence.export_graphml(graph),
                "application/graphml+xml",
                "actor-graph.graphml",
            )
        return persistence.graph_to_json(graph), "application/json", "actor-graph.json"

    def analyze(self, top: int = 20) -> GraphAnalysis:
        return analysis.analyze_graph(self.require(), top)

    def lookup(self, query: str) -> ActorRecord:
        """
        Find an actor in the snapshot by id or (fuzzy) name.

        Raises:
            GraphNotLoadedError: If no snapshot is loaded
            UnknownActorError: If nothing matches
        """
        actor = analysis.find_actor(self.require(), query)
        if actor is None:
            raise UnknownActorError(query)
        return actor

    def shortest_path(self, source: str, target: str) -> list[ActorRecord] | None:
        a = self.lookup(source)
        b = self.lookup(target)
        return analysis.shortest_path(self.require(), a.id, b.id)

    def ego(self, actor: str, depth: int = 1) -> ActorGraph:
        center = self.lookup(actor)
        subgraph = analysis.ego_subgraph(self.require(), center.id, depth)
        if subgraph is None:
            raise UnknownActorError(actor)
        return subgraph
