"""
Snapshot persistence: save, load, import, export.

A snapshot is one JSON document with top-level ``actors``,
``connections`` and ``metadata`` (camelCase keys), mirrored to
``<data_path>/graph/actorGraph.json`` for session persistence.

Design Decisions:
- Atomic writes using tempfile + os.replace to prevent corruption
- Imports are validated and their derived fields recomputed, so an
  edited or foreign document cannot break the snapshot invariants
- GraphML export for interoperability (Gephi, yEd, Cytoscape)
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import networkx as nx  # type: ignore[import-untyped]
from pydantic import ValidationError

from costar.core.storage import atomic_write
from costar.graph.errors import InvalidGraphError
from costar.graph.materializer import rebuild_adjacency
from costar.graph.models import ActorGraph

SNAPSHOT_FILENAME = "actorGraph.json"


def graph_to_json(graph: ActorGraph, indent: int | None = 2) -> str:
    """Serialize a snapshot with camelCase keys."""
    return graph.model_dump_json(by_alias=True, indent=indent)


def graph_from_data(data: Any) -> ActorGraph:
    """
    Validate a parsed snapshot document and recompute its derived fields.

    Raises:
        InvalidGraphError: If the document does not describe a snapshot
    """
    if not isinstance(data, dict) or "actors" not in data:
        raise InvalidGraphError("Graph document must be an object with an 'actors' list")
    try:
        graph = ActorGraph.model_validate(data)
    except ValidationError as e:
        raise InvalidGraphError(f"Invalid graph document: {e.error_count()} error(s)") from e
    return rebuild_adjacency(graph)


def graph_from_json(content: str | bytes) -> ActorGraph:
    """
    Parse a snapshot document.

    Raises:
        InvalidGraphError: If the content is not JSON or not a snapshot
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidGraphError(f"Graph document is not valid JSON: {e}") from e
    return graph_from_data(data)


def save_graph(graph: ActorGraph, directory: Path) -> Path:
    """
    Write the snapshot to ``directory/actorGraph.json``.

    Returns:
        Path of the written file.
    """
    path = directory / SNAPSHOT_FILENAME
    atomic_write(path, graph_to_json(graph))
    return path


def load_graph(directory: Path) -> ActorGraph | None:
    """
    Read the mirrored snapshot.

    Returns:
        The snapshot, or None if no snapshot has been saved.

    Raises:
        InvalidGraphError: If the stored file is corrupt
    """
    path = directory / SNAPSHOT_FILENAME
    if not path.exists():
        return None
    return graph_from_json(path.read_text(encoding="utf-8"))


def delete_graph(directory: Path) -> bool:
    """Remove the mirrored snapshot. Returns whether a file existed."""
    path = directory / SNAPSHOT_FILENAME
    if not path.exists():
        return False
    path.unlink()
    return True


def export_graphml(graph: ActorGraph) -> str:
    """
    Render a snapshot as GraphML.

    Node attributes: label, movie_count, degree.
    Edge attributes: films (comma-separated titles), film_count.
    """
    G: nx.Graph = nx.Graph()
    for actor in graph.actors:
        G.add_node(
            actor.id,
            label=actor.label,
            movie_count=actor.movie_count,
            degree=actor.degree,
        )
    for connection in graph.connections:
        G.add_edge(
            connection.actor1,
            connection.actor2,
            # GraphML has no list type
            films=",".join(film.title for film in connection.movies),
            film_count=len(connection.movies),
        )

    buffer = io.BytesIO()
    nx.write_graphml(G, buffer)
    return buffer.getvalue().decode("utf-8")
