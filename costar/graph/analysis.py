"""
Analysis over a materialized co-star snapshot.

Pure functions, no I/O and no hidden randomness: the same snapshot
always yields the same rankings. The snapshot is lifted into an
undirected networkx graph built from each actor's ``co_actors`` in
snapshot order.

Provides:
- top_hubs: actors by degree
- bridge_scores: unconnected co-star pairs each actor joins (a cheap
  stand-in for betweenness, exact betweenness being too slow interactively)
- shortest_path: BFS path between two actors
- ego_subgraph: induced subgraph within ``depth`` hops of an actor
- graph_stats, find_actor, analyze_graph
"""

from __future__ import annotations

import logging

import networkx as nx  # type: ignore[import-untyped]
from rapidfuzz import fuzz, process

from costar.graph.materializer import rebuild_adjacency
from costar.graph.models import (
    ActorGraph,
    ActorRecord,
    BridgeScore,
    GraphAnalysis,
    GraphStats,
)
from costar.graph.normalization import normalize_entity_name

logger = logging.getLogger(__name__)

BRIDGE_LIMIT = 20
FUZZY_SCORE_CUTOFF = 85.0


def to_networkx(graph: ActorGraph) -> nx.Graph:
    """Undirected graph over snapshot actors; edges to unknown ids are skipped."""
    G: nx.Graph = nx.Graph()
    for actor in graph.actors:
        G.add_node(actor.id, label=actor.label)
    for actor in graph.actors:
        for co_actor in actor.co_actors:
            if co_actor in G and co_actor != actor.id:
                G.add_edge(actor.id, co_actor)
    return G


def top_hubs(graph: ActorGraph, n: int = 20) -> list[ActorRecord]:
    """Actors by degree descending; ties keep snapshot order."""
    return sorted(graph.actors, key=lambda actor: actor.degree, reverse=True)[:n]


def bridge_scores(graph: ActorGraph, limit: int = BRIDGE_LIMIT) -> list[BridgeScore]:
    """
    Score each actor by how many of its co-star pairs are not directly linked.

    For an actor with k neighbours, the score is C(k, 2) minus the number
    of triangles through it.

    Returns:
        The ``limit`` highest scores, ties in snapshot order.
    """
    G = to_networkx(graph)
    triangles = nx.triangles(G)
    scored = []
    for actor in graph.actors:
        k = G.degree(actor.id)
        scored.append(
            BridgeScore(actor=actor, score=k * (k - 1) // 2 - triangles[actor.id])
        )
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:limit]


def shortest_path(graph: ActorGraph, source: str, target: str) -> list[ActorRecord] | None:
    """
    Shortest actor sequence between two actor ids.

    Returns:
        Actors from ``source`` to ``target`` inclusive, or None if either
        id is unknown or the two are disconnected.
    """
    G = to_networkx(graph)
    try:
        path_ids = nx.shortest_path(G, source, target)
    except (nx.NodeNotFound, nx.NetworkXNoPath):
        return None
    index = graph.actor_index()
    return [index[actor_id] for actor_id in path_ids]


def ego_subgraph(graph: ActorGraph, center_id: str, depth: int = 1) -> ActorGraph | None:
    """
    Actors within ``depth`` hops of ``center_id`` and the connections among them.

    Co-star lists and degrees in the result are restricted to the subgraph.

    Returns:
        The subgraph with ``center_actor``/``depth`` metadata, or None if the
        center is not in the snapshot.
    """
    G = to_networkx(graph)
    if center_id not in G:
        return None
    included = set(nx.ego_graph(G, center_id, radius=max(depth, 0)).nodes)

    subgraph = rebuild_adjacency(
        ActorGraph(
            actors=[a for a in graph.actors if a.id in included],
            connections=[
                c
                for c in graph.connections
                if c.actor1 in included and c.actor2 in included
            ],
        )
    )
    subgraph.metadata.center_actor = center_id
    subgraph.metadata.depth = depth
    return subgraph


def graph_stats(graph: ActorGraph) -> GraphStats:
    """Size, degree spread and density (2E / (N(N-1)))."""
    degrees = [actor.degree for actor in graph.actors]
    actor_count = len(graph.actors)
    connection_count = len(graph.connections)
    if not degrees:
        return GraphStats(
            actor_count=0,
            connection_count=connection_count,
            avg_degree=0.0,
            max_degree=0,
            min_degree=0,
            density=0.0,
        )

    density = (
        2 * connection_count / (actor_count * (actor_count - 1)) if actor_count > 1 else 0.0
    )
    return GraphStats(
        actor_count=actor_count,
        connection_count=connection_count,
        avg_degree=round(sum(degrees) / actor_count, 2),
        max_degree=max(degrees),
        min_degree=min(degrees),
        density=density,
    )


def find_actor(graph: ActorGraph, query: str) -> ActorRecord | None:
    """
    Look an actor up by id, exact label, or fuzzy label.

    Args:
        graph: Snapshot to search
        query: Actor id ("Q2263") or display name

    Returns:
        The best match, or None if nothing scores above the cutoff.
    """
    index = graph.actor_index()
    if query in index:
        return index[query]

    wanted = normalize_entity_name(query)
    if not wanted:
        return None
    for actor in graph.actors:
        if normalize_entity_name(actor.label) == wanted:
            return actor

    labels = {actor.id: actor.label for actor in graph.actors}
    match = process.extractOne(
        query,
        labels,
        scorer=fuzz.WRatio,
        processor=normalize_entity_name,
        score_cutoff=FUZZY_SCORE_CUTOFF,
    )
    if match is None:
        return None
    _, score, actor_id = match
    logger.debug(f"Fuzzy actor match '{query}' -> {actor_id} ({score:.1f})")
    return index[actor_id]


def analyze_graph(graph: ActorGraph, top: int = 20) -> GraphAnalysis:
    """Hubs, bridges and statistics in one pass."""
    return GraphAnalysis(
        hubs=top_hubs(graph, top),
        bridges=bridge_scores(graph),
        stats=graph_stats(graph),
    )
