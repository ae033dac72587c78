"""
Local graph materialization from a bulk oracle download.

Selection policy (two tiers):
1. Keep the top ``top_fraction`` of ``max_total`` actors by discovered
   film count unconditionally (guaranteed hubs)
2. Fill the rest of ``max_total`` with a random sample of the remaining
   actors, so lesser-known bridge actors stay represented

Only rows whose two actors were both selected become connections. The
result satisfies the snapshot invariants:
- every connection endpoint is a listed actor
- connections are symmetric in ``co_actors``
- ``degree == len(co_actors)`` for every actor

Snapshots are rebuilt wholesale on every download, never patched.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Iterable
from datetime import datetime, timezone

from costar.graph.models import ActorGraph, ActorRecord, Connection, Film, GraphMetadata
from costar.graph.normalization import sanitize_label
from costar.oracle.base import GraphOracle
from costar.oracle.rows import GraphRow

logger = logging.getLogger(__name__)

DISTRIBUTION_BUCKETS: list[tuple[str, int, float]] = [
    ("1-2 films", 0, 2),
    ("3-5 films", 3, 5),
    ("6-10 films", 6, 10),
    ("11-20 films", 11, 20),
    ("20+ films", 21, math.inf),
]


def film_count_distribution(movie_counts: Iterable[int]) -> dict[str, int]:
    """
    Bucket actors by how many films they appear in.

    Examples:
        >>> film_count_distribution([1, 4, 25])["20+ films"]
        1
    """
    distribution = {label: 0 for label, _, _ in DISTRIBUTION_BUCKETS}
    for count in movie_counts:
        for label, low, high in DISTRIBUTION_BUCKETS:
            if low <= count <= high:
                distribution[label] += 1
                break
    return distribution


def _pair_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_actor_graph(
    rows: list[GraphRow],
    max_total: int,
    rng: random.Random | None = None,
    top_fraction: float = 0.4,
) -> ActorGraph:
    """
    Build a snapshot from bulk (actor1, actor2, movie) rows.

    Args:
        rows: Rows from the bulk download
        max_total: Maximum number of actors to keep
        rng: Random source for the diversity sample
        top_fraction: Share of ``max_total`` reserved for the top actors

    Returns:
        The materialized graph with distribution metadata.
    """
    rng = rng or random.Random()

    labels: dict[str, str] = {}
    movies: dict[str, dict[str, None]] = {}
    for row in rows:
        for actor_id, label in ((row.actor1, row.actor1_label), (row.actor2, row.actor2_label)):
            if actor_id not in labels:
                labels[actor_id] = sanitize_label(label or "") or actor_id
                movies[actor_id] = {}
            movies[actor_id][row.movie] = None

    # Stable sort keeps first-seen order among equal film counts
    ranked = sorted(labels, key=lambda actor_id: len(movies[actor_id]), reverse=True)
    top_count = min(math.floor(max_total * top_fraction), len(ranked))
    selected = set(ranked[:top_count])

    remaining = ranked[top_count:]
    rng.shuffle(remaining)
    sample_size = max(0, min(max_total - len(selected), len(remaining)))
    selected.update(remaining[:sample_size])

    logger.info(
        f"Selected {len(selected)} of {len(ranked)} actors "
        f"({top_count} hubs + {len(selected) - top_count} sampled)"
    )

    co_actors: dict[str, dict[str, None]] = {actor_id: {} for actor_id in selected}
    connections: dict[tuple[str, str], Connection] = {}
    for row in rows:
        if row.actor1 not in selected or row.actor2 not in selected:
            continue
        if row.actor1 == row.actor2:
            continue
        co_actors[row.actor1][row.actor2] = None
        co_actors[row.actor2][row.actor1] = None

        key = _pair_key(row.actor1, row.actor2)
        connection = connections.get(key)
        if connection is None:
            connection = Connection(actor1=row.actor1, actor2=row.actor2)
            connections[key] = connection
        if all(film.id != row.movie for film in connection.movies):
            title = sanitize_label(row.movie_label or "") or row.movie
            connection.movies.append(Film(id=row.movie, title=title))

    actors = [
        ActorRecord(
            id=actor_id,
            label=labels[actor_id],
            movies=list(movies[actor_id]),
            co_actors=list(co_actors[actor_id]),
            degree=len(co_actors[actor_id]),
            movie_count=len(movies[actor_id]),
        )
        for actor_id in labels
        if actor_id in selected
    ]
    connection_list = list(connections.values())

    return ActorGraph(
        actors=actors,
        connections=connection_list,
        metadata=GraphMetadata(
            actor_count=len(actors),
            connection_count=len(connection_list),
            download_date=_utc_now_iso(),
            distribution=film_count_distribution(a.movie_count for a in actors),
        ),
    )


def rebuild_adjacency(graph: ActorGraph) -> ActorGraph:
    """
    Recompute derived fields of an imported snapshot.

    Drops connections whose endpoints are unknown or identical, merges
    duplicate pairs, and derives ``co_actors``/``degree`` from the
    connections so the snapshot invariants hold whatever the input said.
    """
    known = {actor.id for actor in graph.actors}
    co_actors: dict[str, dict[str, None]] = {actor_id: {} for actor_id in known}
    connections: dict[tuple[str, str], Connection] = {}

    for connection in graph.connections:
        a, b = connection.actor1, connection.actor2
        if a == b or a not in known or b not in known:
            continue
        co_actors[a][b] = None
        co_actors[b][a] = None
        key = _pair_key(a, b)
        merged = connections.setdefault(key, Connection(actor1=a, actor2=b))
        for film in connection.movies:
            if all(existing.id != film.id for existing in merged.movies):
                merged.movies.append(film)

    actors: list[ActorRecord] = []
    seen: set[str] = set()
    for actor in graph.actors:
        if actor.id in seen:
            continue
        seen.add(actor.id)
        neighbours = list(co_actors[actor.id])
        actors.append(
            actor.model_copy(
                update={
                    "label": sanitize_label(actor.label) or actor.id,
                    "co_actors": neighbours,
                    "degree": len(neighbours),
                    "movie_count": len(actor.movies) if actor.movies else actor.movie_count,
                }
            )
        )

    connection_list = list(connections.values())
    metadata = graph.metadata.model_copy(
        update={
            "actor_count": len(actors),
            "connection_count": len(connection_list),
            "distribution": film_count_distribution(a.movie_count for a in actors),
        }
    )
    return ActorGraph(actors=actors, connections=connection_list, metadata=metadata)


class GraphMaterializer:
    """
    Downloads and materializes a bounded sample of the co-star graph.

    Args:
        oracle: Graph oracle
        rng: Random source for the diversity sample
        min_films: Minimum film count for a hub actor
        row_multiplier: Raw row cap as a multiple of ``max_total``
        top_fraction: Share of the actor budget reserved for hubs
    """

    def __init__(
        self,
        oracle: GraphOracle,
        rng: random.Random | None = None,
        *,
        min_films: int = 5,
        row_multiplier: int = 5,
        top_fraction: float = 0.4,
    ) -> None:
        self.oracle = oracle
        self.rng = rng or random.Random()
        self.min_films = min_films
        self.row_multiplier = row_multiplier
        self.top_fraction = top_fraction

    async def download(self, hub_count: int = 200, max_total: int = 5000) -> ActorGraph:
        """
        Download and build a snapshot.

        Raises:
            ValueError: If ``hub_count`` or ``max_total`` is not positive
            OracleError: If the bulk query fails
        """
        if hub_count < 1 or max_total < 1:
            raise ValueError("hub_count and max_total must be positive")
        rows = await self.oracle.get_graph_rows(
            hub_count, self.min_films, max_total * self.row_multiplier
        )
        graph = build_actor_graph(rows, max_total, self.rng, self.top_fraction)
        logger.info(
            f"Materialized graph: {graph.metadata.actor_count} actors, "
            f"{graph.metadata.connection_count} connections"
        )
        return graph
