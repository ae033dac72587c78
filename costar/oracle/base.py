"""
Oracle interface consumed by the resolver, link finder, walk generator,
opponent and materializer.

The production implementation is ``WikidataClient``; tests substitute
an in-memory fake with the same methods. Every method may raise
``OracleError`` on transport or HTTP failure.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from costar.graph.models import CoStar, Entity, Film
from costar.oracle.rows import ActorSearchRow, GraphRow


class GraphOracle(Protocol):
    """Read-only queries against the remote co-star graph."""

    async def search_actors(self, name: str) -> list[ActorSearchRow]:
        """Candidates whose label matches ``name``, in oracle order."""
        ...

    async def popularity(self, entity_ids: list[str]) -> dict[str, int]:
        """Notability ordinal (sitelink count) per entity id."""
        ...

    async def is_actor(self, entity_id: str) -> bool: ...

    async def get_image(self, entity_id: str) -> str | None: ...

    async def get_film_ids(self, entity_id: str) -> list[str]:
        """Films the entity appears in, in oracle order."""
        ...

    async def get_film(self, film_id: str) -> Film | None: ...

    async def get_cast(self, film_id: str, min_sitelinks: int = 0) -> list[Entity]:
        """Actors credited on a film, filtered by notability."""
        ...

    async def get_neighbors(
        self,
        entity_id: str,
        excluded: Iterable[str] = (),
        min_sitelinks: int = 30,
        limit: int = 30,
    ) -> list[CoStar]:
        """Co-actors of an entity with the linking film, minus ``excluded``."""
        ...

    async def get_notable_actors(self, min_sitelinks: int, limit: int) -> list[Entity]: ...

    async def get_graph_rows(
        self, hub_count: int, min_films: int, row_limit: int
    ) -> list[GraphRow]:
        """Bulk (actor1, actor2, movie) rows around the most notable hubs."""
        ...
