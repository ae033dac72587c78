"""
Wikidata client: entity search API plus the SPARQL query service.

Responsibilities:
- Issue read-only HTTP GETs and map every transport, HTTP or decoding
  failure to ``OracleError``
- Flatten SPARQL JSON bindings and validate them into typed rows
- Route every small query through the injected ``ResolutionCache``
  (keyed by the rendered query text); the bulk graph download bypasses it

Callers decide whether an ``OracleError`` becomes an empty result or
propagates; the client itself never swallows one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from costar.core.config import Settings
from costar.graph.cache import ResolutionCache
from costar.graph.errors import OracleError
from costar.graph.models import CoStar, Entity, Film
from costar.oracle import queries
from costar.oracle.rows import (
    ActorSearchRow,
    CastRow,
    FilmIdRow,
    FilmRow,
    GraphRow,
    ImageRow,
    NeighborRow,
    PopularityRow,
)

logger = logging.getLogger(__name__)

SPARQL_ACCEPT = "application/sparql-results+json"
CAST_LIMIT = 100
BULK_TIMEOUT_SECONDS = 120.0


def flatten_bindings(data: Any) -> list[dict[str, str]]:
    """
    Reduce a SPARQL JSON result to ``{variable: value}`` rows.

    Examples:
        >>> flatten_bindings({"results": {"bindings": [{"x": {"type": "literal", "value": "1"}}]}})
        [{'x': '1'}]
    """
    if not isinstance(data, dict):
        raise OracleError("SPARQL response is not a JSON object")
    bindings = data.get("results", {}).get("bindings", [])
    return [
        {name: cell.get("value") for name, cell in row.items() if isinstance(cell, dict)}
        for row in bindings
    ]


class WikidataClient:
    """
    Async oracle client backed by Wikidata.

    Args:
        cache: Resolution cache shared by every cached query
        api_url: Wikibase action API endpoint (entity search)
        sparql_url: SPARQL query service endpoint
        timeout: Per-request timeout in seconds
        user_agent: Sent with every request, as Wikimedia requires
        languages: Label languages for the label service, in preference order
        search_limit: Maximum candidates returned by entity search
        http_client: Pre-built client (tests inject one with a MockTransport)
    """

    def __init__(
        self,
        cache: ResolutionCache,
        *,
        api_url: str = "https://www.wikidata.org/w/api.php",
        sparql_url: str = "https://query.wikidata.org/sparql",
        timeout: float = 30.0,
        user_agent: str = "costar/1.0",
        languages: str = "en,fr",
        search_limit: int = 10,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.cache = cache
        self.api_url = api_url
        self.sparql_url = sparql_url
        self.timeout = timeout
        self.languages = languages
        self.search_limit = search_limit
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": user_agent}
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache: ResolutionCache,
        http_client: httpx.AsyncClient | None = None,
    ) -> WikidataClient:
        return cls(
            cache,
            api_url=settings.wikidata_api_url,
            sparql_url=settings.wikidata_sparql_url,
            timeout=settings.oracle_timeout,
            user_agent=settings.oracle_user_agent,
            languages=settings.label_languages,
            search_limit=settings.search_limit,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Transport
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def _request(
        self,
        url: str,
        params: dict[str, str],
        timeout: float | None = None,
    ) -> Any:
        try:
            response = await self._http.get(
                url,
                params=params,
                headers={"Accept": SPARQL_ACCEPT} if url == self.sparql_url else None,
                timeout=timeout or self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Oracle request timed out: {url}")
            raise OracleError(f"Request to {url} timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"Oracle request failed: {url}: {e}")
            raise OracleError(f"Cannot reach {url}: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Oracle returned HTTP {response.status_code} for {url}")
            raise OracleError(
                f"Oracle returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise OracleError("Oracle returned malformed JSON") from e

    async def _fetch_rows(self, query: str) -> list[dict[str, str]]:
        data = await self._request(
            self.sparql_url, {"query": query, "format": "json"}
        )
        return flatten_bindings(data)

    async def select(self, query: str) -> list[dict[str, str]]:
        """Run a cached SELECT query and return flattened rows."""
        return await self.cache.get_or_fetch(query, lambda: self._fetch_rows(query))

    async def ask(self, query: str) -> bool:
        """Run a cached ASK query."""

        async def fetch() -> bool:
            data = await self._request(
                self.sparql_url, {"query": query, "format": "json"}
            )
            if not isinstance(data, dict):
                raise OracleError("ASK response is not a JSON object")
            return data.get("boolean") is True

        return await self.cache.get_or_fetch(query, fetch)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Queries
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def search_actors(self, name: str) -> list[ActorSearchRow]:
        params = {
            "action": "wbsearchentities",
            "search": name,
            "language": "en",
            "format": "json",
            "type": "item",
            "limit": str(self.search_limit),
        }

        async def fetch() -> list[dict[str, Any]]:
            data = await self._request(self.api_url, params)
            if not isinstance(data, dict):
                raise OracleError("Search response is not a JSON object")
            return [
                {
                    "id": hit.get("id"),
                    "label": hit.get("label", ""),
                    "description": hit.get("description"),
                }
                for hit in data.get("search", [])
                if hit.get("id")
            ]

        hits = await self.cache.get_or_fetch(
            f"wbsearchentities:{name}:{self.search_limit}", fetch
        )
        return [ActorSearchRow.model_validate(hit) for hit in hits]

    async def popularity(self, entity_ids: list[str]) -> dict[str, int]:
        if not entity_ids:
            return {}
        rows = await self.select(queries.popularity_query(entity_ids))
        parsed = [PopularityRow.model_validate(row) for row in rows]
        return {row.item: row.sitelinks for row in parsed}

    async def is_actor(self, entity_id: str) -> bool:
        return await self.ask(queries.is_actor_query(entity_id))

    async def get_image(self, entity_id: str) -> str | None:
        rows = await self.select(queries.image_query(entity_id))
        if not rows:
            return None
        return ImageRow.model_validate(rows[0]).image

    async def get_film_ids(self, entity_id: str) -> list[str]:
        rows = await self.select(queries.actor_films_query(entity_id))
        film_ids: list[str] = []
        for row in rows:
            film_id = FilmIdRow.model_validate(row).movie
            if film_id not in film_ids:
                film_ids.append(film_id)
        return film_ids

    async def get_film(self, film_id: str) -> Film | None:
        rows = await self.select(queries.film_query(film_id, self.languages))
        if not rows:
            return None
        return FilmRow.model_validate(rows[0]).to_film()

    async def get_cast(self, film_id: str, min_sitelinks: int = 0) -> list[Entity]:
        rows = await self.select(
            queries.cast_query(film_id, self.languages, min_sitelinks, CAST_LIMIT)
        )
        cast: dict[str, Entity] = {}
        for row in rows:
            entity = CastRow.model_validate(row).to_entity()
            cast.setdefault(entity.id, entity)
        return list(cast.values())

    async def get_neighbors(
        self,
        entity_id: str,
        excluded: Iterable[str] = (),
        min_sitelinks: int = 30,
        limit: int = 30,
    ) -> list[CoStar]:
        excluded_ids = set(excluded)
        rows = await self.select(
            queries.neighbors_query(
                entity_id, self.languages, min_sitelinks, limit, excluded_ids
            )
        )
        neighbors = []
        for row in rows:
            parsed = NeighborRow.model_validate(row)
            if parsed.co_actor == entity_id or parsed.co_actor in excluded_ids:
                continue
            neighbors.append(CoStar(entity=parsed.to_entity(), film=parsed.to_film()))
        return neighbors

    async def get_notable_actors(self, min_sitelinks: int, limit: int) -> list[Entity]:
        rows = await self.select(
            queries.notable_actors_query(self.languages, min_sitelinks, limit)
        )
        actors: dict[str, Entity] = {}
        for row in rows:
            entity = CastRow.model_validate(row).to_entity()
            actors.setdefault(entity.id, entity)
        return list(actors.values())

    async def get_graph_rows(
        self, hub_count: int, min_films: int, row_limit: int
    ) -> list[GraphRow]:
        """Bulk download; too large and too volatile to cache."""
        query = queries.graph_query(hub_count, min_films, row_limit)
        logger.info(
            f"Downloading co-star graph: {hub_count} hubs, up to {row_limit} rows"
        )
        data = await self._request(
            self.sparql_url,
            {"query": query, "format": "json"},
            timeout=max(self.timeout, BULK_TIMEOUT_SECONDS),
        )
        rows = [GraphRow.model_validate(row) for row in flatten_bindings(data)]
        logger.info(f"Downloaded {len(rows)} co-star rows")
        return rows
