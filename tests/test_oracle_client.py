"""
Tests for the Wikidata client.

Uses httpx.MockTransport so no request leaves the process.

Tests cover:
- Binding flattening and typed row parsing (URIs reduced to bare ids)
- Caching by query text
- Error mapping (HTTP status, transport failure, malformed JSON)
- Query rendering details that affect cache keys
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from costar.graph.cache import MemoryCacheStore, ResolutionCache
from costar.graph.errors import OracleError
from costar.oracle import queries
from costar.oracle.client import WikidataClient, flatten_bindings

API_URL = "https://wikidata.test/w/api.php"
SPARQL_URL = "https://query.wikidata.test/sparql"
ENTITY = "http://www.wikidata.org/entity/"


def uri(entity_id: str) -> dict[str, str]:
    return {"type": "uri", "value": f"{ENTITY}{entity_id}"}


def literal(value: str) -> dict[str, str]:
    return {"type": "literal", "value": value}


def sparql(*rows: dict[str, Any]) -> dict[str, Any]:
    return {"head": {"vars": []}, "results": {"bindings": list(rows)}}


class Recorder:
    """MockTransport handler that records requests and delegates to a responder."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def make_client(recorder: Recorder) -> WikidataClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return WikidataClient(
        ResolutionCache(MemoryCacheStore()),
        api_url=API_URL,
        sparql_url=SPARQL_URL,
        http_client=http,
    )


def query_of(request: httpx.Request) -> str:
    return request.url.params.get("query", "")


class TestFlattenBindings:
    def test_flattens_values(self) -> None:
        rows = flatten_bindings(sparql({"movie": uri("Q1"), "movieLabel": literal("Big")}))

        assert rows == [{"movie": f"{ENTITY}Q1", "movieLabel": "Big"}]

    def test_missing_results(self) -> None:
        assert flatten_bindings({}) == []

    def test_non_object_rejected(self) -> None:
        with pytest.raises(OracleError):
            flatten_bindings(["nope"])


class TestQueries:
    """Tests for typed query methods."""

    @pytest.mark.asyncio
    async def test_search_actors(self) -> None:
        recorder = Recorder(
            lambda r: httpx.Response(
                200,
                json={
                    "search": [
                        {"id": "Q2263", "label": "Tom Hanks", "description": "American actor"},
                        {"label": "missing id"},
                    ]
                },
            )
        )
        client = make_client(recorder)

        rows = await client.search_actors("Tom Hanks")

        assert [(r.id, r.label) for r in rows] == [("Q2263", "Tom Hanks")]
        params = recorder.requests[0].url.params
        assert params["action"] == "wbsearchentities"
        assert params["search"] == "Tom Hanks"
        assert str(recorder.requests[0].url).startswith(API_URL)

    @pytest.mark.asyncio
    async def test_film_ids_are_bare_and_deduplicated(self) -> None:
        recorder = Recorder(
            lambda r: httpx.Response(
                200,
                json=sparql(
                    {"movie": uri("Q100")}, {"movie": uri("Q200")}, {"movie": uri("Q100")}
                ),
            )
        )
        client = make_client(recorder)

        assert await client.get_film_ids("Q2263") == ["Q100", "Q200"]
        assert recorder.requests[0].headers["Accept"] == "application/sparql-results+json"

    @pytest.mark.asyncio
    async def test_repeated_query_is_served_from_cache(self) -> None:
        recorder = Recorder(lambda r: httpx.Response(200, json=sparql({"movie": uri("Q1")})))
        client = make_client(recorder)

        await client.get_film_ids("Q2263")
        await client.get_film_ids("Q2263")
        await client.get_film_ids("Q5")

        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_is_actor(self) -> None:
        recorder = Recorder(lambda r: httpx.Response(200, json={"head": {}, "boolean": True}))
        client = make_client(recorder)

        assert await client.is_actor("Q2263") is True
        assert "ASK" in query_of(recorder.requests[0])

    @pytest.mark.asyncio
    async def test_get_film_sanitizes_title(self) -> None:
        recorder = Recorder(
            lambda r: httpx.Response(
                200,
                json=sparql(
                    {
                        "movie": uri("Q100"),
                        "movieLabel": literal("Big\u0007"),
                        "poster": literal("https://img/big.jpg"),
                    }
                ),
            )
        )
        film = await make_client(recorder).get_film("Q100")

        assert film is not None
        assert film.id == "Q100"
        assert film.title == "Big"
        assert film.poster_url == "https://img/big.jpg"

    @pytest.mark.asyncio
    async def test_get_film_missing(self) -> None:
        recorder = Recorder(lambda r: httpx.Response(200, json=sparql()))

        assert await make_client(recorder).get_film("Q100") is None

    @pytest.mark.asyncio
    async def test_neighbors_drop_excluded_and_self(self) -> None:
        recorder = Recorder(
            lambda r: httpx.Response(
                200,
                json=sparql(
                    {
                        "coActor": uri("Q2"),
                        "coActorLabel": literal("Meg Ryan"),
                        "movie": uri("Q100"),
                        "movieLabel": literal("Sleepless in Seattle"),
                    },
                    {"coActor": uri("Q3"), "movie": uri("Q101")},
                    {"coActor": uri("Q1"), "movie": uri("Q101")},
                ),
            )
        )
        neighbors = await make_client(recorder).get_neighbors("Q1", excluded=["Q3"])

        assert [(n.entity.id, n.film.id) for n in neighbors] == [("Q2", "Q100")]
        assert neighbors[0].film.title == "Sleepless in Seattle"

    @pytest.mark.asyncio
    async def test_cast_is_deduplicated(self) -> None:
        recorder = Recorder(
            lambda r: httpx.Response(
                200,
                json=sparql(
                    {"actor": uri("Q1"), "actorLabel": literal("Tom Hanks"), "sitelinks": literal("200")},
                    {"actor": uri("Q1"), "actorLabel": literal("Tom Hanks"), "sitelinks": literal("200")},
                    {"actor": uri("Q2"), "actorLabel": literal("Meg Ryan")},
                ),
            )
        )
        cast = await make_client(recorder).get_cast("Q100", min_sitelinks=20)

        assert [a.id for a in cast] == ["Q1", "Q2"]
        assert cast[0].popularity == 200
        assert "?sitelinks > 20" in query_of(recorder.requests[0])

    @pytest.mark.asyncio
    async def test_popularity(self) -> None:
        recorder = Recorder(
            lambda r: httpx.Response(
                200,
                json=sparql(
                    {"item": uri("Q1"), "sitelinks": literal("120")},
                    {"item": uri("Q2"), "sitelinks": literal("7")},
                ),
            )
        )
        client = make_client(recorder)

        assert await client.popularity(["Q1", "Q2"]) == {"Q1": 120, "Q2": 7}
        assert await client.popularity([]) == {}
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_graph_rows_bypass_cache(self) -> None:
        row = {
            "actor1": uri("Q1"),
            "actor1Label": literal("Tom Hanks"),
            "actor2": uri("Q2"),
            "actor2Label": literal("Meg Ryan"),
            "movie": uri("Q100"),
            "movieLabel": literal("Sleepless in Seattle"),
        }
        recorder = Recorder(lambda r: httpx.Response(200, json=sparql(row)))
        client = make_client(recorder)

        first = await client.get_graph_rows(10, 5, 100)
        await client.get_graph_rows(10, 5, 100)

        assert first[0].actor1 == "Q1" and first[0].movie_label == "Sleepless in Seattle"
        assert len(recorder.requests) == 2


class TestErrors:
    """Every failure surfaces as OracleError."""

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        recorder = Recorder(lambda r: httpx.Response(429, text="slow down"))

        with pytest.raises(OracleError) as exc_info:
            await make_client(recorder).get_film_ids("Q1")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(OracleError):
            await make_client(Recorder(refuse)).is_actor("Q1")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(OracleError) as exc_info:
            await make_client(Recorder(slow)).search_actors("x")

        assert "timed out" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_malformed_json(self) -> None:
        recorder = Recorder(lambda r: httpx.Response(200, text="<html>"))

        with pytest.raises(OracleError):
            await make_client(recorder).get_image("Q1")

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self) -> None:
        responses = iter(
            [httpx.Response(503), httpx.Response(200, json=sparql({"movie": uri("Q9")}))]
        )
        recorder = Recorder(lambda r: next(responses))
        client = make_client(recorder)

        with pytest.raises(OracleError):
            await client.get_film_ids("Q1")
        assert await client.get_film_ids("Q1") == ["Q9"]


class TestQueryRendering:
    def test_neighbors_query_is_order_independent(self) -> None:
        a = queries.neighbors_query("Q1", "en", 30, 30, ["Q3", "Q2"])
        b = queries.neighbors_query("Q1", "en", 30, 30, ["Q2", "Q3", "Q1"])

        assert a == b
        assert "NOT IN (wd:Q2, wd:Q3)" in a

    def test_neighbors_query_without_exclusions(self) -> None:
        assert "NOT IN" not in queries.neighbors_query("Q1", "en", 30, 30)

    def test_is_actor_covers_every_acting_occupation(self) -> None:
        query = queries.is_actor_query("Q1")

        for occupation in queries.ACTOR_OCCUPATIONS:
            assert f"wd:{occupation}" in query
