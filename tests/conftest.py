"""
Pytest configuration and fixtures for engine tests.

The ``FakeOracle`` serves a small fixed film world so walks, links and
opponent moves are reproducible without network access:

    Sleepless in Seattle (F1): Tom Hanks, Meg Ryan
    Apollo 13 (F2):            Tom Hanks, Bill Paxton, Kevin Bacon
    Footloose (F3):            Kevin Bacon, Lori Singer
    Twister (F4):              Bill Paxton, Helen Hunt
    Solo Project (F5):         Ann Solo (nobody else, so a dead end)
"""

from __future__ import annotations

import random
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any, AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from costar.graph.cache import MemoryCacheStore, ResolutionCache
from costar.graph.errors import OracleError
from costar.graph.links import LinkFinder
from costar.graph.materializer import GraphMaterializer
from costar.graph.models import CoStar, Entity, Film
from costar.graph.opponent import Opponent
from costar.graph.resolution import EntityResolver
from costar.graph.walk import ChallengeGenerator
from costar.oracle.rows import ActorSearchRow, GraphRow
from costar.services.game_service import GameService
from costar.services.graph_service import GraphService
from costar.services.score_service import ScoreService

# Configure pytest-asyncio to use function-scoped event loops
pytest_plugins = ("pytest_asyncio",)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FIXTURE WORLD
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

ACTORS: dict[str, Entity] = {
    e.id: e
    for e in [
        Entity(id="Q1", label="Tom Hanks", popularity=200),
        Entity(id="Q2", label="Meg Ryan", popularity=120),
        Entity(id="Q3", label="Bill Paxton", popularity=80),
        Entity(id="Q4", label="Kevin Bacon", popularity=150),
        Entity(id="Q6", label="Lori Singer", popularity=60),
        Entity(id="Q7", label="Helen Hunt", popularity=110),
        Entity(id="Q9", label="Ann Solo", popularity=55),
        Entity(id="Q31", label="Michael Douglas", popularity=150),
    ]
}

FILMS: dict[str, Film] = {
    f.id: f
    for f in [
        Film(id="F1", title="Sleepless in Seattle", poster_url="https://img/F1.jpg"),
        Film(id="F2", title="Apollo 13"),
        Film(id="F3", title="Footloose"),
        Film(id="F4", title="Twister"),
        Film(id="F5", title="Solo Project"),
    ]
}

CASTS: dict[str, list[str]] = {
    "F1": ["Q1", "Q2"],
    "F2": ["Q1", "Q3", "Q4"],
    "F3": ["Q4", "Q6"],
    "F4": ["Q3", "Q7"],
    "F5": ["Q9"],
}

# A politician sharing an actor's name; searchable but not an actor
NON_ACTORS: dict[str, ActorSearchRow] = {
    "Q30": ActorSearchRow(id="Q30", label="Michael Douglas", description="politician"),
}


def actor(entity_id: str) -> Entity:
    """Fixture actor by id."""
    return ACTORS[entity_id]


class FakeOracle:
    """
    In-memory GraphOracle over the fixture world.

    Every call is recorded in ``calls``; setting ``fail`` makes every
    method raise ``OracleError``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail = False
        self.graph_rows: list[GraphRow] = []

    def _record(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        if self.fail:
            raise OracleError("oracle unavailable")

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def search_actors(self, name: str) -> list[ActorSearchRow]:
        self._record("search_actors", name)
        wanted = name.casefold()
        hits = [row for row in NON_ACTORS.values() if row.label.casefold() == wanted]
        hits += [
            ActorSearchRow(id=e.id, label=e.label, description="actor")
            for e in ACTORS.values()
            if e.label.casefold() == wanted
        ]
        return hits

    async def popularity(self, entity_ids: list[str]) -> dict[str, int]:
        self._record("popularity", entity_ids)
        return {
            entity_id: (ACTORS[entity_id].popularity or 0) if entity_id in ACTORS else 5
            for entity_id in entity_ids
        }

    async def is_actor(self, entity_id: str) -> bool:
        self._record("is_actor", entity_id)
        return entity_id in ACTORS

    async def get_image(self, entity_id: str) -> str | None:
        self._record("get_image", entity_id)
        return f"https://img/{entity_id}.jpg"

    async def get_film_ids(self, entity_id: str) -> list[str]:
        self._record("get_film_ids", entity_id)
        return [film_id for film_id, cast in CASTS.items() if entity_id in cast]

    async def get_film(self, film_id: str) -> Film | None:
        self._record("get_film", film_id)
        return FILMS.get(film_id)

    async def get_cast(self, film_id: str, min_sitelinks: int = 0) -> list[Entity]:
        self._record("get_cast", film_id)
        return [
            ACTORS[a]
            for a in CASTS.get(film_id, [])
            if (ACTORS[a].popularity or 0) >= min_sitelinks
        ]

    async def get_neighbors(
        self,
        entity_id: str,
        excluded: Iterable[str] = (),
        min_sitelinks: int = 30,
        limit: int = 30,
    ) -> list[CoStar]:
        self._record("get_neighbors", entity_id)
        excluded_ids = set(excluded)
        neighbors: list[CoStar] = []
        for film_id, cast in CASTS.items():
            if entity_id not in cast:
                continue
            for other in cast:
                if other == entity_id or other in excluded_ids:
                    continue
                if (ACTORS[other].popularity or 0) < min_sitelinks:
                    continue
                neighbors.append(CoStar(entity=ACTORS[other], film=FILMS[film_id]))
        return neighbors[:limit]

    async def get_notable_actors(self, min_sitelinks: int, limit: int) -> list[Entity]:
        self._record("get_notable_actors", min_sitelinks)
        pool = [e for e in ACTORS.values() if (e.popularity or 0) >= min_sitelinks]
        return pool[:limit]

    async def get_graph_rows(
        self, hub_count: int, min_films: int, row_limit: int
    ) -> list[GraphRow]:
        self._record("get_graph_rows", (hub_count, min_films, row_limit))
        return self.graph_rows[:row_limit]


class RecordingCorrector:
    """Name corrector returning canned suggestions and counting calls."""

    def __init__(self, suggestions: dict[str, str] | None = None) -> None:
        self.suggestions = suggestions or {}
        self.calls: list[str] = []

    async def correct(self, name: str) -> str:
        self.calls.append(name)
        return self.suggestions.get(name, name)


def graph_row(a: str, b: str, movie: str) -> GraphRow:
    """Bulk-download row between two fixture actors."""
    return GraphRow(
        actor1=a,
        actor1_label=ACTORS[a].label if a in ACTORS else a,
        actor2=b,
        actor2_label=ACTORS[b].label if b in ACTORS else b,
        movie=movie,
        movie_label=FILMS[movie].title if movie in FILMS else movie,
    )


def fixture_graph_rows() -> list[GraphRow]:
    """Every co-star pair of the fixture world, one row per shared film."""
    rows = []
    for film_id, cast in CASTS.items():
        for i, a in enumerate(cast):
            for b in cast[i + 1 :]:
                rows.append(graph_row(a, b, film_id))
    return rows


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FIXTURES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary data directory."""
    temp_dir = Path(tempfile.mkdtemp(prefix="test_costar_"))
    yield temp_dir
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def oracle() -> FakeOracle:
    oracle = FakeOracle()
    oracle.graph_rows = fixture_graph_rows()
    return oracle


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def memory_cache() -> ResolutionCache:
    return ResolutionCache(MemoryCacheStore())


@pytest.fixture
def links(oracle: FakeOracle) -> LinkFinder:
    return LinkFinder(oracle)


@pytest.fixture
def generator(
    oracle: FakeOracle, links: LinkFinder, rng: random.Random
) -> ChallengeGenerator:
    return ChallengeGenerator(oracle, links, rng)


@pytest.fixture
def game_service(
    oracle: FakeOracle,
    links: LinkFinder,
    generator: ChallengeGenerator,
    rng: random.Random,
) -> GameService:
    corrector = RecordingCorrector({"Tom Hanx": "Tom Hanks"})
    return GameService(
        EntityResolver(oracle, corrector), links, generator, Opponent(oracle, rng)
    )


@pytest.fixture
def graph_service(
    oracle: FakeOracle, rng: random.Random, temp_data_dir: Path
) -> GraphService:
    return GraphService(GraphMaterializer(oracle, rng, min_films=1), temp_data_dir)


@pytest.fixture
def score_service(temp_data_dir: Path) -> ScoreService:
    return ScoreService(temp_data_dir)


@pytest_asyncio.fixture
async def async_client(
    game_service: GameService,
    graph_service: GraphService,
    score_service: ScoreService,
    memory_cache: ResolutionCache,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with every service dependency overridden."""
    # Import here so settings and logging are configured per test session
    from costar.api.deps import (
        get_cache,
        get_game_service,
        get_graph_service,
        get_score_service,
    )
    from costar.main import app

    app.dependency_overrides[get_game_service] = lambda: game_service
    app.dependency_overrides[get_graph_service] = lambda: graph_service
    app.dependency_overrides[get_score_service] = lambda: score_service
    app.dependency_overrides[get_cache] = lambda: memory_cache
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
