"""
Tests for the service layer.

Tests cover:
- GameService guess judging and endpoint resolution
- GraphService snapshot lifecycle (download, restore, import, export, clear)
- ServiceContainer startup/shutdown wiring
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import FakeOracle, RecordingCorrector, actor

from costar.core.config import Settings
from costar.graph.errors import (
    GraphNotLoadedError,
    InvalidGraphError,
    OracleError,
    UnknownActorError,
)
from costar.graph.models import MoveStatus
from costar.services import ServiceContainer
from costar.services.game_service import GameService
from costar.services.graph_service import GraphService


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GAME SERVICE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestSubmitGuess:
    """Tests for guess verdicts."""

    @pytest.mark.asyncio
    async def test_accepted_move(self, game_service: GameService) -> None:
        verdict = await game_service.submit_guess([actor("Q2")], actor("Q4"), "Tom Hanks")

        assert verdict.status == MoveStatus.ACCEPTED
        assert verdict.entity is not None and verdict.entity.id == "Q1"
        assert verdict.link is not None and verdict.link.title == "Sleepless in Seattle"
        assert not verdict.is_mistake

    @pytest.mark.asyncio
    async def test_reaching_target(self, game_service: GameService) -> None:
        verdict = await game_service.submit_guess(
            [actor("Q2"), actor("Q1")], actor("Q4"), "Kevin Bacon"
        )

        assert verdict.status == MoveStatus.REACHED_TARGET
        assert verdict.link is not None and verdict.link.film_id == "F2"

    @pytest.mark.asyncio
    async def test_corrected_guess_is_accepted(self, game_service: GameService) -> None:
        verdict = await game_service.submit_guess([actor("Q2")], actor("Q4"), "Tom Hanx")

        assert verdict.status == MoveStatus.ACCEPTED
        assert verdict.entity is not None and verdict.entity.id == "Q1"

    @pytest.mark.asyncio
    async def test_unknown_actor(self, game_service: GameService) -> None:
        verdict = await game_service.submit_guess([actor("Q2")], actor("Q4"), "Nobody")

        assert verdict.status == MoveStatus.UNKNOWN_ACTOR
        assert verdict.is_mistake

    @pytest.mark.asyncio
    async def test_already_used(self, game_service: GameService) -> None:
        verdict = await game_service.submit_guess(
            [actor("Q2"), actor("Q1")], actor("Q4"), "Meg Ryan"
        )

        assert verdict.status == MoveStatus.ALREADY_USED

    @pytest.mark.asyncio
    async def test_no_shared_film(self, game_service: GameService) -> None:
        verdict = await game_service.submit_guess([actor("Q2")], actor("Q4"), "Helen Hunt")

        assert verdict.status == MoveStatus.NO_SHARED_FILM
        assert verdict.entity is not None and verdict.entity.id == "Q7"

    @pytest.mark.asyncio
    async def test_oracle_down_is_an_error(
        self, oracle: FakeOracle, game_service: GameService
    ) -> None:
        oracle.fail = True

        with pytest.raises(OracleError):
            await game_service.submit_guess([actor("Q2")], actor("Q4"), "Tom Hanks")

    @pytest.mark.asyncio
    async def test_empty_path_rejected(self, game_service: GameService) -> None:
        with pytest.raises(ValueError):
            await game_service.submit_guess([], actor("Q4"), "Tom Hanks")


class TestNamedChallenge:
    @pytest.mark.asyncio
    async def test_named_endpoints(self, game_service: GameService) -> None:
        challenge = await game_service.generate_challenge(
            3, 8, start_name="Meg Ryan", end_name="Helen Hunt"
        )

        assert (challenge.start.id, challenge.end.id) == ("Q2", "Q7")
        assert challenge.path == []

    @pytest.mark.asyncio
    async def test_unknown_endpoint(self, game_service: GameService) -> None:
        with pytest.raises(UnknownActorError):
            await game_service.generate_challenge(1, 3, start_name="Nobody At All")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GRAPH SERVICE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestGraphService:
    """Tests for the snapshot lifecycle."""

    def test_nothing_loaded(self, graph_service: GraphService) -> None:
        assert graph_service.current is None
        with pytest.raises(GraphNotLoadedError):
            graph_service.analyze()

    @pytest.mark.asyncio
    async def test_download_is_mirrored_and_restored(
        self, graph_service: GraphService, temp_data_dir: Path
    ) -> None:
        graph = await graph_service.download(hub_count=10, max_total=100)

        assert (temp_data_dir / "graph" / "actorGraph.json").exists()

        restored = GraphService(graph_service.materializer, temp_data_dir)
        assert await restored.restore() is True
        assert restored.current == graph

    @pytest.mark.asyncio
    async def test_restore_ignores_corrupt_file(self, graph_service: GraphService) -> None:
        graph_service.graph_dir.mkdir(parents=True, exist_ok=True)
        (graph_service.graph_dir / "actorGraph.json").write_text("{", encoding="utf-8")

        assert await graph_service.restore() is False
        assert graph_service.current is None

    @pytest.mark.asyncio
    async def test_import_from_bytes(self, graph_service: GraphService) -> None:
        document = json.dumps(
            {
                "actors": [{"id": "Q1", "label": "A"}, {"id": "Q2", "label": "B"}],
                "connections": [{"actor1": "Q1", "actor2": "Q2", "movies": []}],
            }
        ).encode("utf-8")

        graph = await graph_service.import_document(document)

        assert graph.metadata.actor_count == 2
        assert graph_service.current == graph

    @pytest.mark.asyncio
    async def test_invalid_import_keeps_current(self, graph_service: GraphService) -> None:
        current = await graph_service.download(hub_count=10, max_total=100)

        with pytest.raises(InvalidGraphError):
            await graph_service.import_document({"nodes": []})

        assert graph_service.current == current

    @pytest.mark.asyncio
    async def test_export_formats(self, graph_service: GraphService) -> None:
        await graph_service.download(hub_count=10, max_total=100)

        content, media_type, filename = graph_service.export("json")
        assert media_type == "application/json"
        assert filename == "actor-graph.json"
        assert json.loads(content)["metadata"]["actorCount"] == 6

        content, media_type, _ = graph_service.export("graphml")
        assert media_type == "application/graphml+xml"
        assert "<graphml" in content

    @pytest.mark.asyncio
    async def test_lookup_path_and_ego(self, graph_service: GraphService) -> None:
        await graph_service.download(hub_count=10, max_total=100)

        assert graph_service.lookup("kevin bacon").id == "Q4"
        path = graph_service.shortest_path("Meg Ryan", "Q6")
        assert path is not None
        assert [a.id for a in path] == ["Q2", "Q1", "Q4", "Q6"]
        assert {a.id for a in graph_service.ego("Q4", 1).actors} == {"Q1", "Q3", "Q4", "Q6"}

        with pytest.raises(UnknownActorError):
            graph_service.lookup("Zzyzx Qwerty")

    @pytest.mark.asyncio
    async def test_clear(self, graph_service: GraphService) -> None:
        await graph_service.download(hub_count=10, max_total=100)

        assert await graph_service.clear() is True
        assert graph_service.current is None
        assert await graph_service.clear() is False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SERVICE CONTAINER
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ClosingOracle(FakeOracle):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


class TestServiceContainer:
    def test_access_before_startup(self) -> None:
        container = ServiceContainer(settings=Settings())

        with pytest.raises(RuntimeError):
            _ = container.game

    @pytest.mark.asyncio
    async def test_startup_wires_overrides(self, temp_data_dir: Path) -> None:
        oracle = ClosingOracle()
        container = ServiceContainer(
            settings=Settings(data_path=temp_data_dir),
            oracle=oracle,
            corrector=RecordingCorrector(),
        )

        await container.startup()
        try:
            entity = await container.game.resolver.resolve("Tom Hanks")
            assert entity is not None and entity.id == "Q1"
            assert container.graph.current is None
            assert (temp_data_dir / "cache").is_dir()
        finally:
            await container.shutdown()

        assert oracle.closed
        with pytest.raises(RuntimeError):
            _ = container.scores
