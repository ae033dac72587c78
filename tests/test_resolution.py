"""
Tests for entity resolution.

Tests cover:
- Candidate ranking (exact label first, then popularity)
- Direct resolution and actor confirmation short-circuit
- Assisted recovery through the name-correction collaborator
- Oracle failures reported without consulting the collaborator
"""

from __future__ import annotations

import pytest
from conftest import FakeOracle, RecordingCorrector

from costar.graph.outcomes import Found, NotFound, OracleFailure
from costar.graph.resolution import EntityResolver, rank_candidates
from costar.oracle.rows import ActorSearchRow


class TestRankCandidates:
    """Tests for disambiguation order."""

    def test_exact_label_beats_popularity(self) -> None:
        candidates = [
            ActorSearchRow(id="Q10", label="Tom Hanks Jr"),
            ActorSearchRow(id="Q1", label="Tom Hanks"),
        ]
        ranked = rank_candidates("Tom Hanks", candidates, {"Q10": 500, "Q1": 10})

        assert [c.id for c in ranked] == ["Q1", "Q10"]

    def test_exact_match_is_case_sensitive(self) -> None:
        candidates = [
            ActorSearchRow(id="Q5", label="tom hanks"),
            ActorSearchRow(id="Q1", label="Tom Hanks"),
        ]
        ranked = rank_candidates("Tom Hanks", candidates, {"Q5": 900, "Q1": 1})

        assert ranked[0].id == "Q1"

    def test_popularity_ties_keep_oracle_order(self) -> None:
        candidates = [
            ActorSearchRow(id="Q7", label="A"),
            ActorSearchRow(id="Q8", label="B"),
            ActorSearchRow(id="Q9", label="C"),
        ]
        ranked = rank_candidates("x", candidates, {"Q7": 3, "Q8": 3, "Q9": 9})

        assert [c.id for c in ranked] == ["Q9", "Q7", "Q8"]

    def test_missing_popularity_counts_as_zero(self) -> None:
        candidates = [
            ActorSearchRow(id="Q7", label="A"),
            ActorSearchRow(id="Q8", label="B"),
        ]
        ranked = rank_candidates("x", candidates, {"Q8": 1})

        assert [c.id for c in ranked] == ["Q8", "Q7"]


class TestDirectResolution:
    """Tests for resolution without correction."""

    @pytest.mark.asyncio
    async def test_resolves_known_actor(self, oracle: FakeOracle) -> None:
        corrector = RecordingCorrector()
        resolver = EntityResolver(oracle, corrector)

        outcome = await resolver.resolve_outcome("Tom Hanks")

        assert isinstance(outcome, Found)
        assert outcome.entity.id == "Q1"
        assert outcome.entity.label == "Tom Hanks"
        assert outcome.entity.image_url == "https://img/Q1.jpg"
        assert corrector.calls == []

    @pytest.mark.asyncio
    async def test_whitespace_is_collapsed(self, oracle: FakeOracle) -> None:
        resolver = EntityResolver(oracle)

        entity = await resolver.resolve("  Tom    Hanks ")

        assert entity is not None and entity.id == "Q1"

    @pytest.mark.asyncio
    async def test_skips_non_actor_candidates(self, oracle: FakeOracle) -> None:
        """A same-named politician is passed over for the actor."""
        resolver = EntityResolver(oracle)

        entity = await resolver.resolve("Michael Douglas")

        assert entity is not None and entity.id == "Q31"

    @pytest.mark.asyncio
    async def test_stops_at_first_confirmed_actor(self, oracle: FakeOracle) -> None:
        resolver = EntityResolver(oracle)

        await resolver.resolve("Tom Hanks")

        assert oracle.count("is_actor") == 1

    @pytest.mark.asyncio
    async def test_empty_input_is_not_found(self, oracle: FakeOracle) -> None:
        resolver = EntityResolver(oracle)

        outcome = await resolver.resolve_outcome("   ")

        assert isinstance(outcome, NotFound)
        assert oracle.calls == []


class TestAssistedResolution:
    """Tests for the correction fallback."""

    @pytest.mark.asyncio
    async def test_recovers_misspelling(self, oracle: FakeOracle) -> None:
        corrector = RecordingCorrector({"Tom Hanx": "Tom Hanks"})
        resolver = EntityResolver(oracle, corrector)

        outcome = await resolver.resolve_outcome("Tom Hanx")

        assert isinstance(outcome, Found)
        assert outcome.entity.id == "Q1"
        assert corrector.calls == ["Tom Hanx"]

    @pytest.mark.asyncio
    async def test_same_suggestion_skips_retry(self, oracle: FakeOracle) -> None:
        """A suggestion equal to the input (ignoring case) is not retried."""
        corrector = RecordingCorrector({"Nobody Known": "NOBODY KNOWN"})
        resolver = EntityResolver(oracle, corrector)

        outcome = await resolver.resolve_outcome("Nobody Known")

        assert isinstance(outcome, NotFound)
        assert outcome.corrected is None
        assert oracle.count("search_actors") == 1
        assert len(corrector.calls) == 1

    @pytest.mark.asyncio
    async def test_failed_suggestion_is_reported(self, oracle: FakeOracle) -> None:
        corrector = RecordingCorrector({"Jon Doe": "John Doe"})
        resolver = EntityResolver(oracle, corrector)

        outcome = await resolver.resolve_outcome("Jon Doe")

        assert isinstance(outcome, NotFound)
        assert outcome.corrected == "John Doe"
        assert oracle.count("search_actors") == 2

    @pytest.mark.asyncio
    async def test_raising_corrector_is_tolerated(self, oracle: FakeOracle) -> None:
        class Broken:
            async def correct(self, name: str) -> str:
                raise RuntimeError("model offline")

        resolver = EntityResolver(oracle, Broken())

        outcome = await resolver.resolve_outcome("Jon Doe")

        assert isinstance(outcome, NotFound)


class TestOracleFailure:
    """Tests for oracle failures during resolution."""

    @pytest.mark.asyncio
    async def test_failure_is_distinct_from_not_found(self, oracle: FakeOracle) -> None:
        oracle.fail = True
        corrector = RecordingCorrector({"Tom Hanks": "Tom Hanks"})
        resolver = EntityResolver(oracle, corrector)

        outcome = await resolver.resolve_outcome("Tom Hanks")

        assert isinstance(outcome, OracleFailure)
        assert "unavailable" in outcome.reason
        assert corrector.calls == []

    @pytest.mark.asyncio
    async def test_resolve_collapses_failure_to_none(self, oracle: FakeOracle) -> None:
        oracle.fail = True
        resolver = EntityResolver(oracle)

        assert await resolver.resolve("Tom Hanks") is None
