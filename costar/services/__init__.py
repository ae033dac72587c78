"""
Service Container and Lifecycle Management.

Builds the shared resolution cache, the oracle client and the
name-correction collaborator once per application, injects them into
every service, and closes them on shutdown.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from costar.core.config import Settings, get_settings
from costar.graph.cache import FileCacheStore, ResolutionCache
from costar.graph.links import LinkFinder
from costar.graph.materializer import GraphMaterializer
from costar.graph.opponent import Opponent
from costar.graph.resolution import EntityResolver
from costar.graph.walk import ChallengeGenerator
from costar.oracle.base import GraphOracle
from costar.oracle.client import WikidataClient
from costar.oracle.correction import LLMNameCorrector, NameCorrector, PassthroughCorrector
from costar.services.game_service import GameService
from costar.services.graph_service import GraphService
from costar.services.score_service import ScoreService

logger = logging.getLogger(__name__)

_NOT_STARTED = "ServiceContainer not initialized - call startup() first"


class ServiceContainer:
    """
    Dependency injection container for all services.

    Args:
        settings: Application settings (defaults to ``get_settings()``)
        oracle: Pre-built oracle; a cached ``WikidataClient`` when omitted
        corrector: Pre-built name corrector; built from settings when omitted
        rng: Random source shared by the walk, opponent and materializer
    """

    def __init__(
        self,
        settings: Settings | None = None,
        oracle: GraphOracle | None = None,
        corrector: NameCorrector | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._oracle_override = oracle
        self._corrector_override = corrector
        self._rng = rng or random.Random()
        self._cache: ResolutionCache | None = None
        self._oracle: GraphOracle | None = None
        self._corrector: NameCorrector | None = None
        self._game: GameService | None = None
        self._graph: GraphService | None = None
        self._scores: ScoreService | None = None

    @property
    def cache(self) -> ResolutionCache:
        if self._cache is None:
            raise RuntimeError(_NOT_STARTED)
        return self._cache

    @property
    def game(self) -> GameService:
        if self._game is None:
            raise RuntimeError(_NOT_STARTED)
        return self._game

    @property
    def graph(self) -> GraphService:
        if self._graph is None:
            raise RuntimeError(_NOT_STARTED)
        return self._graph

    @property
    def scores(self) -> ScoreService:
        if self._scores is None:
            raise RuntimeError(_NOT_STARTED)
        return self._scores

    def _build_corrector(self) -> NameCorrector:
        if self._corrector_override is not None:
            return self._corrector_override
        if not self.settings.corrector_enabled:
            return PassthroughCorrector()
        return LLMNameCorrector.from_settings(self.settings)

    async def startup(self) -> None:
        """Create services in dependency order and restore the graph snapshot."""
        s = self.settings
        logger.info("Starting service container")

        self._cache = ResolutionCache(
            FileCacheStore(s.data_path / "cache", max_bytes=s.cache_max_bytes),
            ttl_seconds=s.cache_ttl_seconds,
            evict_fraction=s.cache_evict_fraction,
        )
        self._oracle = self._oracle_override or WikidataClient.from_settings(s, self._cache)
        self._corrector = self._build_corrector()

        links = LinkFinder(self._oracle)
        generator = ChallengeGenerator(
            self._oracle,
            links,
            self._rng,
            attempts=s.challenge_attempts,
            path_attempts=s.path_attempts,
            start_min_sitelinks=s.start_min_sitelinks,
            start_pool_size=s.start_pool_size,
            walk_min_sitelinks=s.walk_min_sitelinks,
            hint_path_max_length=s.hint_path_max_length,
        )
        opponent = Opponent(
            self._oracle,
            self._rng,
            min_sitelinks=s.opponent_min_sitelinks,
            candidate_limit=s.opponent_candidate_limit,
            hint_min_sitelinks=s.hint_min_sitelinks,
            hint_candidate_limit=s.hint_candidate_limit,
            hint_count=s.hint_count,
        )
        materializer = GraphMaterializer(
            self._oracle,
            self._rng,
            min_films=s.graph_min_films,
            row_multiplier=s.graph_row_multiplier,
            top_fraction=s.graph_top_fraction,
        )

        self._game = GameService(
            EntityResolver(self._oracle, self._corrector), links, generator, opponent
        )
        self._graph = GraphService(materializer, s.data_path)
        self._scores = ScoreService(s.data_path)

        await self._graph.restore()
        logger.info("Service container started")

    async def shutdown(self) -> None:
        """Close outbound clients and drop service references."""
        logger.info("Shutting down service container")

        for resource in (self._oracle, self._corrector):
            aclose = getattr(resource, "aclose", None)
            if aclose is not None:
                await aclose()

        self._cache = None
        self._oracle = None
        self._corrector = None
        self._game = None
        self._graph = None
        self._scores = None

        logger.info("Service container shutdown complete")


# Global service container instance
_services: ServiceContainer | None = None


def get_services() -> ServiceContainer:
    """
    Get the global service container instance.

    Raises:
        RuntimeError: If container hasn't been initialized
    """
    if _services is None:
        raise RuntimeError(
            "Services not initialized - ensure services_lifespan() is used"
        )
    return _services


@asynccontextmanager
async def services_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    FastAPI lifespan context manager for service initialization.

    Example:
        app = FastAPI(lifespan=services_lifespan)
    """
    global _services

    _services = ServiceContainer()
    await _services.startup()
    logger.info("FastAPI services initialized")

    try:
        yield
    finally:
        if _services:
            await _services.shutdown()
        _services = None
        logger.info("FastAPI services cleaned up")


__all__ = [
    "ServiceContainer",
    "get_services",
    "services_lifespan",
    "GameService",
    "GraphService",
    "ScoreService",
]
