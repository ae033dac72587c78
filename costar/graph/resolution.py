"""
Entity resolution: free-text player input to a graph actor.

Two phases:
1. Direct lookup against the oracle's entity search, confirming each
   candidate is an actor (one predicate query per candidate, stopping at
   the first confirmed one)
2. If nothing matched, ask the name-correction collaborator for a better
   spelling and retry phase 1 once, unless the suggestion is the input
   itself (compared case-insensitively)

Disambiguation order: candidates whose label equals the query exactly
(case-sensitive) come first, then the rest by popularity descending,
ties kept in the oracle's native order.

An oracle failure yields ``OracleFailure`` without consulting the
corrector, so "unknown name" and "oracle down" stay distinguishable.
"""

from __future__ import annotations

import logging

from costar.graph.errors import OracleError
from costar.graph.models import Entity
from costar.graph.normalization import clean_query, same_name
from costar.graph.outcomes import Found, NotFound, OracleFailure, Resolution
from costar.oracle.base import GraphOracle
from costar.oracle.correction import NameCorrector, PassthroughCorrector
from costar.oracle.rows import ActorSearchRow

logger = logging.getLogger(__name__)


def rank_candidates(
    query: str, candidates: list[ActorSearchRow], popularity: dict[str, int]
) -> list[ActorSearchRow]:
    """
    Order search candidates for confirmation.

    Args:
        query: The (whitespace-cleaned) name being resolved
        candidates: Search hits in oracle order
        popularity: Notability ordinal per candidate id (missing means 0)

    Returns:
        Exact label matches first, then the others by popularity descending.
    """
    exact = [c for c in candidates if c.label == query]
    others = [c for c in candidates if c.label != query]
    others.sort(key=lambda c: popularity.get(c.id, 0), reverse=True)
    return exact + others


class EntityResolver:
    """
    Resolves actor names through the oracle with assisted spelling recovery.

    Args:
        oracle: Graph oracle (cached client in production)
        corrector: Name-correction collaborator; defaults to no correction
    """

    def __init__(
        self, oracle: GraphOracle, corrector: NameCorrector | None = None
    ) -> None:
        self.oracle = oracle
        self.corrector = corrector or PassthroughCorrector()

    async def resolve(self, name: str) -> Entity | None:
        """Resolve a name, collapsing every non-found outcome to None."""
        outcome = await self.resolve_outcome(name)
        if isinstance(outcome, Found):
            return outcome.entity
        return None

    async def resolve_outcome(self, name: str) -> Resolution:
        """
        Resolve a name into a tagged outcome.

        Args:
            name: Free-text input from the player

        Returns:
            Found, NotFound (with the correction tried, if any) or OracleFailure.
        """
        query = clean_query(name)
        if not query:
            return NotFound(query=query)

        try:
            entity = await self._lookup(query)
        except OracleError as e:
            logger.warning(f"Oracle failure resolving '{query}': {e.reason}")
            return OracleFailure(reason=e.reason)
        if entity is not None:
            return Found(entity=entity)

        suggestion = await self._suggest(query)
        if not suggestion or same_name(suggestion, query):
            logger.info(f"No actor found for '{query}' and no alternative spelling")
            return NotFound(query=query)

        logger.info(f"Retrying resolution of '{query}' as '{suggestion}'")
        try:
            entity = await self._lookup(suggestion)
        except OracleError as e:
            logger.warning(f"Oracle failure resolving '{suggestion}': {e.reason}")
            return OracleFailure(reason=e.reason)
        if entity is not None:
            return Found(entity=entity)
        return NotFound(query=query, corrected=suggestion)

    async def _suggest(self, query: str) -> str:
        try:
            return clean_query(await self.corrector.correct(query))
        except Exception as e:
            logger.warning(f"Name correction failed for '{query}': {e}")
            return ""

    async def _lookup(self, query: str) -> Entity | None:
        candidates = await self.oracle.search_actors(query)
        if not candidates:
            return None

        popularity = await self.oracle.popularity([c.id for c in candidates])
        for candidate in rank_candidates(query, candidates, popularity):
            if not await self.oracle.is_actor(candidate.id):
                continue
            return Entity(
                id=candidate.id,
                label=candidate.label or candidate.id,
                description=candidate.description,
                image_url=await self._image(candidate.id),
                popularity=popularity.get(candidate.id),
            )
        return None

    async def _image(self, entity_id: str) -> str | None:
        try:
            return await self.oracle.get_image(entity_id)
        except OracleError as e:
            logger.debug(f"No image for {entity_id}: {e.reason}")
            return None
