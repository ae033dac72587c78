"""
Game Service: the caller-facing gameplay operations.

Wraps the resolver, link finder, challenge generator and opponent behind
one object the API layer talks to. Game state (path, used actors,
mistakes) stays with the caller; every method here is a pure function
of its arguments plus oracle answers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from costar.graph.cancellation import CancelEvent
from costar.graph.errors import OracleError, UnknownActorError
from costar.graph.links import LinkFinder
from costar.graph.models import (
    Challenge,
    CoStar,
    Entity,
    HintResult,
    MoveStatus,
    MoveVerdict,
    ResolvedLink,
    WalkStep,
)
from costar.graph.opponent import Opponent
from costar.graph.outcomes import Found, NotFound, OracleFailure, Resolution
from costar.graph.resolution import EntityResolver
from costar.graph.walk import ChallengeGenerator

logger = logging.getLogger(__name__)


class GameService:
    """Gameplay operations over the shared, cached oracle."""

    def __init__(
        self,
        resolver: EntityResolver,
        links: LinkFinder,
        generator: ChallengeGenerator,
        opponent: Opponent,
    ) -> None:
        self.resolver = resolver
        self.links = links
        self.generator = generator
        self.opponent = opponent

    async def resolve(self, name: str) -> Resolution:
        """Resolve free text to an actor (tagged outcome)."""
        return await self.resolver.resolve_outcome(name)

    async def require_actor(self, name: str) -> Entity:
        """
        Resolve a name that must denote an actor.

        Raises:
            UnknownActorError: If no actor matches
            OracleError: If the oracle is unreachable
        """
        outcome = await self.resolver.resolve_outcome(name)
        if isinstance(outcome, Found):
            return outcome.entity
        if isinstance(outcome, OracleFailure):
            raise OracleError(outcome.reason)
        raise UnknownActorError(name)

    async def find_link(self, a: Entity, b: Entity) -> ResolvedLink | None:
        return await self.links.find_shared_edge(a, b)

    async def generate_challenge(
        self,
        min_length: int,
        max_length: int,
        start_name: str | None = None,
        end_name: str | None = None,
        cancel: CancelEvent | None = None,
    ) -> Challenge:
        """
        Build a challenge, resolving any caller-chosen endpoints first.

        Raises:
            UnknownActorError: If a named endpoint does not resolve
            GenerationExhaustedError: If the walk failed every attempt
        """
        start = await self.require_actor(start_name) if start_name else None
        end = await self.require_actor(end_name) if end_name else None
        return await self.generator.generate_challenge(
            min_length, max_length, start=start, end=end, cancel=cancel
        )

    async def path_from_position(
        self,
        current: Entity,
        target: Entity,
        max_length: int,
        cancel: CancelEvent | None = None,
    ) -> list[WalkStep] | None:
        return await self.generator.generate_path_from_position(
            current, target, max_length, cancel
        )

    async def hint(
        self,
        solution: list[WalkStep],
        current: Entity,
        target: Entity,
        hints_used: int,
    ) -> HintResult:
        return await self.generator.next_hint(solution, current, target, hints_used)

    async def submit_guess(
        self, path: list[Entity], target: Entity, guess_name: str
    ) -> MoveVerdict:
        """
        Judge a guessed actor against the caller's current path.

        Args:
            path: Actors played so far, starting actor first (non-empty)
            target: Actor that ends the challenge
            guess_name: Free-text name the player entered

        Returns:
            The verdict; mistakes are verdicts, not errors.

        Raises:
            ValueError: If ``path`` is empty
            OracleError: If the oracle is unreachable (the guess cannot be judged)
        """
        if not path:
            raise ValueError("path must contain at least the starting actor")

        outcome = await self.resolver.resolve_outcome(guess_name)
        if isinstance(outcome, OracleFailure):
            raise OracleError(outcome.reason)
        if isinstance(outcome, NotFound):
            return MoveVerdict(status=MoveStatus.UNKNOWN_ACTOR)

        entity = outcome.entity
        if entity.id in {actor.id for actor in path}:
            return MoveVerdict(status=MoveStatus.ALREADY_USED, entity=entity)

        link = await self.links.find_shared_edge(path[-1], entity)
        if link is None:
            return MoveVerdict(status=MoveStatus.NO_SHARED_FILM, entity=entity)

        status = MoveStatus.REACHED_TARGET if entity.id == target.id else MoveStatus.ACCEPTED
        logger.info(f"Guess {entity.label} via {link.title}: {status.value}")
        return MoveVerdict(status=status, entity=entity, link=link)

    async def ai_respond(self, last: Entity, excluded: Iterable[str]) -> CoStar | None:
        return await self.opponent.respond(last, excluded)

    async def get_hints(self, last: Entity, excluded: Iterable[str]) -> list[CoStar]:
        return await self.opponent.get_hints(last, excluded)

    async def random_start(self) -> Entity | None:
        return await self.generator.random_start()
