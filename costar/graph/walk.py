"""
Random-walk challenge generation and hint recovery.

A challenge is a start actor, an end actor and one known path between
them, built by walking the co-star graph at random:

    Init ──► Step ──► Step ──► ... ──► target length reached ──► Challenge
              │
              └─ dead end: accept if the path is already >= min_length,
                 otherwise abandon this attempt and start over

Each step fetches the current actor's films, picks one at random, then
picks a random co-star on it that the walk has not visited yet. The
target length is sampled once per attempt from [min_length, max_length].
Generation makes a bounded number of attempts and then raises
``GenerationExhaustedError``; it never loops indefinitely.

Hint recovery re-walks from the player's current position toward the
target with the same bounded-attempt discipline, checking for a direct
shared film at every position before taking another random step.
"""

from __future__ import annotations

import logging
import random

from costar.graph.cancellation import CancelEvent, check_cancelled
from costar.graph.errors import GenerationExhaustedError, OracleError
from costar.graph.links import LinkFinder
from costar.graph.models import (
    Challenge,
    Entity,
    Film,
    HintKind,
    HintResult,
    WalkStep,
)
from costar.oracle.base import GraphOracle

logger = logging.getLogger(__name__)


def reverse_path(steps: list[WalkStep]) -> list[WalkStep]:
    """Walk the same edges in the opposite direction."""
    return [
        WalkStep(from_entity=s.to_entity, via_film=s.via_film, to_entity=s.from_entity)
        for s in reversed(steps)
    ]


class ChallengeGenerator:
    """
    Builds solvable challenges and recomputes paths for hints.

    Args:
        oracle: Graph oracle (cached client in production)
        links: Common-link finder used by path recovery
        rng: Random source (seed it for reproducible walks)
        attempts: Full generation attempts before giving up
        path_attempts: Attempts per path recovery
        start_min_sitelinks: Notability floor for random starting actors
        start_pool_size: How many notable actors to draw the start from
        walk_min_sitelinks: Notability floor for co-stars picked while walking
        hint_path_max_length: Longest path a hint recomputation may return
    """

    def __init__(
        self,
        oracle: GraphOracle,
        links: LinkFinder,
        rng: random.Random | None = None,
        *,
        attempts: int = 3,
        path_attempts: int = 5,
        start_min_sitelinks: int = 50,
        start_pool_size: int = 100,
        walk_min_sitelinks: int = 20,
        hint_path_max_length: int = 4,
    ) -> None:
        self.oracle = oracle
        self.links = links
        self.rng = rng or random.Random()
        self.attempts = attempts
        self.path_attempts = path_attempts
        self.start_min_sitelinks = start_min_sitelinks
        self.start_pool_size = start_pool_size
        self.walk_min_sitelinks = walk_min_sitelinks
        self.hint_path_max_length = hint_path_max_length

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Challenge Generation
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def random_start(self, cancel: CancelEvent | None = None) -> Entity | None:
        """
        Pick a notable actor uniformly at random.

        Returns:
            An actor, or None if the pool is empty or unreachable.
        """
        check_cancelled(cancel)
        try:
            pool = await self.oracle.get_notable_actors(
                self.start_min_sitelinks, self.start_pool_size
            )
        except OracleError as e:
            logger.warning(f"Could not load starting actors: {e.reason}")
            return None
        if not pool:
            return None
        return self.rng.choice(pool)

    async def generate_challenge(
        self,
        min_length: int = 3,
        max_length: int = 8,
        start: Entity | None = None,
        end: Entity | None = None,
        cancel: CancelEvent | None = None,
    ) -> Challenge:
        """
        Build a challenge whose path length lies in [min_length, max_length].

        Args:
            min_length: Shortest acceptable path (in steps)
            max_length: Longest path to aim for
            start: Fixed starting actor; random notable actor when omitted
            end: Fixed target actor. With ``start`` also given, no walk is
                made and the challenge carries an empty path (moves are then
                validated one at a time). With only ``end``, the walk runs
                from ``end`` and is reversed.
            cancel: Optional cancellation flag

        Returns:
            The challenge.

        Raises:
            ValueError: If the length bounds are invalid or start == end
            GenerationExhaustedError: If every attempt failed
            WalkCancelledError: If ``cancel`` was set
        """
        if min_length < 1 or max_length < min_length:
            raise ValueError(
                f"Invalid path length bounds: min={min_length}, max={max_length}"
            )
        if start is not None and end is not None:
            if start.id == end.id:
                raise ValueError("Start and end actors must differ")
            return Challenge(start=start, end=end)

        for attempt in range(1, self.attempts + 1):
            check_cancelled(cancel)
            try:
                steps = await self._attempt(min_length, max_length, start, end, cancel)
            except OracleError as e:
                logger.warning(f"Challenge attempt {attempt} hit an oracle failure: {e.reason}")
                continue
            if steps:
                challenge = Challenge(
                    start=steps[0].from_entity, end=steps[-1].to_entity, path=steps
                )
                logger.info(
                    f"Challenge generated on attempt {attempt}: "
                    f"{challenge.start.label} -> {challenge.end.label} ({challenge.length} steps)"
                )
                return challenge
            logger.info(f"Challenge attempt {attempt}/{self.attempts} failed")

        raise GenerationExhaustedError(self.attempts)

    async def _attempt(
        self,
        min_length: int,
        max_length: int,
        start: Entity | None,
        end: Entity | None,
        cancel: CancelEvent | None,
    ) -> list[WalkStep] | None:
        origin = start or end
        if origin is None:
            origin = await self.random_start(cancel)
            if origin is None:
                return None

        target_length = self.rng.randint(min_length, max_length)
        steps = await self._walk(origin, target_length, min_length, cancel)
        if steps and start is None and end is not None:
            return reverse_path(steps)
        return steps

    async def _walk(
        self,
        origin: Entity,
        target_length: int,
        min_length: int,
        cancel: CancelEvent | None,
    ) -> list[WalkStep] | None:
        steps: list[WalkStep] = []
        visited = {origin.id}
        current = origin

        while len(steps) < target_length:
            step = await self._step(current, visited, cancel)
            if step is None:
                if len(steps) >= min_length:
                    logger.info(
                        f"Dead end at {current.label}; accepting {len(steps)}-step path"
                    )
                    return steps
                if not steps:
                    logger.info(f"Dead end at the first step from {origin.label}")
                else:
                    logger.info(
                        f"Dead end at {current.label} after {len(steps)} of {min_length} required steps"
                    )
                return None
            steps.append(step)
            visited.add(step.to_entity.id)
            current = step.to_entity

        return steps

    async def _step(
        self, current: Entity, visited: set[str], cancel: CancelEvent | None
    ) -> WalkStep | None:
        """One random hop to an unvisited co-star, or None at a dead end."""
        check_cancelled(cancel)
        film_ids = await self.oracle.get_film_ids(current.id)
        if not film_ids:
            return None

        film_id = self.rng.choice(film_ids)
        check_cancelled(cancel)
        cast = await self.oracle.get_cast(film_id, self.walk_min_sitelinks)
        candidates = [actor for actor in cast if actor.id not in visited]
        if not candidates:
            return None

        next_actor = self.rng.choice(candidates)
        check_cancelled(cancel)
        film = await self.oracle.get_film(film_id) or Film(id=film_id, title=film_id)
        return WalkStep(from_entity=current, via_film=film, to_entity=next_actor)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Path Recovery & Hints
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def generate_path_from_position(
        self,
        current: Entity,
        target: Entity,
        max_length: int = 4,
        cancel: CancelEvent | None = None,
    ) -> list[WalkStep] | None:
        """
        Find some path of at most ``max_length`` steps from ``current`` to ``target``.

        At each position a direct shared film with the target is checked
        first; otherwise a random step is taken. Oracle failures end the
        current attempt only.

        Returns:
            The path (empty if already at the target), or None if every
            attempt failed.
        """
        if current.id == target.id:
            return []
        if max_length < 1:
            return None

        for attempt in range(1, self.path_attempts + 1):
            try:
                steps = await self._path_attempt(current, target, max_length, cancel)
            except OracleError as e:
                logger.warning(f"Path attempt {attempt} hit an oracle failure: {e.reason}")
                continue
            if steps is not None:
                logger.info(
                    f"Path {current.label} -> {target.label} found on attempt {attempt} "
                    f"({len(steps)} steps)"
                )
                return steps

        logger.info(f"No path {current.label} -> {target.label} within {max_length} steps")
        return None

    async def _path_attempt(
        self,
        current: Entity,
        target: Entity,
        max_length: int,
        cancel: CancelEvent | None,
    ) -> list[WalkStep] | None:
        steps: list[WalkStep] = []
        visited = {current.id}
        position = current

        while len(steps) < max_length:
            link = await self.links.find_shared_edge(position, target, cancel)
            if link is not None:
                film = Film(id=link.film_id, title=link.title, poster_url=link.poster_url)
                steps.append(WalkStep(from_entity=position, via_film=film, to_entity=target))
                return steps
            if len(steps) + 1 >= max_length:
                return None

            step = await self._step(position, visited, cancel)
            if step is None:
                return None
            steps.append(step)
            if step.to_entity.id == target.id:
                return steps
            visited.add(step.to_entity.id)
            position = step.to_entity

        return None

    async def next_hint(
        self,
        solution: list[WalkStep],
        current: Entity,
        target: Entity,
        hints_used: int = 0,
        cancel: CancelEvent | None = None,
    ) -> HintResult:
        """
        Next hint for a player standing on ``current``.

        Odd-numbered hints reveal the film of the next step, even-numbered
        hints reveal the next actor. When ``current`` is not on the solution
        path, a fresh path is computed from it and returned in the result
        (``recomputed=True``) so the caller can replace its stale solution.
        If no path can be found the hint degrades to encouragement.

        Args:
            solution: The caller's current solution path
            current: Actor the player is standing on
            target: Actor the player must reach
            hints_used: Hints already given in this game

        Returns:
            The hint.
        """
        number = hints_used + 1
        remaining = self._remaining_from(solution, current)
        recomputed = False

        if remaining is None:
            remaining = await self.generate_path_from_position(
                current, target, self.hint_path_max_length, cancel
            )
            recomputed = True
            if not remaining:
                return HintResult(number=number, kind=HintKind.ENCOURAGEMENT, actor=target)

        step = remaining[0]
        if number % 2 == 1:
            return HintResult(
                number=number,
                kind=HintKind.FILM,
                film=step.via_film,
                solution=remaining,
                recomputed=recomputed,
            )
        return HintResult(
            number=number,
            kind=HintKind.ACTOR,
            actor=step.to_entity,
            solution=remaining,
            recomputed=recomputed,
        )

    @staticmethod
    def _remaining_from(solution: list[WalkStep], current: Entity) -> list[WalkStep] | None:
        for index, step in enumerate(solution):
            if step.from_entity.id == current.id:
                return solution[index:]
        return None
