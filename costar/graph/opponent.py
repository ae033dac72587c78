"""
AI opponent: answers the player's actor with a random valid co-star.

``respond`` returning None is the designed win condition for the human:
no notable co-star remains outside the exclusion set. Oracle failures
therefore propagate from ``respond`` (an unreachable oracle must not be
mistaken for a win), while ``get_hints`` is a pure read that degrades
to an empty list.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from costar.graph.cancellation import CancelEvent, check_cancelled
from costar.graph.errors import OracleError
from costar.graph.models import CoStar, Entity
from costar.oracle.base import GraphOracle

logger = logging.getLogger(__name__)


class Opponent:
    """
    Picks co-stars for the AI's turn and for player hints.

    Args:
        oracle: Graph oracle
        rng: Random source
        min_sitelinks: Notability floor for AI moves
        candidate_limit: Maximum co-stars fetched per AI move
        hint_min_sitelinks: Notability floor for hint suggestions
        hint_candidate_limit: Maximum co-stars fetched per hint request
        hint_count: Suggestions returned per hint request
    """

    def __init__(
        self,
        oracle: GraphOracle,
        rng: random.Random | None = None,
        *,
        min_sitelinks: int = 30,
        candidate_limit: int = 30,
        hint_min_sitelinks: int = 40,
        hint_candidate_limit: int = 20,
        hint_count: int = 3,
    ) -> None:
        self.oracle = oracle
        self.rng = rng or random.Random()
        self.min_sitelinks = min_sitelinks
        self.candidate_limit = candidate_limit
        self.hint_min_sitelinks = hint_min_sitelinks
        self.hint_candidate_limit = hint_candidate_limit
        self.hint_count = hint_count

    async def _candidates(
        self, last: Entity, excluded: Iterable[str], min_sitelinks: int, limit: int
    ) -> list[CoStar]:
        excluded_ids = set(excluded) | {last.id}
        neighbors = await self.oracle.get_neighbors(
            last.id, excluded_ids, min_sitelinks=min_sitelinks, limit=limit
        )
        return [n for n in neighbors if n.entity.id not in excluded_ids]

    async def respond(
        self,
        last: Entity,
        excluded: Iterable[str] = (),
        cancel: CancelEvent | None = None,
    ) -> CoStar | None:
        """
        The AI's move after ``last``.

        Args:
            last: Actor the AI must answer
            excluded: Actor ids already used in the game
            cancel: Optional cancellation flag

        Returns:
            A co-star and the film linking them, or None if no valid move
            exists (the human wins).

        Raises:
            OracleError: If the oracle cannot be reached
        """
        check_cancelled(cancel)
        candidates = await self._candidates(
            last, excluded, self.min_sitelinks, self.candidate_limit
        )
        if not candidates:
            logger.info(f"No valid AI move after {last.label}")
            return None
        move = self.rng.choice(candidates)
        logger.info(f"AI answers {last.label} with {move.entity.label} ({move.film.title})")
        return move

    async def get_hints(
        self,
        last: Entity,
        excluded: Iterable[str] = (),
        cancel: CancelEvent | None = None,
    ) -> list[CoStar]:
        """
        Up to ``hint_count`` distinct valid co-stars for the player.

        Returns:
            Suggestions in random order; empty on oracle failure.
        """
        check_cancelled(cancel)
        try:
            candidates = await self._candidates(
                last, excluded, self.hint_min_sitelinks, self.hint_candidate_limit
            )
        except OracleError as e:
            logger.warning(f"Could not load hints for {last.label}: {e.reason}")
            return []

        distinct: dict[str, CoStar] = {}
        for candidate in candidates:
            distinct.setdefault(candidate.entity.id, candidate)
        pool = list(distinct.values())
        return self.rng.sample(pool, min(self.hint_count, len(pool)))
