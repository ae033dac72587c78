"""
Common-link finder: does a pair of actors share a film?

Each actor's filmography is fetched separately and intersected locally.
Both halves are cached under the actor's own query, so a popular actor's
filmography is fetched once and reused across every pairing it appears in.
Oracle failures propagate: silently answering "no link" could end a game
that should continue.
"""

from __future__ import annotations

import logging

from costar.graph.cancellation import CancelEvent, check_cancelled
from costar.graph.models import Entity, ResolvedLink
from costar.oracle.base import GraphOracle

logger = logging.getLogger(__name__)


class LinkFinder:
    """Finds the first film shared by two actors."""

    def __init__(self, oracle: GraphOracle) -> None:
        self.oracle = oracle

    async def shared_film_ids(
        self, a: Entity, b: Entity, cancel: CancelEvent | None = None
    ) -> list[str]:
        """
        Films both actors appear in, in the oracle's order for ``a``.

        Raises:
            OracleError: If either filmography cannot be fetched
            WalkCancelledError: If ``cancel`` is set between fetches
        """
        check_cancelled(cancel)
        films_a = await self.oracle.get_film_ids(a.id)
        if not films_a:
            return []
        check_cancelled(cancel)
        films_b = set(await self.oracle.get_film_ids(b.id))
        return [film_id for film_id in films_a if film_id in films_b]

    async def find_shared_edge(
        self, a: Entity, b: Entity, cancel: CancelEvent | None = None
    ) -> ResolvedLink | None:
        """
        First shared film between two actors, with its display metadata.

        Args:
            a: First actor (its filmography order decides "first")
            b: Second actor
            cancel: Optional cancellation flag

        Returns:
            The link, or None when the actors share no film.

        Raises:
            OracleError: If the oracle cannot be reached
        """
        shared = await self.shared_film_ids(a, b, cancel)
        if not shared:
            logger.debug(f"No shared film between {a.id} and {b.id}")
            return None

        film_id = shared[0]
        check_cancelled(cancel)
        film = await self.oracle.get_film(film_id)
        logger.debug(f"{a.id} and {b.id} share {len(shared)} film(s); using {film_id}")
        return ResolvedLink(
            film_id=film_id,
            title=film.title if film else film_id,
            poster_url=film.poster_url if film else None,
        )
