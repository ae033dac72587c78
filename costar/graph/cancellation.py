"""
Cooperative cancellation for multi-step oracle loops.

Loops check the flag before every oracle round trip, so a caller that
abandons a walk stops further remote requests at the next step.
"""

from __future__ import annotations

import asyncio

from costar.graph.errors import WalkCancelledError

CancelEvent = asyncio.Event


def check_cancelled(cancel: CancelEvent | None) -> None:
    """Raise WalkCancelledError if ``cancel`` is set."""
    if cancel is not None and cancel.is_set():
        raise WalkCancelledError("Walk cancelled by caller")
