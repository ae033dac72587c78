"""
Exception hierarchy for the path discovery engine.

"Not found" outcomes (unknown name, no shared film, no AI move) are
ordinary return values, never exceptions. The classes here cover the
cases a caller must be able to tell apart from "not found".
"""

from __future__ import annotations


class CostarError(Exception):
    """Base class for all engine errors."""


class OracleError(CostarError):
    """
    The remote graph oracle could not answer (transport or HTTP failure).

    Attributes:
        reason: Short human-readable cause
        status_code: HTTP status when the oracle responded with an error
    """

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class GenerationExhaustedError(CostarError):
    """The random walk could not build a valid challenge within its attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Challenge generation failed after {attempts} attempts")
        self.attempts = attempts


class WalkCancelledError(CostarError):
    """The caller set the cancellation event of a running walk."""


class CacheQuotaExceededError(CostarError):
    """A cache store refused a write because its storage quota is full."""


class InvalidGraphError(CostarError):
    """An imported graph document could not be parsed or validated."""


class UnknownActorError(CostarError):
    """
    A name supplied to set up an operation resolved to no actor.

    Raised by services where the caller needs an actor to proceed
    (challenge setup, local graph lookups); gameplay guesses report an
    unknown name as a verdict instead.
    """

    def __init__(self, query: str) -> None:
        super().__init__(f"No actor found for '{query}'")
        self.query = query


class GraphNotLoadedError(CostarError):
    """No local graph snapshot has been downloaded or imported."""
