"""
Tagged outcome types for entity resolution.

Resolution has three distinguishable results, and callers branch on
them differently: a found entity continues play, a miss prompts the
player for another name, and an oracle failure asks them to retry.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel

from costar.graph.models import Entity


class Found(BaseModel):
    """The name resolved to an actor."""

    kind: Literal["found"] = "found"
    entity: Entity


class NotFound(BaseModel):
    """
    No actor matches the name.

    Attributes:
        query: The name that was searched
        corrected: The spelling suggested by the correction collaborator,
            if one was tried
    """

    kind: Literal["not_found"] = "not_found"
    query: str
    corrected: str | None = None


class OracleFailure(BaseModel):
    """The oracle could not be reached while resolving."""

    kind: Literal["oracle_error"] = "oracle_error"
    reason: str


Resolution = Union[Found, NotFound, OracleFailure]
