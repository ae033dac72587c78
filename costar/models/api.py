"""
Response models for API endpoints.

"Not found" gameplay outcomes are ordinary 200 responses carrying a
status or a null field; only failures use the error envelope.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from costar.graph.models import ActorRecord, CoStar, Entity, ResolvedLink, WalkStep


class ResolveResponse(BaseModel):
    """
    Outcome of resolving a typed name.

    Attributes:
        status: found, not_found, or oracle_error (retry later)
        entity: The actor when found
        corrected_name: Spelling suggested by the correction collaborator
        reason: Oracle failure cause when status is oracle_error
    """

    status: Literal["found", "not_found", "oracle_error"]
    entity: Entity | None = None
    corrected_name: str | None = None
    reason: str | None = None


class LinkResponse(BaseModel):
    linked: bool
    link: ResolvedLink | None = None


class PathResponse(BaseModel):
    found: bool
    path: list[WalkStep] = Field(default_factory=list)


class OpponentMoveResponse(BaseModel):
    """The AI's move; ``move`` is null when no valid move exists (human wins)."""

    move: CoStar | None = None
    human_wins: bool = False


class OpponentHintsResponse(BaseModel):
    suggestions: list[CoStar] = Field(default_factory=list)


class StartActorResponse(BaseModel):
    actor: Entity | None = None


class GraphSummaryResponse(BaseModel):
    """Counts and histogram of the loaded snapshot."""

    actor_count: int
    connection_count: int
    download_date: str | None = None
    distribution: dict[str, int] = Field(default_factory=dict)


class ShortestPathResponse(BaseModel):
    connected: bool
    steps: int = 0
    path: list[ActorRecord] = Field(default_factory=list)


class DeletedResponse(BaseModel):
    deleted: bool


class CacheClearedResponse(BaseModel):
    removed: int


class HighScoreResponse(BaseModel):
    high_score: int
    new_record: bool | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    graph_loaded: bool = False
