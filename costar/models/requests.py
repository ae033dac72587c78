"""
Request models for API endpoints.

Entities round-trip through the caller: the UI sends back the actors it
received from earlier responses, so gameplay endpoints accept full
Entity objects rather than bare ids.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, model_validator

from costar.core.validators import is_valid_entity_id
from costar.graph.models import Entity, WalkStep
from costar.graph.normalization import sanitize_label

# Maximum length for a typed actor name
MAX_NAME_LENGTH = 200

# Longest challenge the generator will be asked for
MAX_CHALLENGE_LENGTH = 12


def _clean_name(value: str) -> str:
    cleaned = sanitize_label(value)
    if not cleaned:
        raise ValueError("Name cannot be empty")
    return cleaned


# Control characters stripped, surrounding whitespace trimmed, never empty
ActorName = Annotated[str, AfterValidator(_clean_name)]


def _check_entity_id(value: str) -> str:
    if not is_valid_entity_id(value):
        raise ValueError(f"Invalid actor ID {value!r} (expected Q<digits>)")
    return value


def _check_entity(entity: Entity) -> Entity:
    _check_entity_id(entity.id)
    return entity


def _check_step(step: WalkStep) -> WalkStep:
    _check_entity(step.from_entity)
    _check_entity(step.to_entity)
    return step


# Ids sent back by the caller end up inside oracle queries
EntityId = Annotated[str, AfterValidator(_check_entity_id)]
EntityRef = Annotated[Entity, AfterValidator(_check_entity)]
StepRef = Annotated[WalkStep, AfterValidator(_check_step)]


class ResolveRequest(BaseModel):
    """Free-text actor name to resolve."""

    name: ActorName = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class LinkRequest(BaseModel):
    actor_a: EntityRef
    actor_b: EntityRef


class ChallengeRequest(BaseModel):
    """
    Challenge generation options.

    Lengths default to the configured range when omitted. Naming both
    actors skips the walk entirely.
    """

    min_length: int | None = Field(default=None, ge=1, le=MAX_CHALLENGE_LENGTH)
    max_length: int | None = Field(default=None, ge=1, le=MAX_CHALLENGE_LENGTH)
    start_name: ActorName | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    end_name: ActorName | None = Field(default=None, max_length=MAX_NAME_LENGTH)

    @model_validator(mode="after")
    def _check_bounds(self) -> ChallengeRequest:
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.max_length < self.min_length
        ):
            raise ValueError("max_length must be >= min_length")
        return self


class PathRequest(BaseModel):
    from_entity: EntityRef
    to_entity: EntityRef
    max_length: int = Field(default=4, ge=1, le=MAX_CHALLENGE_LENGTH)


class HintRequest(BaseModel):
    """
    Hint request for a running challenge.

    Attributes:
        solution: The caller's current solution path (may be stale or empty)
        path: Actors played so far; the last one is the player's position
        target: Actor to reach
        hints_used: Hints already given in this game
    """

    solution: list[StepRef] = Field(default_factory=list)
    path: list[EntityRef] = Field(..., min_length=1)
    target: EntityRef
    hints_used: int = Field(default=0, ge=0)


class GuessRequest(BaseModel):
    path: list[EntityRef] = Field(..., min_length=1)
    target: EntityRef
    guess_name: ActorName = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class OpponentRequest(BaseModel):
    """The actor to answer plus every actor id already used."""

    last: EntityRef
    excluded: list[EntityId] = Field(default_factory=list)


class DownloadRequest(BaseModel):
    hub_count: int | None = Field(default=None, ge=1, le=1000)
    max_total: int | None = Field(default=None, ge=1, le=20000)


class ScoreRequest(BaseModel):
    score: int = Field(..., ge=0)
