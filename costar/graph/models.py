"""
Graph data models: entities, films, walk steps, and the local graph snapshot.

Two families live here:
- Oracle-facing records (Entity, Film, ResolvedLink, CoStar) produced by
  the oracle client after normalizing raw query rows
- Challenge records (WalkStep, Challenge, HintResult, MoveVerdict)
- The materialized local graph (ActorRecord, Connection, ActorGraph),
  serialized with camelCase keys so snapshots stay compatible with the
  browser collaborator's JSON format

Entities and films are frozen: once resolved they are only referenced.
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from costar.core.validators import ENTITY_URI_PREFIX


class Entity(BaseModel):
    """
    An actor resolved from the knowledge graph.

    Attributes:
        id: Stable oracle identifier (e.g. "Q2263")
        label: Display name
        image_url: Portrait URL, if the oracle has one
        description: Short oracle description used for disambiguation
        popularity: Notability ordinal (sitelink count) when known
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    image_url: str | None = None
    description: str | None = None
    popularity: int | None = None

    @property
    def wikidata_url(self) -> str:
        """Human-facing page for this entity."""
        return f"https://www.wikidata.org/wiki/{self.id}"

    @property
    def uri(self) -> str:
        """Concept URI used inside graph queries."""
        return f"{ENTITY_URI_PREFIX}{self.id}"


class Film(BaseModel):
    """A film (graph edge) shared by two or more actors."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: str
    title: str = Field(validation_alias=AliasChoices("title", "label"))
    poster_url: str | None = None


class ResolvedLink(BaseModel):
    """The first shared film found between two entities."""

    film_id: str
    title: str
    poster_url: str | None = None


class CoStar(BaseModel):
    """An actor reachable from another through the given film."""

    entity: Entity
    film: Film


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Challenge Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class WalkStep(BaseModel):
    """One hop of a challenge path: from_entity --via_film--> to_entity."""

    from_entity: Entity
    via_film: Film
    to_entity: Entity


class Challenge(BaseModel):
    """
    A start/end pair plus a known solution path between them.

    The path may be empty when both ends were chosen by the caller; the
    challenge is then validated move by move instead of pre-solved.

    Invariants (checked on construction):
        - consecutive steps chain (step[i].to_entity == step[i+1].from_entity)
        - no entity id appears twice along the path
        - the path starts at ``start`` and ends at ``end``
    """

    start: Entity
    end: Entity
    path: list[WalkStep] = Field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.path)

    @model_validator(mode="after")
    def _check_path(self) -> Challenge:
        if not self.path:
            return self
        if self.path[0].from_entity.id != self.start.id:
            raise ValueError("path does not begin at the start entity")
        if self.path[-1].to_entity.id != self.end.id:
            raise ValueError("path does not finish at the end entity")
        for previous, step in zip(self.path, self.path[1:]):
            if previous.to_entity.id != step.from_entity.id:
                raise ValueError("path steps do not chain")
        seen = [self.path[0].from_entity.id] + [s.to_entity.id for s in self.path]
        if len(seen) != len(set(seen)):
            raise ValueError("path revisits an entity")
        return self


class HintKind(str, Enum):
    """What a hint reveals."""

    FILM = "film"  # a film the next actor appears in
    ACTOR = "actor"  # the next actor outright
    ENCOURAGEMENT = "encouragement"  # no path could be computed


class HintResult(BaseModel):
    """
    A hint for the player's next move in a challenge.

    Attributes:
        number: 1-based hint counter (odd hints reveal films, even reveal actors)
        kind: What this hint reveals
        film: Film to look for (FILM hints)
        actor: Next actor (ACTOR hints)
        solution: The solution path the hint was taken from; replaces the
            caller's stale solution when ``recomputed`` is True
        recomputed: Whether a fresh path was generated from the player's position
    """

    number: int
    kind: HintKind
    film: Film | None = None
    actor: Entity | None = None
    solution: list[WalkStep] = Field(default_factory=list)
    recomputed: bool = False


class MoveStatus(str, Enum):
    """Verdict on a guessed actor during play."""

    UNKNOWN_ACTOR = "unknown_actor"
    ALREADY_USED = "already_used"
    NO_SHARED_FILM = "no_shared_film"
    ACCEPTED = "accepted"
    REACHED_TARGET = "reached_target"


class MoveVerdict(BaseModel):
    """Result of judging one guess against the caller-owned path."""

    status: MoveStatus
    entity: Entity | None = None
    link: ResolvedLink | None = None

    @property
    def is_mistake(self) -> bool:
        return self.status in (
            MoveStatus.UNKNOWN_ACTOR,
            MoveStatus.ALREADY_USED,
            MoveStatus.NO_SHARED_FILM,
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Local Graph Snapshot
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class SnapshotModel(BaseModel):
    """Base for snapshot records: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActorRecord(SnapshotModel):
    """
    An actor in the materialized graph.

    Attributes:
        id: Oracle identifier
        label: Sanitized display name
        degree: Number of distinct co-actors (== len(co_actors))
        movie_count: Number of distinct films discovered for this actor
        movies: Film identifiers discovered for this actor
        co_actors: Identifiers of actors sharing at least one film
    """

    id: str
    label: str
    degree: int = 0
    movie_count: int = 0
    movies: list[str] = Field(default_factory=list)
    co_actors: list[str] = Field(default_factory=list)


class Connection(SnapshotModel):
    """An undirected actor pair with every film they share in the snapshot."""

    actor1: str
    actor2: str
    movies: list[Film] = Field(default_factory=list)


class GraphMetadata(SnapshotModel):
    """Summary attached to a snapshot (or to an extracted subgraph)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    actor_count: int = 0
    connection_count: int = 0
    download_date: str | None = None
    distribution: dict[str, int] = Field(default_factory=dict)
    center_actor: str | None = None
    depth: int | None = None


class ActorGraph(SnapshotModel):
    """A read-mostly snapshot of part of the co-star graph."""

    actors: list[ActorRecord] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)

    def actor_index(self) -> dict[str, ActorRecord]:
        """Map actor id to record."""
        return {actor.id: actor for actor in self.actors}


class BridgeScore(BaseModel):
    """An actor with the number of unconnected neighbour pairs it joins."""

    actor: ActorRecord
    score: int


class GraphStats(BaseModel):
    """Size and degree statistics for a snapshot."""

    actor_count: int
    connection_count: int
    avg_degree: float
    max_degree: int
    min_degree: int
    density: float


class GraphAnalysis(BaseModel):
    """Hubs, bridges and statistics computed over one snapshot."""

    hubs: list[ActorRecord]
    bridges: list[BridgeScore]
    stats: GraphStats
