"""
Typed result rows for each oracle query.

The client flattens SPARQL JSON bindings to ``{variable: value}`` dicts
and validates them into these rows immediately, so nothing past the
oracle boundary handles raw response shapes. Identifier fields accept
either concept URIs or bare ids and always hold bare ids.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from costar.core.validators import entity_id_from_uri
from costar.graph.models import Entity, Film
from costar.graph.normalization import sanitize_label


class OracleRow(BaseModel):
    """Base row: camelCase SPARQL variables, unknown variables ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _to_id(value: str) -> str:
    return entity_id_from_uri(value) if isinstance(value, str) else value


# Concept URI or bare id, stored as a bare id
EntityId = Annotated[str, BeforeValidator(_to_id)]


class ActorSearchRow(OracleRow):
    """One candidate from the entity search API (wbsearchentities)."""

    id: str
    label: str = ""
    description: str | None = None


class PopularityRow(OracleRow):
    item: EntityId
    sitelinks: int = 0


class FilmIdRow(OracleRow):
    movie: EntityId


class FilmRow(OracleRow):
    movie: EntityId
    movie_label: str | None = Field(default=None, alias="movieLabel")
    poster: str | None = None

    def to_film(self) -> Film:
        return Film(
            id=self.movie,
            title=sanitize_label(self.movie_label or "") or self.movie,
            poster_url=self.poster,
        )


class ImageRow(OracleRow):
    image: str


class CastRow(OracleRow):
    """An actor credited on a film (also used for the notable-actor pool)."""

    actor: EntityId
    actor_label: str | None = Field(default=None, alias="actorLabel")
    image: str | None = None
    sitelinks: int | None = None

    def to_entity(self) -> Entity:
        return Entity(
            id=self.actor,
            label=sanitize_label(self.actor_label or "") or self.actor,
            image_url=self.image,
            popularity=self.sitelinks,
        )


class NeighborRow(OracleRow):
    """A co-actor of some entity plus the film they share."""

    co_actor: EntityId = Field(alias="coActor")
    co_actor_label: str | None = Field(default=None, alias="coActorLabel")
    movie: EntityId
    movie_label: str | None = Field(default=None, alias="movieLabel")
    image: str | None = None

    def to_entity(self) -> Entity:
        return Entity(
            id=self.co_actor,
            label=sanitize_label(self.co_actor_label or "") or self.co_actor,
            image_url=self.image,
        )

    def to_film(self) -> Film:
        return Film(
            id=self.movie, title=sanitize_label(self.movie_label or "") or self.movie
        )


class GraphRow(OracleRow):
    """One (actor1, actor2, movie) triple from the bulk graph download."""

    actor1: EntityId
    actor1_label: str | None = Field(default=None, alias="actor1Label")
    actor2: EntityId
    actor2_label: str | None = Field(default=None, alias="actor2Label")
    movie: EntityId
    movie_label: str | None = Field(default=None, alias="movieLabel")

