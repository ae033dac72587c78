"""
SPARQL templates for the Wikidata query service.

Every template renders deterministic text for the same arguments so the
rendered query doubles as its cache key.

Vocabulary:
- P106 occupation, P161 cast member, P18 image, P31/P279* instance/subclass
- Q33999 actor, Q10800557 film actor, Q10798782 television actor,
  Q948329 stage actor
- Q11424 film, Q5398426 television series
"""

from __future__ import annotations

from collections.abc import Iterable

ACTOR_OCCUPATIONS = ("Q33999", "Q10800557", "Q10798782", "Q948329")
SCREEN_OCCUPATIONS = ("Q33999", "Q10800557", "Q10798782")
FILM_CLASS = "Q11424"
SERIES_CLASS = "Q5398426"


def _values(ids: Iterable[str]) -> str:
    return " ".join(f"wd:{i}" for i in ids)


def _film_filter(var: str = "?movie") -> str:
    return (
        f"{{ {var} wdt:P31/wdt:P279* wd:{FILM_CLASS} . }} "
        f"UNION {{ {var} wdt:P31/wdt:P279* wd:{SERIES_CLASS} . }}"
    )


def _label_service(languages: str) -> str:
    return f'SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{languages}". }}'


def is_actor_query(entity_id: str) -> str:
    """ASK whether the entity has any acting occupation."""
    branches = " UNION ".join(
        f"{{ wd:{entity_id} wdt:P106 wd:{occupation} . }}"
        for occupation in ACTOR_OCCUPATIONS
    )
    return f"ASK {{ {branches} }}"


def image_query(entity_id: str) -> str:
    return f"SELECT ?image WHERE {{ wd:{entity_id} wdt:P18 ?image . }} LIMIT 1"


def popularity_query(entity_ids: list[str]) -> str:
    """Sitelink counts for a batch of entities."""
    return (
        "SELECT ?item ?sitelinks WHERE { "
        f"VALUES ?item {{ {_values(entity_ids)} }} "
        "?item wikibase:sitelinks ?sitelinks . }"
    )


def actor_films_query(entity_id: str, limit: int = 500) -> str:
    """Every film or series listing the entity as a cast member."""
    return (
        "SELECT DISTINCT ?movie WHERE { "
        f"?movie wdt:P161 wd:{entity_id} . "
        f"{_film_filter()} "
        f"}} LIMIT {limit}"
    )


def film_query(film_id: str, languages: str) -> str:
    """Title and poster of one film."""
    return (
        "SELECT ?movie ?movieLabel ?poster WHERE { "
        f"BIND(wd:{film_id} AS ?movie) "
        "OPTIONAL { ?movie wdt:P18 ?poster . } "
        f"{_label_service(languages)} "
        "} LIMIT 1"
    )


def cast_query(film_id: str, languages: str, min_sitelinks: int, limit: int) -> str:
    """Actors credited on a film with more than ``min_sitelinks`` sitelinks."""
    occupations = ", ".join(f"wd:{o}" for o in SCREEN_OCCUPATIONS)
    return (
        "SELECT DISTINCT ?actor ?actorLabel ?image ?sitelinks WHERE { "
        f"wd:{film_id} wdt:P161 ?actor . "
        "?actor wdt:P106 ?occupation . "
        f"FILTER(?occupation IN ({occupations})) "
        "?actor wikibase:sitelinks ?sitelinks . "
        f"FILTER(?sitelinks > {min_sitelinks}) "
        "OPTIONAL { ?actor wdt:P18 ?image . } "
        f"{_label_service(languages)} "
        f"}} LIMIT {limit}"
    )


def neighbors_query(
    entity_id: str,
    languages: str,
    min_sitelinks: int,
    limit: int,
    excluded: Iterable[str] = (),
) -> str:
    """
    Co-actors of an entity with the film linking them.

    Excluded ids are rendered sorted so the same exclusion set always
    produces the same text.
    """
    occupations = ", ".join(f"wd:{o}" for o in SCREEN_OCCUPATIONS)
    excluded_ids = sorted(set(excluded) - {entity_id})
    exclusion = (
        f"FILTER(?coActor NOT IN ({', '.join(f'wd:{i}' for i in excluded_ids)})) "
        if excluded_ids
        else ""
    )
    return (
        "SELECT DISTINCT ?coActor ?coActorLabel ?movie ?movieLabel ?image WHERE { "
        f"?movie wdt:P161 wd:{entity_id} . "
        "?movie wdt:P161 ?coActor . "
        "?coActor wdt:P106 ?occupation . "
        f"FILTER(?occupation IN ({occupations})) "
        f"FILTER(?coActor != wd:{entity_id}) "
        f"{exclusion}"
        "?coActor wikibase:sitelinks ?sitelinks . "
        f"FILTER(?sitelinks > {min_sitelinks}) "
        f"{_film_filter()} "
        "OPTIONAL { ?coActor wdt:P18 ?image . } "
        f"{_label_service(languages)} "
        f"}} LIMIT {limit}"
    )


def notable_actors_query(languages: str, min_sitelinks: int, limit: int) -> str:
    """Well-known actors with a portrait, used as random starting points."""
    return (
        "SELECT DISTINCT ?actor ?actorLabel ?image ?sitelinks WHERE { "
        "?actor wdt:P106 wd:Q33999 . "
        "?actor wdt:P18 ?image . "
        "?actor wikibase:sitelinks ?sitelinks . "
        f"FILTER(?sitelinks > {min_sitelinks}) "
        f"{_label_service(languages)} "
        f"}} LIMIT {limit}"
    )


def graph_query(hub_count: int, min_films: int, row_limit: int) -> str:
    """
    Hub actors ordered by notability plus every co-actor pair they share.

    Rows are (actor1, actor2, movie) triples, capped at ``row_limit``.
    """
    return (
        "SELECT DISTINCT ?actor1 ?actor1Label ?actor2 ?actor2Label ?movie ?movieLabel WHERE { "
        "{ SELECT ?actor1 WHERE { "
        "?actor1 wdt:P106 wd:Q33999 . "
        "?actor1 wikibase:sitelinks ?sitelinks . "
        "{ SELECT ?actor1 (COUNT(DISTINCT ?m) AS ?movieCount) WHERE { "
        "?m wdt:P161 ?actor1 . "
        f"?m wdt:P31/wdt:P279* wd:{FILM_CLASS} . "
        f"}} GROUP BY ?actor1 HAVING (COUNT(DISTINCT ?m) >= {min_films}) }} "
        f"}} ORDER BY DESC(?sitelinks) LIMIT {hub_count} }} "
        "?movie wdt:P161 ?actor1 . "
        "?movie wdt:P161 ?actor2 . "
        f"?movie wdt:P31/wdt:P279* wd:{FILM_CLASS} . "
        "FILTER(?actor1 != ?actor2) "
        f"{_label_service('en')} "
        f"}} LIMIT {row_limit}"
    )
