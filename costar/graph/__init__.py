"""
Co-star graph engine.

Entity resolution, common-link discovery, random-walk challenge
generation, the AI opponent, and materialization/analysis of a local
graph snapshot, all backed by one explicit resolution cache.
"""

from costar.graph.cache import (
    FileCacheStore,
    MemoryCacheStore,
    ResolutionCache,
)
from costar.graph.errors import (
    CostarError,
    GenerationExhaustedError,
    GraphNotLoadedError,
    InvalidGraphError,
    OracleError,
    UnknownActorError,
    WalkCancelledError,
)
from costar.graph.models import (
    ActorGraph,
    ActorRecord,
    Challenge,
    Connection,
    CoStar,
    Entity,
    Film,
    ResolvedLink,
    WalkStep,
)
from costar.graph.outcomes import Found, NotFound, OracleFailure, Resolution

__all__ = [
    # Cache
    "ResolutionCache",
    "MemoryCacheStore",
    "FileCacheStore",
    # Errors
    "CostarError",
    "OracleError",
    "GenerationExhaustedError",
    "WalkCancelledError",
    "InvalidGraphError",
    "UnknownActorError",
    "GraphNotLoadedError",
    # Models
    "Entity",
    "Film",
    "ResolvedLink",
    "CoStar",
    "WalkStep",
    "Challenge",
    "ActorRecord",
    "Connection",
    "ActorGraph",
    # Outcomes
    "Found",
    "NotFound",
    "OracleFailure",
    "Resolution",
]
