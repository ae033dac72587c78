"""
API router modules.

This package contains FastAPI routers organized by feature area:
- actors: Name resolution and shared-film links
- challenges: Challenge generation, path recovery, hints and guesses
- opponent: AI opponent moves and suggestions
- graph: Local snapshot download, import/export and analysis
- scores: Solo high score
- system: Health check and resolution cache
"""

from costar.api.routers.actors import router as actors_router
from costar.api.routers.challenges import router as challenges_router
from costar.api.routers.graph import router as graph_router
from costar.api.routers.opponent import router as opponent_router
from costar.api.routers.scores import router as scores_router
from costar.api.routers.system import router as system_router

__all__ = [
    "actors_router",
    "challenges_router",
    "graph_router",
    "opponent_router",
    "scores_router",
    "system_router",
]
