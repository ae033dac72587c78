"""
FastAPI application entry point.

Configures and creates the FastAPI application with:
- Service lifecycle management
- Exception handlers
- Router mounting
"""

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables first
load_dotenv()

from costar.core.config import get_settings  # noqa: E402
from costar.core.logging import configure_logging  # noqa: E402

configure_logging(get_settings().log_level)

# Import application components
from costar.api.errors import register_exception_handlers  # noqa: E402
from costar.api.routers import (  # noqa: E402
    actors_router,
    challenges_router,
    graph_router,
    opponent_router,
    scores_router,
    system_router,
)
from costar.services import services_lifespan  # noqa: E402

# Create FastAPI application with service lifecycle management
app = FastAPI(
    title="Co-Star Path Engine",
    description="Actor co-star path discovery over Wikidata: challenges, hints and an AI opponent",
    version="1.0.0",
    lifespan=services_lifespan,
)

# Register exception handlers
register_exception_handlers(app)

# Mount API routers
app.include_router(system_router)
app.include_router(actors_router)
app.include_router(challenges_router)
app.include_router(opponent_router)
app.include_router(graph_router)
app.include_router(scores_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("costar.main:app", host="127.0.0.1", port=8000, reload=True)
