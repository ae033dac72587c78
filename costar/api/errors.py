"""
Centralized exception handling for API endpoints.

Maps engine exceptions to HTTP responses using the unified APIError
schema:
- UnknownActorError -> 404 ENTITY_NOT_FOUND
- OracleError -> 503 ORACLE_UNAVAILABLE (retryable)
- GenerationExhaustedError -> 503 GENERATION_EXHAUSTED (retryable, distinct)
- GraphNotLoadedError -> 404 GRAPH_NOT_LOADED
- InvalidGraphError -> 400 INVALID_GRAPH
- ValueError -> 400 VALIDATION_ERROR
- anything else -> 500 INTERNAL_ERROR (details logged, not returned)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from costar.graph.errors import (
    GenerationExhaustedError,
    GraphNotLoadedError,
    InvalidGraphError,
    OracleError,
    UnknownActorError,
    WalkCancelledError,
)
from costar.models.errors import (
    APIError,
    ErrorCode,
    entity_not_found_error,
    generation_exhausted_error,
    graph_not_loaded_error,
    internal_error,
    invalid_graph_error,
    oracle_unavailable_error,
    validation_error,
    walk_cancelled_error,
)

logger = logging.getLogger(__name__)


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Return 422 with structured validation error details using APIError schema.

    Args:
        request: The incoming HTTP request
        exc: The validation exception (must be RequestValidationError)

    Returns:
        JSONResponse with validation error details
    """
    if not isinstance(exc, RequestValidationError):
        raise exc

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        api_error = validation_error(field=field, reason=first_error["msg"])
        return JSONResponse(status_code=422, content=api_error.to_dict())

    api_error = APIError(
        code=ErrorCode.VALIDATION_ERROR,
        message="Validation failed",
        hint="Check the request format and try again",
    )
    return JSONResponse(status_code=422, content=api_error.to_dict())


def handle_endpoint_error(e: Exception, context: str) -> HTTPException:
    """
    Convert exceptions to safe HTTP responses with structured error details.

    Args:
        e: The exception that occurred
        context: Description of the endpoint context for logging

    Returns:
        HTTPException with appropriate status code and APIError-formatted detail
    """
    if isinstance(e, HTTPException):
        return e

    if isinstance(e, UnknownActorError):
        logger.info(f"{context}: unknown actor '{e.query}'")
        return HTTPException(status_code=404, detail=entity_not_found_error(e.query).to_dict())

    if isinstance(e, OracleError):
        logger.warning(f"{context}: oracle unavailable - {e.reason}")
        return HTTPException(
            status_code=503, detail=oracle_unavailable_error(e.reason).to_dict()
        )

    if isinstance(e, GenerationExhaustedError):
        logger.warning(f"{context}: {e}")
        return HTTPException(
            status_code=503, detail=generation_exhausted_error(e.attempts).to_dict()
        )

    if isinstance(e, WalkCancelledError):
        logger.info(f"{context}: cancelled")
        return HTTPException(status_code=409, detail=walk_cancelled_error().to_dict())

    if isinstance(e, GraphNotLoadedError):
        return HTTPException(status_code=404, detail=graph_not_loaded_error().to_dict())

    if isinstance(e, InvalidGraphError):
        logger.warning(f"{context}: invalid graph - {e}")
        return HTTPException(status_code=400, detail=invalid_graph_error(str(e)).to_dict())

    if isinstance(e, ValueError):
        logger.warning(f"{context}: Value error - {e}")
        api_error = APIError(
            code=ErrorCode.VALIDATION_ERROR,
            message=str(e),
            hint="Check the input parameters and try again",
        )
        return HTTPException(status_code=400, detail=api_error.to_dict())

    # Log full error details but don't expose to client
    logger.error(f"{context}: {type(e).__name__}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=internal_error(type(e).__name__).to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers on the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
