"""
Unified error schema for the co-star API.

Provides consistent error codes, messages, and hints for all API responses.
The three gameplay-relevant failures stay distinguishable for the UI:
an oracle outage asks the player to retry, exhausted generation offers a
new generation, and an unknown name prompts for another one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Gameplay errors
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"
    GENERATION_EXHAUSTED = "GENERATION_EXHAUSTED"
    WALK_CANCELLED = "WALK_CANCELLED"

    # Local graph errors
    GRAPH_NOT_LOADED = "GRAPH_NOT_LOADED"
    INVALID_GRAPH = "INVALID_GRAPH"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class APIError:
    """
    Structured error response for API endpoints.

    Attributes:
        code: Standardized error code from ErrorCode enum
        message: Human-readable error message
        detail: Optional technical details for debugging
        hint: Optional suggestion for resolving the error
        retryable: Whether the client should retry the request
    """

    code: ErrorCode
    message: str
    detail: str | None = None
    hint: str | None = None
    retryable: bool = False

    def to_dict(self) -> dict[str, dict[str, str | bool]]:
        """
        Convert error to dictionary format for JSON responses.

        Returns:
            Dictionary with 'error' key containing error details
        """
        error_dict: dict[str, str | bool] = {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
        }

        if self.detail is not None:
            error_dict["detail"] = self.detail

        if self.hint is not None:
            error_dict["hint"] = self.hint

        return {"error": error_dict}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Predefined Error Factories
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def entity_not_found_error(query: str) -> APIError:
    """Create error for a name that resolves to no actor."""
    return APIError(
        code=ErrorCode.ENTITY_NOT_FOUND,
        message="No actor found",
        detail=f"Query: {query}",
        hint="Check the spelling or try another actor",
        retryable=False,
    )


def oracle_unavailable_error(detail: str | None = None) -> APIError:
    """Create error for an unreachable knowledge graph."""
    return APIError(
        code=ErrorCode.ORACLE_UNAVAILABLE,
        message="The knowledge graph service is unavailable",
        detail=detail,
        hint="Please try again in a moment",
        retryable=True,
    )


def generation_exhausted_error(attempts: int) -> APIError:
    """Create error for a challenge the walk could not build."""
    return APIError(
        code=ErrorCode.GENERATION_EXHAUSTED,
        message="Could not generate a challenge",
        detail=f"All {attempts} attempts failed",
        hint="Generate a new challenge, or widen the path length range",
        retryable=True,
    )


def walk_cancelled_error() -> APIError:
    """Create error for a walk abandoned by the caller."""
    return APIError(
        code=ErrorCode.WALK_CANCELLED,
        message="The operation was cancelled",
        retryable=True,
    )


def graph_not_loaded_error() -> APIError:
    """Create error for analysis without a local snapshot."""
    return APIError(
        code=ErrorCode.GRAPH_NOT_LOADED,
        message="No local graph loaded",
        hint="Download a graph or import a saved one first",
        retryable=False,
    )


def invalid_graph_error(detail: str | None = None) -> APIError:
    """Create error for an unreadable graph document."""
    return APIError(
        code=ErrorCode.INVALID_GRAPH,
        message="The graph document is invalid",
        detail=detail,
        hint="Import a file previously exported from this application",
        retryable=False,
    )


def validation_error(field: str, reason: str) -> APIError:
    """Create error for validation failures."""
    return APIError(
        code=ErrorCode.VALIDATION_ERROR,
        message=f"Validation failed for field: {field}",
        detail=reason,
        hint="Check the input format and try again",
        retryable=False,
    )


def internal_error(detail: str | None = None) -> APIError:
    """Create generic internal error."""
    return APIError(
        code=ErrorCode.INTERNAL_ERROR,
        message="An internal error occurred",
        detail=detail,
        hint="Please try again or contact support",
        retryable=False,
    )
