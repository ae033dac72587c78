"""
Solo high score endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from costar.api.deps import get_score_service
from costar.api.errors import handle_endpoint_error
from costar.models.api import DeletedResponse, HighScoreResponse
from costar.models.requests import ScoreRequest
from costar.services import ScoreService

router = APIRouter(prefix="/scores", tags=["scores"])


@router.get("/high", response_model=HighScoreResponse)
def get_high_score(
    scores: ScoreService = Depends(get_score_service),
) -> HighScoreResponse:
    return HighScoreResponse(high_score=scores.get_high_score())


@router.post("/high", response_model=HighScoreResponse)
def submit_score(
    request: ScoreRequest,
    scores: ScoreService = Depends(get_score_service),
) -> HighScoreResponse:
    """Record a finished game's score; ``new_record`` tells whether it won."""
    try:
        new_record = scores.save_score(request.score)
        return HighScoreResponse(high_score=scores.get_high_score(), new_record=new_record)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_endpoint_error(e, "submit_score")


@router.delete("/high", response_model=DeletedResponse)
def reset_high_score(
    scores: ScoreService = Depends(get_score_service),
) -> DeletedResponse:
    scores.reset()
    return DeletedResponse(deleted=True)
