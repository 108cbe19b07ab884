# =============================================================================
# app/routers/animations.py - Animation Job Endpoints
# =============================================================================
# POST /animations                       {"photo_id": ...} submit + poll
# GET  /animations/{animation_id}        stored row, no provider call
# POST /animations/{animation_id}/resume poll a pending job again
#
# Handlers are plain `def` so the blocking poll loop runs in the threadpool
# instead of stalling the event loop.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import AnimationServiceDep
from core.models.animation import AnimateRequest, AnimateResponse, AnimationResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AnimateResponse)
def animate_photo(body: AnimateRequest, animations: AnimationServiceDep):
    """
    Animate a photo with the image-to-video model.

    Blocks for up to the poll window (~400s by default). Returns either:
    - {"success": true, "status": "completed", "animation": {...}}
    - {"success": true, "status": "pending", "message": "...", "animation_id": "..."}

    A photo that already has a pending job resumes that job instead of
    submitting a new one.
    """
    logger.info(f"Animate request for photo {body.photo_id}")
    outcome = animations.animate_photo(body.photo_id)
    return {"success": True, **outcome}


@router.get("/{animation_id}", response_model=AnimationResponse)
def get_animation(
    animation_id: Annotated[str, Path(description="Animation UUID")],
    animations: AnimationServiceDep,
):
    """Return the stored animation row."""
    return {"success": True, "animation": animations.get_animation(animation_id)}


@router.post("/{animation_id}/resume", response_model=AnimateResponse)
def resume_animation(
    animation_id: Annotated[str, Path(description="Animation UUID")],
    animations: AnimationServiceDep,
):
    """
    Poll a pending animation's provider job.

    Returns the same shapes as POST /animations. A completed row is
    returned unchanged. A failed row, or one that fails during this poll,
    answers 500 with the error body (code PROVIDER_JOB_FAILED) and the
    stored error under details.
    """
    outcome = animations.resume_animation(animation_id)
    return {"success": True, **outcome}
