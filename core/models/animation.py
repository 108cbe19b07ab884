# =============================================================================
# core/models/animation.py - Animation Schemas
# =============================================================================
# These models define the API contract for animation jobs:
# - AnimationStatus: Enum for row states
# - AnimationRecord: A row from the `animations` table
# - AnimateRequest: Input for the animate endpoint
# - AnimateCompletedResponse / AnimatePendingResponse: the two success shapes,
#   joined as AnimateResponse
#
# Row invariants (enforced on AnimationRecord):
# - completed rows always have a video_path
# - pending rows always have a fal_job_id and no video_path
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


PENDING_MESSAGE = "Animation still being generated. Check back in ~3 minutes."


class AnimationStatus(str, Enum):
    """
    Possible states for an animation row.

    - pending: provider job still running when the poll window closed
    - completed: video stored, video_path set
    - failed: provider reported FAILED while resuming a pending job

    Flow: (submit) -> pending -> completed | failed
          (submit) -> completed
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class AnimationRecord(BaseModel):
    """
    Schema for an `animations` row as returned by Supabase.

    Example:
        {
            "id": "660e8400-e29b-41d4-a716-446655440001",
            "photo_id": "550e8400-e29b-41d4-a716-446655440000",
            "video_path": "a1b2.../550e8400...-1734891563000.mp4",
            "model_used": "v1.6",
            "fal_job_id": "req_123",
            "status": "completed",
            "created_at": "2025-12-22T18:20:00Z"
        }
    """

    model_config = ConfigDict(from_attributes=True, extra="allow")

    id: str = Field(
        ...,
        description="Unique animation identifier"
    )

    photo_id: str = Field(
        ...,
        description="Photo this animation was generated from"
    )

    video_path: str | None = Field(
        default=None,
        description="Object path inside the animations bucket"
    )

    model_used: str | None = Field(
        default=None,
        description="Model label, e.g. 'v1.6'"
    )

    fal_job_id: str | None = Field(
        default=None,
        description="Provider request id used for polling"
    )

    status: AnimationStatus = Field(
        ...,
        description="Row state"
    )

    error: Any | None = Field(
        default=None,
        description="Provider payload for failed jobs"
    )

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def check_status_invariants(self) -> "AnimationRecord":
        if self.status == AnimationStatus.COMPLETED and not self.video_path:
            raise ValueError("completed animation requires video_path")
        if self.status == AnimationStatus.PENDING:
            if self.video_path:
                raise ValueError("pending animation cannot have video_path")
            if not self.fal_job_id:
                raise ValueError("pending animation requires fal_job_id")
        return self


class AnimateRequest(BaseModel):
    """Request body for POST /animations."""

    photo_id: str = Field(
        ...,
        min_length=1,
        description="Photo to animate"
    )


class AnimateCompletedResponse(BaseModel):
    """Success shape when the video is ready."""
    success: bool = True
    status: Literal["completed"] = "completed"
    animation: AnimationRecord


class AnimatePendingResponse(BaseModel):
    """Success shape when the job outlived the poll window."""
    success: bool = True
    status: Literal["pending"] = "pending"
    message: str = PENDING_MESSAGE
    animation_id: str | None = None
    fal_job_id: str | None = None


# Body of POST /animations and POST /animations/{id}/resume
AnimateResponse = AnimateCompletedResponse | AnimatePendingResponse


class AnimationResponse(BaseModel):
    """Response body for GET /animations/{id}."""
    success: bool = True
    animation: AnimationRecord
