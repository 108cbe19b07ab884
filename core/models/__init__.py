# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains schemas for data validation:
# - photo.py: Photo rows and upload responses
# - animation.py: Animation rows, animate request and response shapes
# - provider.py: Decoded fal.ai job status variants
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Photo Models
# -----------------------------------------------------------------------------
from .photo import (
    PhotoRecord,
    PhotoStatus,
    SignedUrlResponse,
    UploadPhotoResponse,
)

# -----------------------------------------------------------------------------
# Animation Models
# -----------------------------------------------------------------------------
from .animation import (
    PENDING_MESSAGE,
    AnimateCompletedResponse,
    AnimatePendingResponse,
    AnimateResponse,
    AnimateRequest,
    AnimationRecord,
    AnimationResponse,
    AnimationStatus,
)

# -----------------------------------------------------------------------------
# Provider Models
# -----------------------------------------------------------------------------
from .provider import (
    JobCompleted,
    JobFailed,
    JobRunning,
    JobStatus,
    JobUnrecognized,
    ProviderState,
    extract_video_url,
    parse_status_response,
    parse_submit_response,
)

__all__ = [
    # Photo
    "PhotoRecord",
    "PhotoStatus",
    "SignedUrlResponse",
    "UploadPhotoResponse",
    # Animation
    "PENDING_MESSAGE",
    "AnimateCompletedResponse",
    "AnimatePendingResponse",
    "AnimateResponse",
    "AnimateRequest",
    "AnimationRecord",
    "AnimationResponse",
    "AnimationStatus",
    # Provider
    "JobCompleted",
    "JobFailed",
    "JobRunning",
    "JobStatus",
    "JobUnrecognized",
    "ProviderState",
    "extract_video_url",
    "parse_status_response",
    "parse_submit_response",
]
