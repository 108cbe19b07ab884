# =============================================================================
# core/models/photo.py - Photo Schemas
# =============================================================================
# These models define the API contract for photo operations:
# - PhotoStatus: Lifecycle label stored on each row
# - PhotoRecord: A row from the `photos` table
# - UploadPhotoResponse: Output of the upload handler
# - SignedUrlResponse: Output of the signed URL lookup
#
# A photo is owned by the user in `user_id`; its storage path always starts
# with that user's folder so bucket policies can scope access.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PhotoStatus(str, Enum):
    """
    Lifecycle label for a photo.

    The column is free text; only "uploaded" is written by this service.
    """
    UPLOADED = "uploaded"


class PhotoRecord(BaseModel):
    """
    Schema for a `photos` row as returned by Supabase.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "user_id": "9b2f...",
            "file_path": "9b2f.../3f1c....jpg",
            "album_id": "a1b2...",
            "status": "uploaded",
            "created_at": "2025-12-22T18:19:23Z"
        }
    """

    model_config = ConfigDict(from_attributes=True, extra="allow")

    id: str = Field(
        ...,
        description="Unique photo identifier"
    )

    user_id: str | None = Field(
        default=None,
        description="Owning user (auth.users.id)"
    )

    # Always "<user_id>/<uuid>.<ext>"
    file_path: str = Field(
        ...,
        min_length=1,
        description="Object path inside the uploads bucket"
    )

    album_id: str | None = Field(
        default=None,
        description="Album the photo was uploaded into"
    )

    status: str | None = Field(
        default=None,
        description="Lifecycle label, e.g. 'uploaded'"
    )

    created_at: datetime | None = Field(
        default=None,
        description="Timestamp when the row was created"
    )

    @property
    def owner_folder(self) -> str:
        """First path segment of the stored object."""
        return self.file_path.split("/", 1)[0]


class UploadPhotoResponse(BaseModel):
    """Response body for a successful upload."""
    success: bool = True
    photo: PhotoRecord


class SignedUrlResponse(BaseModel):
    """Response body for a signed URL lookup."""
    success: bool = True
    photo_id: str
    signed_url: str
    expires_in: int
