# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles object paths and upload/remove/sign operations for the two
# buckets:
# - uploads bucket:    "<user_id>/<uuid>.<ext>"   (source photos)
# - animations bucket: "<album_id>/<photo_id>-<epoch_ms>.mp4"
#
# The first path segment of a photo is the owner's id; bucket policies
# depend on it.
# =============================================================================

import logging
import time
import uuid

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.exceptions import SigningError, StorageError

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPE = "video/mp4"


def photo_extension(filename: str) -> str:
    """
    Extension used for the stored object.

    Text after the last dot; a name without dots is used whole.
    """
    return filename.rsplit(".", 1)[-1]


def build_photo_path(user_id: str, filename: str) -> str:
    """Build "<user_id>/<random uuid>.<ext>" for a new upload."""
    return f"{user_id}/{uuid.uuid4()}.{photo_extension(filename)}"


def build_video_path(album_id: str | None, photo_id: str, now_ms: int | None = None) -> str:
    """Build "<album_id>/<photo_id>-<epoch ms>.mp4" for a generated video."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{album_id}/{photo_id}-{now_ms}.mp4"


class StorageService:
    """
    Service for Supabase Storage operations.

    Translates wrapper errors into StorageError / SigningError.
    """

    def __init__(
        self,
        supabase: SupabaseClient,
        uploads_bucket: str = "user-uploads",
        animations_bucket: str = "animations",
        signed_url_ttl: int = 3600,
    ):
        self.supabase = supabase
        self.uploads_bucket = uploads_bucket
        self.animations_bucket = animations_bucket
        self.signed_url_ttl = signed_url_ttl

    def upload_photo(self, path: str, content: bytes, content_type: str | None) -> str:
        """
        Upload photo bytes to the uploads bucket.

        Raises:
            StorageError: If upload fails
        """
        try:
            return self.supabase.upload_object(
                self.uploads_bucket,
                path,
                content,
                content_type or "application/octet-stream",
            )
        except SupabaseClientError as e:
            logger.error(f"Photo upload failed: {e}")
            raise StorageError(e.message, path=path) from e

    def upload_video(self, path: str, content: bytes) -> str:
        """
        Upload video bytes to the animations bucket.

        Raises:
            StorageError: If upload fails
        """
        try:
            return self.supabase.upload_object(
                self.animations_bucket,
                path,
                content,
                VIDEO_CONTENT_TYPE,
            )
        except SupabaseClientError as e:
            logger.error(f"Video upload failed: {e}")
            raise StorageError(e.message, path=path) from e

    def sign_photo_url(self, path: str) -> str:
        """
        Create a signed download URL for a stored photo.

        Raises:
            SigningError: If storage fails or returns no URL
        """
        try:
            url = self.supabase.create_signed_url(
                self.uploads_bucket,
                path,
                self.signed_url_ttl,
            )
        except SupabaseClientError as e:
            logger.error(f"Signing failed for {path}: {e}")
            raise SigningError(path, e.message) from e

        if not url:
            raise SigningError(path)
        return url

    def delete_video(self, path: str) -> None:
        """
        Remove a video from the animations bucket.

        Raises:
            StorageError: If removal fails
        """
        try:
            self.supabase.remove_object(self.animations_bucket, path)
        except SupabaseClientError as e:
            raise StorageError(e.message, path=path) from e
