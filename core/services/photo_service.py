# =============================================================================
# core/services/photo_service.py - Photo Upload Business Logic
# =============================================================================
# Stores an uploaded photo and records it in the `photos` table.
#
# The object write and the row insert are independent: if the insert fails
# the stored object is left in place.
# =============================================================================

import logging
from typing import Any

from lib.clients import AppClients
from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.photo import PhotoStatus
from core.services.storage_service import StorageService, build_photo_path
from app.exceptions import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


class PhotoService:
    """
    Service for photo operations.

    Provides a clean interface between API routes and storage/database.
    """

    def __init__(
        self,
        supabase: SupabaseClient,
        storage: StorageService,
        max_upload_bytes: int | None = None,
    ):
        self.supabase = supabase
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes

    @classmethod
    def from_clients(cls, clients: AppClients, settings: Any) -> "PhotoService":
        storage = StorageService(
            clients.supabase,
            uploads_bucket=settings.UPLOADS_BUCKET,
            animations_bucket=settings.ANIMATIONS_BUCKET,
            signed_url_ttl=settings.SIGNED_URL_TTL_SECONDS,
        )
        return cls(clients.supabase, storage, max_upload_bytes=settings.max_upload_size_bytes)

    def upload_photo(
        self,
        album_id: str | None,
        user_id: str | None,
        filename: str | None,
        content: bytes | None,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Store a photo and insert its row.

        Args:
            album_id: Album the photo belongs to
            user_id: Owning user; becomes the first path segment
            filename: Original filename (extension is kept)
            content: File bytes
            content_type: MIME type sent by the client

        Returns:
            The inserted photo row

        Raises:
            ValidationError: If a field is missing or the file is too large
            StorageError: If the object write fails
            PersistenceError: If the row insert fails
        """
        if not album_id:
            raise ValidationError("album_id missing")
        if not user_id:
            raise ValidationError("user_id missing")
        if content is None or filename is None:
            raise ValidationError("file missing")

        if self.max_upload_bytes is not None and len(content) > self.max_upload_bytes:
            raise ValidationError(
                "file too large",
                details={"size_bytes": len(content), "max_bytes": self.max_upload_bytes},
            )

        path = build_photo_path(user_id, filename)
        self.storage.upload_photo(path, content, content_type)

        try:
            row = self.supabase.insert_photo({
                "album_id": album_id,
                "file_path": path,
                "status": PhotoStatus.UPLOADED.value,
                "user_id": user_id,
            })
        except SupabaseClientError as e:
            logger.error(f"Photo row insert failed, object left at {path}: {e}")
            raise PersistenceError(e.message, table="photos") from e

        logger.info(f"Uploaded photo {row.get('id')} for user {user_id}")
        return row

    def get_photo(self, photo_id: str) -> dict[str, Any]:
        """
        Fetch a photo row.

        Raises:
            NotFoundError: If no row matches
            PersistenceError: If the query fails
        """
        try:
            photo = self.supabase.fetch_photo(photo_id)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, table="photos") from e

        if not photo:
            raise NotFoundError("photo", photo_id)
        return photo

    def get_signed_url(self, photo_id: str) -> str:
        """
        Signed download URL for a photo's stored object.

        Raises:
            NotFoundError: If no row matches
            SigningError: If storage can't sign the path
        """
        photo = self.get_photo(photo_id)
        return self.storage.sign_photo_url(photo["file_path"])
