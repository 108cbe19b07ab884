# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for the Supabase operations the
# animator needs:
# - photos: insert, fetch
# - animations: insert, update, fetch, pending lookups
# - storage: upload, remove, signed URLs
#
# One wrapper is built per process by the entry point (FastAPI lifespan or
# Celery worker init) and handed to the services that need it.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   db = SupabaseClient.from_settings(settings)
#   photo = db.fetch_photo(photo_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import Client, create_client

# Set up logging for this module
logger = logging.getLogger(__name__)

PHOTOS_TABLE = "photos"
ANIMATIONS_TABLE = "animations"

# PostgREST "no rows" for .single(), Postgres "invalid uuid" for bad ids
_NOT_FOUND_CODES = ("PGRST116", "22P02")


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a machine-readable code and the query context so callers can
    map it onto the API error taxonomy.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


def _normalize_id(value: str | UUID) -> str:
    """Convert UUID to string for queries."""
    return str(value) if isinstance(value, UUID) else value


def _is_not_found(error: Exception) -> bool:
    text = str(error)
    return any(code in text for code in _NOT_FOUND_CODES)


class SupabaseClient:
    """
    Typed wrapper around a supabase-py Client.

    The underlying client is created with the service_role key, which
    bypasses Row Level Security; ownership is enforced by the storage path
    layout and the policies in supabase/migrations.

    Example:
        db = SupabaseClient(create_client(url, key))
        row = db.insert_photo({"user_id": "...", "file_path": "...", ...})
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Any) -> "SupabaseClient":
        """
        Create a wrapper from application settings.

        Raises:
            SupabaseClientError: If client creation fails
        """
        try:
            client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_KEY,
            )
            logger.info("Supabase client initialized successfully")
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
            ) from e
        return cls(client)

    # -------------------------------------------------------------------------
    # Generic helpers
    # -------------------------------------------------------------------------

    def _fetch_one(
        self,
        table: str,
        row_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        row_id_str = _normalize_id(row_id)
        try:
            response = (
                self.client.table(table)
                .select(columns)
                .eq("id", row_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, "id": row_id_str},
            ) from e

    def _insert(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.client.table(table).insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table},
            ) from e

        if not response.data:
            raise SupabaseClientError(
                message=f"Insert into {table} returned no data",
                code="INSERT_NO_DATA",
                details={"table": table},
            )
        return response.data[0]

    # -------------------------------------------------------------------------
    # Photos
    # -------------------------------------------------------------------------

    def fetch_photo(
        self,
        photo_id: str | UUID,
        columns: str = "id, user_id, file_path, album_id, status, created_at",
    ) -> dict[str, Any] | None:
        """
        Fetch a photo row by ID.

        Returns:
            Photo dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        return self._fetch_one(PHOTOS_TABLE, photo_id, columns)

    def insert_photo(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a photo row and return it as stored.

        Raises:
            SupabaseClientError: If insert fails
        """
        row = self._insert(PHOTOS_TABLE, data)
        logger.debug(f"Inserted photo {row.get('id')}")
        return row

    # -------------------------------------------------------------------------
    # Animations
    # -------------------------------------------------------------------------

    def fetch_animation(self, animation_id: str | UUID) -> dict[str, Any] | None:
        """Fetch an animation row by ID, or None if not found."""
        return self._fetch_one(ANIMATIONS_TABLE, animation_id)

    def fetch_pending_animation_for_photo(
        self,
        photo_id: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Fetch the newest pending animation for a photo.

        Used to avoid submitting a second provider job while one is
        still running.
        """
        photo_id_str = _normalize_id(photo_id)
        try:
            response = (
                self.client.table(ANIMATIONS_TABLE)
                .select("*")
                .eq("photo_id", photo_id_str)
                .eq("status", "pending")
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            if _is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch pending animation: {e}",
                code="FETCH_PENDING_FAILED",
                details={"photo_id": photo_id_str},
            ) from e

        rows = response.data or []
        return rows[0] if rows else None

    def fetch_pending_animations(self, limit: int = 25) -> list[dict[str, Any]]:
        """
        Fetch pending animations, oldest first.

        Raises:
            SupabaseClientError: If query fails
        """
        try:
            response = (
                self.client.table(ANIMATIONS_TABLE)
                .select("*")
                .eq("status", "pending")
                .order("created_at")
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list pending animations: {e}",
                code="LIST_PENDING_FAILED",
                details={"limit": limit},
            ) from e

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)} pending animations")
        return rows

    def insert_animation(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert an animation row and return it as stored.

        Raises:
            SupabaseClientError: If insert fails
        """
        row = self._insert(ANIMATIONS_TABLE, data)
        logger.debug(f"Inserted animation {row.get('id')} ({row.get('status')})")
        return row

    def update_animation(
        self,
        animation_id: str | UUID,
        data: dict[str, Any],
        only_if_status: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Update an animation row in place and return the new version.

        With `only_if_status`, the row is only touched while it still has
        that status; None is returned when it no longer does.

        Raises:
            SupabaseClientError: If the update fails, or an unconditional
                update matches no row
        """
        animation_id_str = _normalize_id(animation_id)
        try:
            query = (
                self.client.table(ANIMATIONS_TABLE)
                .update(data)
                .eq("id", animation_id_str)
            )
            if only_if_status is not None:
                query = query.eq("status", only_if_status)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update animation: {e}",
                code="UPDATE_FAILED",
                details={"animation_id": animation_id_str},
            ) from e

        if not response.data:
            if only_if_status is not None:
                logger.info(f"Animation {animation_id_str} is no longer {only_if_status}, update skipped")
                return None
            raise SupabaseClientError(
                message="Update matched no animation row",
                code="UPDATE_NO_DATA",
                details={"animation_id": animation_id_str},
            )
        return response.data[0]

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
    ) -> str:
        """
        Upload bytes to a storage bucket.

        Returns:
            The storage path

        Raises:
            SupabaseClientError: If upload fails
        """
        try:
            self.client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upload {path}: {e}",
                code="UPLOAD_FAILED",
                details={"bucket": bucket, "path": path},
            ) from e

        logger.info(f"Uploaded {len(content)} bytes to {bucket}/{path}")
        return path

    def remove_object(self, bucket: str, path: str) -> None:
        """
        Delete an object from a bucket.

        Raises:
            SupabaseClientError: If removal fails
        """
        try:
            self.client.storage.from_(bucket).remove([path])
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to remove {path}: {e}",
                code="REMOVE_FAILED",
                details={"bucket": bucket, "path": path},
            ) from e

    def create_signed_url(
        self,
        bucket: str,
        path: str,
        expires_in: int,
    ) -> str | None:
        """
        Create a time-limited download URL for a private object.

        Returns:
            The signed URL, or None if storage returned none

        Raises:
            SupabaseClientError: If the storage call fails
        """
        try:
            result = self.client.storage.from_(bucket).create_signed_url(path, expires_in)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to sign {path}: {e}",
                code="SIGN_FAILED",
                details={"bucket": bucket, "path": path},
            ) from e

        if not isinstance(result, dict):
            return None
        return result.get("signedURL") or result.get("signedUrl")

    def ping(self, bucket: str) -> None:
        """Touch the database and storage; raises on failure."""
        self.client.table(PHOTOS_TABLE).select("id").limit(1).execute()
        self.client.storage.get_bucket(bucket)
