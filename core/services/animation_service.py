# =============================================================================
# core/services/animation_service.py - Animation Job Controller
# =============================================================================
# Turns a stored photo into a short video via fal.ai:
#
#   SUBMITTING -> POLLING -> COMPLETED  video stored, "completed" row inserted
#                         -> PENDING    poll window closed, "pending" row inserted
#                         -> FAILED     provider said FAILED, nothing written
#
# The poll window is bounded (interval x attempts, ~400s by default) so the
# request handler always answers. Pending rows are picked up later by
# resume_animation(), either from a client retry or the Celery sweep.
#
# Row updates only apply while the row is still pending, so concurrent
# resumes settle it once. A pending row older than `pending_max_age` that
# still has no result is marked failed, and the next animate request for
# its photo submits a new job.
#
# Everything runs sequentially in the caller's thread; `sleep` is injected
# so tests don't wait.
# =============================================================================

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import TypeAdapter

from lib.clients import AppClients
from lib.fal_client import FalClient, FalClientError
from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.animation import PENDING_MESSAGE, AnimationStatus
from core.models.provider import JobCompleted, JobFailed, JobStatus, JobUnrecognized
from core.services.storage_service import StorageService, build_video_path
from app.exceptions import (
    MissingOutputError,
    NotFoundError,
    PersistenceError,
    ProviderJobFailedError,
    StorageError,
    SubmissionError,
)

logger = logging.getLogger(__name__)

_TIMESTAMP = TypeAdapter(datetime)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _completed(row: dict[str, Any]) -> dict[str, Any]:
    return {"status": AnimationStatus.COMPLETED.value, "animation": row}


def _pending(row: dict[str, Any] | None, request_id: str) -> dict[str, Any]:
    return {
        "status": AnimationStatus.PENDING.value,
        "message": PENDING_MESSAGE,
        "animation_id": row.get("id") if row else None,
        "fal_job_id": request_id,
    }


class AnimationService:
    """
    Animation job controller.

    Example:
        service = AnimationService.from_clients(clients, settings)
        outcome = service.animate_photo(photo_id)
        if outcome["status"] == "completed":
            print(outcome["animation"]["video_path"])
    """

    def __init__(
        self,
        supabase: SupabaseClient,
        fal: FalClient,
        storage: StorageService,
        model_used: str = "v1.6",
        poll_interval: float = 4.0,
        poll_max_attempts: int = 100,
        resume_max_attempts: int = 1,
        pending_max_age: float = 3600.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], int] = _now_ms,
    ):
        self.supabase = supabase
        self.fal = fal
        self.storage = storage
        self.model_used = model_used
        self.poll_interval = poll_interval
        self.poll_max_attempts = poll_max_attempts
        self.resume_max_attempts = resume_max_attempts
        self.pending_max_age = pending_max_age
        self.sleep = sleep
        self.clock = clock

    @classmethod
    def from_clients(cls, clients: AppClients, settings: Any, **kwargs: Any) -> "AnimationService":
        storage = StorageService(
            clients.supabase,
            uploads_bucket=settings.UPLOADS_BUCKET,
            animations_bucket=settings.ANIMATIONS_BUCKET,
            signed_url_ttl=settings.SIGNED_URL_TTL_SECONDS,
        )
        return cls(
            supabase=clients.supabase,
            fal=clients.fal,
            storage=storage,
            model_used=settings.FAL_MODEL_VERSION,
            poll_interval=settings.POLL_INTERVAL_SECONDS,
            poll_max_attempts=settings.POLL_MAX_ATTEMPTS,
            resume_max_attempts=settings.RESUME_MAX_ATTEMPTS,
            pending_max_age=settings.PENDING_MAX_AGE_SECONDS,
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _get_photo(self, photo_id: str) -> dict[str, Any]:
        try:
            photo = self.supabase.fetch_photo(photo_id, columns="id, file_path, album_id")
        except SupabaseClientError as e:
            raise PersistenceError(e.message, table="photos") from e
        if not photo:
            raise NotFoundError("photo", photo_id)
        return photo

    def get_animation(self, animation_id: str) -> dict[str, Any]:
        """
        Fetch an animation row.

        Raises:
            NotFoundError: If no row matches
        """
        try:
            row = self.supabase.fetch_animation(animation_id)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, table="animations") from e
        if not row:
            raise NotFoundError("animation", animation_id)
        return row

    # -------------------------------------------------------------------------
    # Workflow steps
    # -------------------------------------------------------------------------

    def _submit(self, image_url: str) -> str:
        try:
            return self.fal.submit(image_url)
        except FalClientError as e:
            raise SubmissionError(e.message, details=e.details) from e

    def _poll(
        self,
        request_id: str,
        max_attempts: int,
        wait_first: bool = True,
    ) -> JobCompleted | JobFailed | None:
        """
        Poll until COMPLETED or FAILED, or until attempts run out (None).
        """
        for attempt in range(1, max_attempts + 1):
            if wait_first or attempt > 1:
                self.sleep(self.poll_interval)

            status: JobStatus = self.fal.status(request_id)

            if isinstance(status, (JobCompleted, JobFailed)):
                logger.info(f"Job {request_id} finished as {type(status).__name__} after {attempt} polls")
                return status
            if isinstance(status, JobUnrecognized):
                logger.warning(f"Job {request_id}: unrecognized status payload {status.payload!r}")
            else:
                logger.debug(f"Job {request_id}: {status.state} (poll {attempt}/{max_attempts})")

        logger.info(f"Job {request_id} still running after {max_attempts} polls")
        return None

    def _store_video(self, photo: dict[str, Any], job: JobCompleted) -> str:
        """Download the finished video and store it; returns the storage path."""
        video_url = job.video_url
        if not video_url:
            raise MissingOutputError(job.request_id, job.payload)

        try:
            content = self.fal.download(video_url)
        except FalClientError as e:
            raise StorageError(e.message) from e

        path = build_video_path(photo.get("album_id"), photo["id"], now_ms=self.clock())
        self.storage.upload_video(path, content)
        return path

    def _insert_animation(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            return self.supabase.insert_animation(data)
        except SupabaseClientError as e:
            logger.error(f"Animation insert failed: {e}")
            raise PersistenceError(e.message, table="animations") from e

    def _update_pending(self, animation_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """Update a row that is still pending; None if it already settled."""
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            return self.supabase.update_animation(
                animation_id,
                data,
                only_if_status=AnimationStatus.PENDING.value,
            )
        except SupabaseClientError as e:
            logger.error(f"Animation update failed: {e}")
            raise PersistenceError(e.message, table="animations") from e

    def _record_failure(self, row: dict[str, Any], error: Any) -> dict[str, Any] | None:
        """
        Mark a pending row failed.

        Returns None when this call failed it, or the current row when
        another resume settled it first.
        """
        updated = self._update_pending(row["id"], {
            "status": AnimationStatus.FAILED.value,
            "error": error,
        })
        if updated is None:
            return self.get_animation(row["id"])
        logger.info(f"Animation {row['id']} marked failed")
        return None

    def _discard_video(self, path: str) -> None:
        try:
            self.storage.delete_video(path)
        except StorageError as e:
            logger.warning(f"Could not remove unused video {path}: {e.message}")

    def _is_stale(self, row: dict[str, Any]) -> bool:
        created_at = row.get("created_at")
        if not created_at:
            return False
        created = _TIMESTAMP.validate_python(created_at)
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        age = self.clock() / 1000 - created.timestamp()
        return age > self.pending_max_age

    @staticmethod
    def _settled(row: dict[str, Any]) -> dict[str, Any]:
        """Outcome for a row some earlier call already finished."""
        status = row.get("status")
        if status == AnimationStatus.FAILED.value:
            raise ProviderJobFailedError(row.get("fal_job_id"), row.get("error"))
        if status == AnimationStatus.PENDING.value:
            return _pending(row, row.get("fal_job_id"))
        return _completed(row)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def animate_photo(self, photo_id: str) -> dict[str, Any]:
        """
        Animate a photo.

        Returns:
            {"status": "completed", "animation": <row>} or
            {"status": "pending", "message": ..., "animation_id": ..., "fal_job_id": ...}

        Raises:
            NotFoundError: No photo with this id
            SigningError: Photo path couldn't be signed
            SubmissionError: Provider rejected the job
            ProviderJobFailedError: Provider reported FAILED
            MissingOutputError: Completed job had no video URL
            StorageError / PersistenceError: Writing the result failed
        """
        photo = self._get_photo(photo_id)

        try:
            existing = self.supabase.fetch_pending_animation_for_photo(photo_id)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, table="animations") from e

        if existing and not self._is_stale(existing):
            logger.info(f"Photo {photo_id} already has pending animation {existing['id']}, resuming")
            return self.resume_animation(
                existing["id"],
                max_attempts=self.poll_max_attempts,
                wait_first=True,
            )

        if existing:
            # One last poll; a stale row without a result is marked failed
            logger.info(f"Pending animation {existing['id']} for photo {photo_id} is stale")
            try:
                return self.resume_animation(existing["id"])
            except (ProviderJobFailedError, MissingOutputError):
                logger.info(f"Submitting a new job for photo {photo_id}")

        signed_url = self.storage.sign_photo_url(photo["file_path"])
        request_id = self._submit(signed_url)

        result = self._poll(request_id, self.poll_max_attempts)

        if isinstance(result, JobFailed):
            raise ProviderJobFailedError(request_id, result.payload)

        if result is None:
            row = self._insert_animation({
                "photo_id": photo_id,
                "model_used": self.model_used,
                "fal_job_id": request_id,
                "status": AnimationStatus.PENDING.value,
            })
            logger.info(f"Recorded pending animation {row.get('id')} for job {request_id}")
            return _pending(row, request_id)

        video_path = self._store_video(photo, result)
        row = self._insert_animation({
            "photo_id": photo_id,
            "model_used": self.model_used,
            "video_path": video_path,
            "fal_job_id": request_id,
            "status": AnimationStatus.COMPLETED.value,
        })
        logger.info(f"Animation {row.get('id')} completed at {video_path}")
        return _completed(row)

    def resume_animation(
        self,
        animation_id: str,
        max_attempts: int | None = None,
        wait_first: bool = False,
    ) -> dict[str, Any]:
        """
        Continue polling a pending animation's provider job.

        Completed rows are returned as they are; failed rows raise
        ProviderJobFailedError with the stored error. A COMPLETED job
        updates the row to completed. A FAILED job, a completed job with no
        video URL, or a stale row still without a result marks the row
        failed and raises.

        Raises:
            NotFoundError: No animation (or its photo) with this id
            ProviderJobFailedError: Provider reported FAILED, the row was
                already failed, or the row expired
            MissingOutputError / StorageError / PersistenceError
        """
        row = self.get_animation(animation_id)
        if row.get("status") != AnimationStatus.PENDING.value:
            return self._settled(row)

        request_id = row["fal_job_id"]
        result = self._poll(
            request_id,
            max_attempts or self.resume_max_attempts,
            wait_first=wait_first,
        )

        if result is None:
            if not self._is_stale(row):
                return _pending(row, request_id)
            error = {
                "status": "EXPIRED",
                "detail": f"no result within {int(self.pending_max_age)}s",
            }
            current = self._record_failure(row, error)
            if current:
                return self._settled(current)
            raise ProviderJobFailedError(request_id, error)

        if isinstance(result, JobFailed):
            current = self._record_failure(row, result.payload)
            if current:
                return self._settled(current)
            raise ProviderJobFailedError(request_id, result.payload)

        photo = self._get_photo(row["photo_id"])
        try:
            video_path = self._store_video(photo, result)
        except MissingOutputError:
            current = self._record_failure(row, {"status": "NO_OUTPUT", "detail": result.payload})
            if current:
                return self._settled(current)
            raise
        except StorageError as e:
            if self._is_stale(row):
                self._record_failure(row, {"status": "STORAGE_FAILED", "detail": e.message})
            raise

        updated = self._update_pending(animation_id, {
            "status": AnimationStatus.COMPLETED.value,
            "video_path": video_path,
        })
        if updated is None:
            logger.info(f"Animation {animation_id} settled elsewhere, dropping {video_path}")
            self._discard_video(video_path)
            return self._settled(self.get_animation(animation_id))

        logger.info(f"Animation {animation_id} completed at {video_path}")
        return _completed(updated)

    def pending_animation_ids(self, limit: int) -> list[str]:
        """Ids of pending animations, oldest first."""
        try:
            rows = self.supabase.fetch_pending_animations(limit=limit)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, table="animations") from e
        return [row["id"] for row in rows]
