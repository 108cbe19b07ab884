# =============================================================================
# app/routers/photos.py - Photo Upload Endpoints
# =============================================================================
# POST /photos/upload                 multipart: album_id, user_id, file
# GET  /photos/{photo_id}/signed-url  time-limited download URL
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.config import settings
from app.dependencies import PhotoServiceDep
from app.exceptions import ValidationError
from core.models.photo import SignedUrlResponse, UploadPhotoResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _form_text(value: object) -> str | None:
    """Form value as stripped text; files and blanks count as missing."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


@router.post("/upload", response_model=UploadPhotoResponse)
async def upload_photo(request: Request, photos: PhotoServiceDep):
    """
    Upload a photo into a user's folder.

    The multipart body is parsed by hand so that a wrong content type or a
    missing field is reported as a plain 400 with the field name.

    Returns the inserted `photos` row.
    """
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        raise ValidationError("Expected multipart/form-data")

    form = await request.form()

    album_id = _form_text(form.get("album_id"))
    user_id = _form_text(form.get("user_id"))
    upload = form.get("file")

    filename = None
    content = None
    file_type = None
    if isinstance(upload, UploadFile):
        filename = upload.filename or "upload"
        content = await upload.read()
        file_type = upload.content_type
        logger.info(f"Processing upload: {filename} ({len(content)} bytes)")

    row = await run_in_threadpool(
        photos.upload_photo,
        album_id,
        user_id,
        filename,
        content,
        file_type,
    )

    return {"success": True, "photo": row}


@router.get("/{photo_id}/signed-url", response_model=SignedUrlResponse)
def get_signed_url(
    photo_id: Annotated[str, Path(description="Photo UUID")],
    photos: PhotoServiceDep,
):
    """Signed download URL for the stored photo."""
    url = photos.get_signed_url(photo_id)
    return {
        "success": True,
        "photo_id": photo_id,
        "signed_url": url,
        "expires_in": settings.SIGNED_URL_TTL_SECONDS,
    }
