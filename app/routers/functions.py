# =============================================================================
# app/routers/functions.py - Edge Function Compatible Routes
# =============================================================================
# The mobile client was built against two Supabase edge functions. These
# aliases keep those URLs working against this service:
#
#   POST /functions/v1/uploadPhoto   -> photos.upload_photo
#   POST /functions/v1/animatePhoto  -> animations.animate_photo
# =============================================================================

from fastapi import APIRouter

from app.routers import animations, photos
from core.models.animation import AnimateResponse
from core.models.photo import UploadPhotoResponse

router = APIRouter()

router.add_api_route(
    "/uploadPhoto",
    photos.upload_photo,
    methods=["POST"],
    response_model=UploadPhotoResponse,
    name="upload_photo_function",
)

router.add_api_route(
    "/animatePhoto",
    animations.animate_photo,
    methods=["POST"],
    response_model=AnimateResponse,
    name="animate_photo_function",
)
