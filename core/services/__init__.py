# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import StorageService, build_photo_path, build_video_path
from .photo_service import PhotoService
from .animation_service import AnimationService

__all__ = [
    "StorageService",
    "build_photo_path",
    "build_video_path",
    "PhotoService",
    "AnimationService",
]
