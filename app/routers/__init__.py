# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - photos.py: Photo upload and signed URL endpoints
# - animations.py: Animation submit, status and resume endpoints
# - functions.py: Edge-function URL aliases for the mobile client
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import photos
from . import animations
from . import functions

__all__ = [
    "health",
    "photos",
    "animations",
    "functions",
]
