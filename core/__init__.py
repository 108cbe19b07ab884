# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the animation workflow logic:
# - models/: Pydantic schemas and provider status variants
# - services/: Photo upload, storage paths, animation job controller
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable and reusable from both entry points.
# =============================================================================
