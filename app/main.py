# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the photo animator API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.exceptions import (
    AnimatorException,
    animator_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.routers import animations, functions, health, photos
from lib.clients import create_clients

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: build the Supabase and fal.ai clients (unless a bundle was
      already attached, as tests do)
    - Shutdown: close the clients this handler created
    """
    logger.info(f"Starting animator API in {settings.ENVIRONMENT} mode")

    owned = getattr(app.state, "clients", None) is None
    if owned:
        app.state.clients = create_clients(settings)

    yield

    logger.info("Shutting down animator API")
    if owned:
        app.state.clients.close()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Photo Animator API",
        description="""
## Photo Animation Backend

Upload a photo, then turn it into a short video with an image-to-video model.

### How It Works

1. **Upload** - `POST /api/v1/photos/upload` (multipart: album_id, user_id, file)
2. **Animate** - `POST /api/v1/animations` with `{"photo_id": "..."}`
3. **Check back** - if the job is still running the response is `pending`;
   call `POST /api/v1/animations/{id}/resume` later (a background sweep
   also finishes pending jobs)
""",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Photos", "description": "Upload photos and sign download URLs"},
            {"name": "Animations", "description": "Submit, inspect and resume animation jobs"},
            {"name": "Functions", "description": "Edge-function compatible URLs"},
            {"name": "Health", "description": "API health and readiness checks"},
        ],
    )

    # =========================================================================
    # Middleware
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(AnimatorException, animator_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(health.router, prefix="/api/v1", tags=["Health"])
    app.include_router(photos.router, prefix="/api/v1/photos", tags=["Photos"])
    app.include_router(animations.router, prefix="/api/v1/animations", tags=["Animations"])
    app.include_router(functions.router, prefix="/functions/v1", tags=["Functions"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - returns API info."""
        return {
            "name": "Photo Animator API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app


app = create_app()
