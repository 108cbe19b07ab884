# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# The client bundle lives on app.state (created in the lifespan); services
# are cheap wrappers built per request.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings, get_settings
from core.services.animation_service import AnimationService
from core.services.photo_service import PhotoService
from lib.clients import AppClients


def get_clients(request: Request) -> AppClients:
    """
    Get the process-wide client bundle.

    Set by the lifespan handler in app.main.
    """
    return request.app.state.clients


def get_photo_service(
    clients: Annotated[AppClients, Depends(get_clients)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PhotoService:
    return PhotoService.from_clients(clients, settings)


def get_animation_service(
    clients: Annotated[AppClients, Depends(get_clients)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AnimationService:
    return AnimationService.from_clients(clients, settings)


# Type aliases for dependency injection
ClientsDep = Annotated[AppClients, Depends(get_clients)]
PhotoServiceDep = Annotated[PhotoService, Depends(get_photo_service)]
AnimationServiceDep = Annotated[AnimationService, Depends(get_animation_service)]
